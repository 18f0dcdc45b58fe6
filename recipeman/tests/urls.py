"""URLconf for Recipeman tests (admin only; recipeman ships no views)."""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
