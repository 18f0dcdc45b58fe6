"""
Tests for inventory adapters and backend configuration.
"""

import pytest
from decimal import Decimal

from django.core.exceptions import ImproperlyConfigured

from recipeman.adapters import DictInventoryBackend, ModelInventoryBackend
from recipeman.conf import get_inventory_backend, get_setting, reset_inventory_backend
from recipeman.models import Recipe
from recipeman.protocols import InventoryBackend, InventoryItemInfo
from recipeman.tests.lines import raw_recipe


class TestDictInventoryBackend:
    def test_add_and_get(self):
        backend = DictInventoryBackend()
        backend.add(7, name="Flour", unit="kg", unit_cost=1.2)

        info = backend.get("7")

        assert info == InventoryItemInfo(item_id="7", name="Flour", unit="kg", unit_cost=Decimal("1.2"))

    def test_missing_and_remove(self):
        backend = DictInventoryBackend()
        backend.add("salt", name="Salt", unit="g")

        backend.remove("salt")

        assert backend.get("salt") is None

    def test_satisfies_protocol(self):
        assert isinstance(DictInventoryBackend(), InventoryBackend)
        assert isinstance(ModelInventoryBackend(model=Recipe), InventoryBackend)


class TestModelInventoryBackend:
    """Any model can act as inventory; a Recipe stands in here."""

    FIELDS = {"id": "slug", "name": "name", "unit": "metadata.unit", "unit_cost": "total_cost"}

    @pytest.fixture
    def stocked(self, db):
        return raw_recipe(
            "Frozen dough ball",
            slug="frozen-dough",
            metadata={"unit": "un"},
            total_cost=Decimal("0.8000"),
        )

    def test_reads_configured_fields(self, stocked):
        backend = ModelInventoryBackend(model=Recipe, fields=self.FIELDS)

        info = backend.get("frozen-dough")

        assert info.name == "Frozen dough ball"
        assert info.unit == "un"
        assert info.unit_cost == Decimal("0.8000")

    def test_missing_item(self, stocked):
        backend = ModelInventoryBackend(model=Recipe, fields=self.FIELDS)

        assert backend.get("nope") is None

    def test_malformed_id_is_missing(self, stocked):
        backend = ModelInventoryBackend(model=Recipe, fields={**self.FIELDS, "id": "uuid"})

        assert backend.get("not-a-uuid") is None

    def test_model_from_settings(self, stocked, settings):
        settings.RECIPEMAN = {
            **settings.RECIPEMAN,
            "INVENTORY_MODEL": "recipeman.Recipe",
            "INVENTORY_FIELDS": self.FIELDS,
        }

        backend = ModelInventoryBackend()

        assert backend.model is Recipe
        assert backend.get("frozen-dough").unit == "un"

    def test_model_required(self, settings):
        settings.RECIPEMAN = {**settings.RECIPEMAN, "INVENTORY_MODEL": None}

        with pytest.raises(ImproperlyConfigured):
            ModelInventoryBackend().model


class TestConf:
    def test_dict_beats_flat_setting(self, settings):
        settings.RECIPEMAN = {**settings.RECIPEMAN, "MAX_VARIANTS": 5}
        settings.RECIPEMAN_MAX_VARIANTS = 9

        assert get_setting("MAX_VARIANTS") == 5

    def test_flat_setting(self, settings):
        settings.RECIPEMAN_TRANSACTIONS = False

        assert get_setting("TRANSACTIONS") is False

    def test_defaults(self):
        assert get_setting("MAX_VARIANTS") == 100
        assert get_setting("TRANSACTIONS") is None

    def test_backend_is_a_singleton(self):
        assert get_inventory_backend() is get_inventory_backend()

        first = get_inventory_backend()
        reset_inventory_backend()

        assert get_inventory_backend() is not first

    def test_backend_required(self, settings):
        settings.RECIPEMAN = {}

        with pytest.raises(ImproperlyConfigured):
            get_inventory_backend()

    def test_backend_import_error(self, settings):
        settings.RECIPEMAN = {"INVENTORY_BACKEND": "recipeman.adapters.missing.Backend"}

        with pytest.raises(ImproperlyConfigured, match="Failed to import"):
            get_inventory_backend()
