"""
Recipeman Serializers.

Payload validation for the write operations and the response shape of
their results. Used as plain validators/renderers; recipeman ships no
views, the host project's HTTP layer wires them up.
"""

from rest_framework import serializers

from recipeman.conf import get_setting
from recipeman.exceptions import RecipeValidationError
from recipeman.models import Recipe, RecipeType, RecipeVariant, SourceType, VariantType


class IngredientLineSerializer(serializers.Serializer):
    """One ingredient line as sent by a caller."""

    source_type = serializers.ChoiceField(choices=SourceType.choices)
    source_id = serializers.CharField(max_length=64)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    name_snapshot = serializers.CharField(max_length=160, required=False, allow_blank=True, default="")
    cost_per_unit = serializers.DecimalField(
        max_digits=14,
        decimal_places=4,
        required=False,
        allow_null=True,
        default=None,
        min_value=0,
    )

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Ingredient quantity must be a positive number.")
        return value


class VariantPayloadSerializer(serializers.Serializer):
    """A variant inside a create-with-variants payload, or on its own."""

    name = serializers.CharField(max_length=160)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=VariantType.choices, required=False, default=VariantType.CUSTOM)
    size_multiplier = serializers.DecimalField(max_digits=8, decimal_places=3, required=False, default=1)
    base_cost_adjustment = serializers.DecimalField(
        max_digits=14, decimal_places=4, required=False, default=0
    )
    crust_type = serializers.CharField(max_length=60, required=False, allow_blank=True, default="")
    ingredients = IngredientLineSerializer(many=True, required=False, default=list)
    is_active = serializers.BooleanField(required=False, default=True)
    metadata = serializers.DictField(required=False, default=dict)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Variant name cannot be empty.")
        return value

    def validate_size_multiplier(self, value):
        if value <= 0:
            raise serializers.ValidationError("Size multiplier must be a positive number.")
        return value


class RecipePayloadSerializer(serializers.Serializer):
    """Recipe fields for direct creation (ingredients may be empty)."""

    name = serializers.CharField(max_length=160)
    custom_name = serializers.CharField(max_length=160, required=False, allow_blank=True, default="")
    slug = serializers.SlugField(max_length=180, required=False, allow_blank=True, default="")
    code = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=RecipeType.choices, required=False, default=RecipeType.FINAL)
    ingredients = IngredientLineSerializer(many=True, required=False, default=list)
    output_quantity = serializers.DecimalField(max_digits=10, decimal_places=3, required=False, default=1)
    is_active = serializers.BooleanField(required=False, default=True)
    metadata = serializers.DictField(required=False, default=dict)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Recipe name is required.")
        return value

    def validate_output_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Yield must be a positive number.")
        return value


class RecipeWithVariantsSerializer(RecipePayloadSerializer):
    """Recipe plus its variations, created as one unit."""

    ingredients = IngredientLineSerializer(many=True, allow_empty=False)
    variations = VariantPayloadSerializer(many=True, required=False, default=list)

    def validate_variations(self, value):
        limit = get_setting("MAX_VARIANTS")
        if limit and len(value) > limit:
            raise serializers.ValidationError(f"Cannot create more than {limit} variations at once.")
        return value


# ── Output ──


class RecipeSerializer(serializers.ModelSerializer):
    """Serializer for Recipe model."""

    class Meta:
        model = Recipe
        fields = [
            "uuid",
            "name",
            "custom_name",
            "slug",
            "code",
            "description",
            "type",
            "ingredients",
            "output_quantity",
            "total_cost",
            "is_active",
            "metadata",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RecipeVariantSerializer(serializers.ModelSerializer):
    """Serializer for RecipeVariant model."""

    recipe = serializers.UUIDField(source="recipe.uuid", read_only=True)

    class Meta:
        model = RecipeVariant
        fields = [
            "uuid",
            "recipe",
            "name",
            "description",
            "type",
            "size_multiplier",
            "base_cost_adjustment",
            "crust_type",
            "ingredients",
            "total_cost",
            "is_active",
            "metadata",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


def validate_payload(serializer_class, data, **kwargs) -> dict:
    """
    Run a payload serializer and return its validated data.

    Raises:
        RecipeValidationError: INVALID_PAYLOAD with the serializer's errors
    """
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        raise RecipeValidationError("INVALID_PAYLOAD", errors=serializer.errors)
    return serializer.validated_data
