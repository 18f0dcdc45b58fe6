"""
Recipeman Exceptions.

All recipeman errors derive from RecipeError for consistent handling.
The three concrete kinds map onto the answers a caller (e.g. an HTTP layer)
has to give: not found, invalid input, conflicting state.
"""

from typing import Any


class RecipeError(Exception):
    """
    Base exception for all Recipeman errors.

    Usage:
        raise RecipeError('UNIT_MISMATCH', expected='g', got='ml')

    Attributes:
        code: Error code (UNIT_MISMATCH, RECIPE_NOT_FOUND, etc.)
        details: Additional context as keyword arguments
    """

    http_status = 500

    def __init__(self, code: str, **details: Any):
        self.code = code
        self.details = details
        message = f"{code}: {details}" if details else code
        super().__init__(message)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, **self.details}

    def __str__(self) -> str:
        name = type(self).__name__
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{name}({self.code}: {details_str})"
        return f"{name}({self.code})"


class RecipeNotFound(RecipeError):
    """A referenced inventory item, recipe or variant does not exist."""

    http_status = 404


class RecipeValidationError(RecipeError):
    """Input rejected: bad units, cycles, duplicates, missing fields."""

    http_status = 400


class RecipeConflict(RecipeError):
    """The write would collide with existing state (e.g. slug taken)."""

    http_status = 409


# Common error codes
# INVENTORY_ITEM_NOT_FOUND: Inventory lookup returned nothing
# RECIPE_NOT_FOUND: Recipe does not exist
# VARIANT_NOT_FOUND: RecipeVariant does not exist
# UNIT_MISMATCH: Ingredient unit differs from the item's canonical unit
# INVALID_QUANTITY: Quantity must be positive
# CIRCULAR_DEPENDENCY: Sub-recipe chain reaches back to the parent
# RECIPE_INACTIVE: Recipe is flagged inactive and cannot be resolved
# DUPLICATE_VARIANT_NAME: Variant name already used within the recipe
# INVALID_PAYLOAD: Payload failed serializer validation
# SLUG_EXISTS: Recipe slug already taken
# DUPLICATE: Database unique constraint violated
# SUB_RECIPE_FAILED: Recompute skipped a recipe because a sub-recipe could not be repriced
# INVALID_SORT: Search sort field not allowed
# INVALID_PAGE: Page or limit is not a positive integer
