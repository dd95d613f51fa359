from .pricing import CustomizationPrice, PriceModifier, customization_price, line_total, option_modifier
from .selection import resolve_selections, selection_summary, validate_required
from .types import ProductCustomization, parse_customization_schema

__all__ = [
    "CustomizationPrice",
    "PriceModifier",
    "ProductCustomization",
    "customization_price",
    "line_total",
    "option_modifier",
    "parse_customization_schema",
    "resolve_selections",
    "selection_summary",
    "validate_required",
]
