# catalog/customization/types.py

"""
CUSTOMIZATION SCHEMA (TAGGED UNION)

Product customization JSON is parsed ONCE at the boundary into frozen option
objects keyed by `type`. Downstream code (pricer, cart, checkout) never reads
the raw JSON.

Wire shape (camelCase, as stored on Product.customization):

    {
        "options": [
            {"id": "c1", "type": "color", "label": "Kolor", "required": true,
             "priceType": "add", "multipleColors": true, "colorLimit": 3,
             "colorOptions": [{"name": "Red", "hex": "#f00", "priceModifier": 5}]},
            ...
        ],
        "nonRefundable": true,
        "nonRefundableReason": "Personalized"
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from core.exceptions import ValidationError
from core.money import money_str

TYPE_COLOR = "color"
TYPE_MATERIAL = "material"
TYPE_SIZE = "size"
TYPE_STRENGTH = "strength"
TYPE_TEXT = "text"
TYPE_FILE = "file"
TYPE_SELECT = "select"

OPTION_TYPES = (
    TYPE_COLOR,
    TYPE_MATERIAL,
    TYPE_SIZE,
    TYPE_STRENGTH,
    TYPE_TEXT,
    TYPE_FILE,
    TYPE_SELECT,
)

# Types whose selection is one or more entries from a fixed choice list
CHOICE_TYPES = (TYPE_COLOR, TYPE_MATERIAL, TYPE_SIZE, TYPE_STRENGTH, TYPE_SELECT)

PRICE_ADD = "add"
PRICE_MULTIPLY = "multiply"
PRICE_FREE_LIMIT = "free_limit"

PRICE_TYPES = (PRICE_ADD, PRICE_MULTIPLY, PRICE_FREE_LIMIT)

MATERIAL_CODES = ("pla", "petg", "abs", "tpu", "resin")
POSITIONS = ("front", "back", "side")

# choice list key + identity key per choice type
_CHOICE_KEYS = {
    TYPE_COLOR: ("colorOptions", "name"),
    TYPE_MATERIAL: ("materialOptions", "name"),
    TYPE_SIZE: ("sizeOptions", "name"),
    TYPE_STRENGTH: ("strengthOptions", "name"),
    TYPE_SELECT: ("selectOptions", "value"),
}

# where a SelectedCustomization carries the chosen entries, per choice type
SELECTION_FIELDS = {
    TYPE_COLOR: "selectedColors",
    TYPE_MATERIAL: "selectedMaterial",
    TYPE_SIZE: "selectedSize",
    TYPE_STRENGTH: "selectedStrength",
    TYPE_SELECT: "selectedOption",
}


@dataclass(frozen=True)
class Choice:
    """
    One discrete choice (a color, a material, a size, ...).

    price_modifier is None when the admin left it empty: contributes nothing
    under add/free_limit and a neutral factor under multiply.
    """

    key: str
    label: str
    price_modifier: Decimal | None = None
    attrs: dict = field(default_factory=dict, compare=False)

    def to_dict(self, *, key_name: str = "name") -> dict:
        data = dict(self.attrs)
        data[key_name] = self.key
        if key_name != "name" or self.label != self.key:
            data.setdefault("label", self.label)
        if self.price_modifier is not None:
            data["priceModifier"] = money_str(self.price_modifier)
        return data


@dataclass(frozen=True)
class TextConfig:
    max_length: int = 50
    allow_emoji: bool = False
    allow_profanity: bool = False
    placeholder: str = ""


@dataclass(frozen=True)
class FileConfig:
    allowed_formats: tuple = ("jpg", "jpeg", "png")
    max_files: int = 1
    max_size_mb: int = 10
    show_preview: bool = True


@dataclass(frozen=True)
class CustomizationOption:
    id: str
    type: str
    label: str
    description: str = ""
    required: bool = False
    price_type: str = PRICE_ADD
    free_limit: int = 0
    unit_price: Decimal = Decimal("0.00")

    @property
    def is_choice_type(self) -> bool:
        return self.type in CHOICE_TYPES


@dataclass(frozen=True)
class ChoiceOption(CustomizationOption):
    choices: tuple = ()
    multiple: bool = False
    choice_limit: int | None = None

    @property
    def key_name(self) -> str:
        return _CHOICE_KEYS[self.type][1]

    @property
    def selection_field(self) -> str:
        return SELECTION_FIELDS[self.type]

    def find_choice(self, key) -> Choice | None:
        wanted = str(key or "").strip()
        for c in self.choices:
            if c.key == wanted:
                return c
        return None

    def selected_keys(self, selection: dict) -> list:
        """
        Choice keys referenced by a selection.

        Accepts a bare key, a choice object ({"name": ...} / {"value": ...}),
        or a list of either (colors).
        """
        raw = (selection or {}).get(self.selection_field)
        if raw in (None, "", []):
            return []
        items = raw if isinstance(raw, list) else [raw]

        keys = []
        for item in items:
            if isinstance(item, dict):
                item = item.get(self.key_name)
            key = str(item or "").strip()
            if key:
                keys.append(key)
        return keys


@dataclass(frozen=True)
class TextOption(CustomizationOption):
    text_config: TextConfig = field(default_factory=TextConfig)
    font_options: tuple = ()
    position_options: tuple = ()


@dataclass(frozen=True)
class FileOption(CustomizationOption):
    file_config: FileConfig = field(default_factory=FileConfig)


@dataclass(frozen=True)
class ProductCustomization:
    options: tuple = ()
    non_refundable: bool = False
    non_refundable_reason: str = ""

    def get_option(self, option_id) -> CustomizationOption | None:
        wanted = str(option_id or "").strip()
        for opt in self.options:
            if opt.id == wanted:
                return opt
        return None


# ============================================================
# PARSING
# ============================================================


def _decimal_or_none(value, *, where: str) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{where}: priceModifier must be a number")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{where}: priceModifier must be a number")


def _non_negative_int(value, *, where: str, default: int = 0) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{where} must be an integer")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{where} must be an integer")
    if n < 0:
        raise ValidationError(f"{where} cannot be negative")
    return n


def _parse_choices(raw, *, option_type: str, where: str) -> tuple:
    list_key, id_key = _CHOICE_KEYS[option_type]
    items = raw.get(list_key) or []
    if not isinstance(items, list) or not items:
        raise ValidationError(f"{where}: '{list_key}' must be a non-empty list")

    out = []
    seen = set()
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"{where}.{list_key}[{idx}] must be an object")

        key = str(item.get(id_key) or "").strip()
        if not key:
            raise ValidationError(f"{where}.{list_key}[{idx}] requires '{id_key}'")
        if key in seen:
            raise ValidationError(f"{where}.{list_key}: duplicate '{key}'")
        seen.add(key)

        if option_type == TYPE_MATERIAL:
            code = str(item.get("code") or "").strip().lower()
            if code not in MATERIAL_CODES:
                raise ValidationError(
                    f"{where}.{list_key}[{idx}]: code must be one of {', '.join(MATERIAL_CODES)}"
                )

        attrs = {
            k: v
            for k, v in item.items()
            if k not in {id_key, "priceModifier", "label" if id_key != "value" else ""}
        }
        label = str(item.get("label") or key) if option_type == TYPE_SELECT else key

        out.append(
            Choice(
                key=key,
                label=label,
                price_modifier=_decimal_or_none(
                    item.get("priceModifier"), where=f"{where}.{list_key}[{idx}]"
                ),
                attrs=attrs,
            )
        )
    return tuple(out)


def _common_kwargs(raw: dict, *, where: str) -> dict:
    option_id = str(raw.get("id") or "").strip()
    if not option_id:
        raise ValidationError(f"{where}: 'id' is required")

    label = str(raw.get("label") or "").strip()
    if not label:
        raise ValidationError(f"{where}: 'label' is required")

    price_type = str(raw.get("priceType") or PRICE_ADD).strip()
    if price_type not in PRICE_TYPES:
        raise ValidationError(
            f"{where}: priceType must be one of {', '.join(PRICE_TYPES)}"
        )

    unit_price = _decimal_or_none(raw.get("unitPrice"), where=where) or Decimal("0.00")
    if unit_price < 0:
        raise ValidationError(f"{where}: unitPrice cannot be negative")

    return {
        "id": option_id,
        "type": raw["type"],
        "label": label,
        "description": str(raw.get("description") or ""),
        "required": bool(raw.get("required", False)),
        "price_type": price_type,
        "free_limit": _non_negative_int(raw.get("freeLimit"), where=f"{where}.freeLimit"),
        "unit_price": unit_price,
    }


def _parse_choice_option(raw: dict, *, where: str) -> ChoiceOption:
    kwargs = _common_kwargs(raw, where=where)
    option_type = kwargs["type"]

    multiple = option_type == TYPE_COLOR and bool(raw.get("multipleColors", False))
    limit = None
    if option_type == TYPE_COLOR and raw.get("colorLimit") not in (None, ""):
        limit = _non_negative_int(raw.get("colorLimit"), where=f"{where}.colorLimit")

    return ChoiceOption(
        **kwargs,
        choices=_parse_choices(raw, option_type=option_type, where=where),
        multiple=multiple,
        choice_limit=limit,
    )


def _parse_text_option(raw: dict, *, where: str) -> TextOption:
    kwargs = _common_kwargs(raw, where=where)
    cfg = raw.get("textConfig") or {}
    if not isinstance(cfg, dict):
        raise ValidationError(f"{where}.textConfig must be an object")

    positions = tuple(raw.get("positionOptions") or ())
    bad = [p for p in positions if p not in POSITIONS]
    if bad:
        raise ValidationError(f"{where}.positionOptions: invalid {', '.join(map(str, bad))}")

    return TextOption(
        **kwargs,
        text_config=TextConfig(
            max_length=_non_negative_int(
                cfg.get("maxLength"), where=f"{where}.textConfig.maxLength", default=50
            ),
            allow_emoji=bool(cfg.get("allowEmoji", False)),
            allow_profanity=bool(cfg.get("allowProfanity", False)),
            placeholder=str(cfg.get("placeholder") or ""),
        ),
        font_options=tuple(str(f) for f in (raw.get("fontOptions") or ())),
        position_options=positions,
    )


def _parse_file_option(raw: dict, *, where: str) -> FileOption:
    kwargs = _common_kwargs(raw, where=where)
    cfg = raw.get("fileConfig") or {}
    if not isinstance(cfg, dict):
        raise ValidationError(f"{where}.fileConfig must be an object")

    formats = tuple(
        str(f).strip().lower().lstrip(".")
        for f in (cfg.get("allowedFormats") or ("jpg", "jpeg", "png"))
    )

    return FileOption(
        **kwargs,
        file_config=FileConfig(
            allowed_formats=formats,
            max_files=_non_negative_int(
                cfg.get("maxFiles"), where=f"{where}.fileConfig.maxFiles", default=1
            ),
            max_size_mb=_non_negative_int(
                cfg.get("maxSizeMB"), where=f"{where}.fileConfig.maxSizeMB", default=10
            ),
            show_preview=bool(cfg.get("showPreview", True)),
        ),
    )


_PARSERS = {
    TYPE_COLOR: _parse_choice_option,
    TYPE_MATERIAL: _parse_choice_option,
    TYPE_SIZE: _parse_choice_option,
    TYPE_STRENGTH: _parse_choice_option,
    TYPE_SELECT: _parse_choice_option,
    TYPE_TEXT: _parse_text_option,
    TYPE_FILE: _parse_file_option,
}


def parse_option(raw, *, where: str = "option") -> CustomizationOption:
    if not isinstance(raw, dict):
        raise ValidationError(f"{where} must be an object")

    option_type = str(raw.get("type") or "").strip()
    parser = _PARSERS.get(option_type)
    if parser is None:
        raise ValidationError(
            f"{where}: type must be one of {', '.join(OPTION_TYPES)}"
        )
    return parser({**raw, "type": option_type}, where=where)


def parse_customization_schema(raw) -> ProductCustomization | None:
    """
    Validate + parse a product's customization JSON.

    Returns None for products without customization (None / empty dict).
    Raises core.exceptions.ValidationError describing the first problem found.
    """
    if raw in (None, "", {}):
        return None
    if not isinstance(raw, dict):
        raise ValidationError("customization must be an object")

    raw_options = raw.get("options") or []
    if not isinstance(raw_options, list):
        raise ValidationError("customization.options must be a list")

    options = []
    seen = set()
    for idx, item in enumerate(raw_options):
        option = parse_option(item, where=f"options[{idx}]")
        if option.id in seen:
            raise ValidationError(f"options[{idx}]: duplicate option id '{option.id}'")
        seen.add(option.id)
        options.append(option)

    return ProductCustomization(
        options=tuple(options),
        non_refundable=bool(raw.get("nonRefundable", False)),
        non_refundable_reason=str(raw.get("nonRefundableReason") or ""),
    )
