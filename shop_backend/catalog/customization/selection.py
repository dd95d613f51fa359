# catalog/customization/selection.py

"""
SELECTION RESOLUTION

Turns client-sent SelectedCustomization payloads into canonical, server-priced
selections for one product:

- selections are matched to the product's options by optionId
- chosen entries are looked up in the product schema (client copies of the
  choices, including their priceModifier, are never trusted)
- per-type constraints are enforced (color limit, text length, file count
  and formats, fonts, positions)
- priceModifier is resolved once here and cached on the selection

Required-ness is a separate check (validate_required) applied at checkout.
"""

from __future__ import annotations

import logging
import re

from core.exceptions import ValidationError
from core.money import ZERO, money_str

from .pricing import customization_price
from .types import (
    TYPE_FILE,
    TYPE_TEXT,
    ChoiceOption,
    FileOption,
    ProductCustomization,
    TextOption,
)

logger = logging.getLogger(__name__)

_EMOJI_RE = re.compile(
    "["
    "\U0001F300-\U0001FAFF"
    "\U00002600-\U000027BF"
    "\U0001F000-\U0001F2FF"
    "\U0000FE0F"
    "\U0000200D"
    "]"
)

_FILE_FIELDS = ("id", "name", "url", "preview", "size")


def _file_extension(name: str) -> str:
    name = str(name or "")
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].strip().lower()


def _resolve_choice(option: ChoiceOption, raw: dict) -> dict | None:
    keys = option.selected_keys(raw)
    if not keys:
        return None

    unknown = [k for k in keys if option.find_choice(k) is None]
    if unknown:
        raise ValidationError(
            f"'{option.label}': unknown choice {', '.join(unknown)}"
        )

    if len(set(keys)) != len(keys):
        raise ValidationError(f"'{option.label}': duplicate choice")

    if not option.multiple and len(keys) > 1:
        raise ValidationError(f"'{option.label}' accepts a single choice")

    if option.choice_limit and len(keys) > option.choice_limit:
        raise ValidationError(
            f"'{option.label}' accepts at most {option.choice_limit} choices"
        )

    choices = [option.find_choice(k).to_dict(key_name=option.key_name) for k in keys]
    value = choices if option.selection_field == "selectedColors" else choices[0]
    return {option.selection_field: value}


def _resolve_text(option: TextOption, raw: dict) -> dict | None:
    text = str(raw.get("textValue") or "")
    if not text.strip():
        return None

    cfg = option.text_config
    if cfg.max_length and len(text) > cfg.max_length:
        raise ValidationError(
            f"'{option.label}' allows at most {cfg.max_length} characters"
        )
    if not cfg.allow_emoji and _EMOJI_RE.search(text):
        raise ValidationError(f"'{option.label}' does not allow emoji")

    out = {"textValue": text}

    font = str(raw.get("fontFamily") or "").strip()
    if font:
        if option.font_options and font not in option.font_options:
            raise ValidationError(f"'{option.label}': unsupported font '{font}'")
        out["fontFamily"] = font

    position = str(raw.get("position") or "").strip()
    if position:
        if option.position_options and position not in option.position_options:
            raise ValidationError(f"'{option.label}': unsupported position '{position}'")
        out["position"] = position

    font_size = raw.get("fontSize")
    if font_size not in (None, ""):
        try:
            size = int(font_size)
        except (TypeError, ValueError):
            raise ValidationError(f"'{option.label}': fontSize must be an integer")
        if size <= 0:
            raise ValidationError(f"'{option.label}': fontSize must be positive")
        out["fontSize"] = size

    return out


def _resolve_files(option: FileOption, raw: dict) -> dict | None:
    files = raw.get("uploadedFiles") or []
    if not isinstance(files, list):
        raise ValidationError(f"'{option.label}': uploadedFiles must be a list")
    if not files:
        return None

    cfg = option.file_config
    if cfg.max_files and len(files) > cfg.max_files:
        raise ValidationError(
            f"'{option.label}' accepts at most {cfg.max_files} files"
        )

    out = []
    for idx, f in enumerate(files):
        if not isinstance(f, dict) or not f.get("url"):
            raise ValidationError(f"'{option.label}': file #{idx + 1} requires a url")

        ext = _file_extension(f.get("name") or f.get("url"))
        if cfg.allowed_formats and ext not in cfg.allowed_formats:
            raise ValidationError(
                f"'{option.label}': format '{ext or '?'}' not allowed "
                f"({', '.join(cfg.allowed_formats)})"
            )

        size = f.get("size")
        if size not in (None, "") and cfg.max_size_mb:
            try:
                size_bytes = int(size)
            except (TypeError, ValueError):
                raise ValidationError(f"'{option.label}': file size must be an integer")
            if size_bytes > cfg.max_size_mb * 1024 * 1024:
                raise ValidationError(
                    f"'{option.label}': file exceeds {cfg.max_size_mb} MB"
                )

        out.append({k: f[k] for k in _FILE_FIELDS if k in f})

    return {"uploadedFiles": out}


def _resolve_one(option, raw: dict) -> dict | None:
    if isinstance(option, ChoiceOption):
        return _resolve_choice(option, raw)
    if option.type == TYPE_TEXT:
        return _resolve_text(option, raw)
    if option.type == TYPE_FILE:
        return _resolve_files(option, raw)
    return None


def resolve_selections(customization: ProductCustomization | None, raw_selections, *, base_price):
    """
    Validate + price client selections against a product's schema.

    Returns (selections, customization_price) where selections is a list of
    canonical dicts in the client's order, each carrying a server-resolved
    "priceModifier" (2dp string). Unselected options are dropped.
    """
    if raw_selections in (None, ""):
        raw_selections = []
    if not isinstance(raw_selections, list):
        raise ValidationError("customizations must be a list")

    if not raw_selections:
        return [], ZERO

    if customization is None:
        raise ValidationError("This product has no customization options")

    resolved = []
    seen = set()
    for idx, raw in enumerate(raw_selections):
        if not isinstance(raw, dict):
            raise ValidationError(f"customizations[{idx}] must be an object")

        option_id = str(raw.get("optionId") or "").strip()
        option = customization.get_option(option_id)
        if option is None:
            raise ValidationError(f"customizations[{idx}]: unknown option '{option_id}'")
        if option_id in seen:
            raise ValidationError(f"Option '{option.label}' selected more than once")
        seen.add(option_id)

        values = _resolve_one(option, raw)
        if values is None:
            continue

        resolved.append(
            (
                option,
                {
                    "optionId": option.id,
                    "optionLabel": option.label,
                    "type": option.type,
                    **values,
                },
            )
        )

    priced = customization_price(base_price, resolved)
    selections = []
    for (option, sel), delta in zip(resolved, priced.deltas):
        selections.append({**sel, "priceModifier": money_str(delta)})

    logger.debug(
        "Customization resolved",
        extra={"selections": len(selections), "customization_price": str(priced.total)},
    )
    return selections, priced.total


def validate_required(customization: ProductCustomization | None, selections) -> None:
    """Raise ValidationError naming every required option left unselected."""
    if customization is None:
        return

    chosen = {str(s.get("optionId")) for s in (selections or []) if isinstance(s, dict)}
    missing = [
        opt.label for opt in customization.options if opt.required and opt.id not in chosen
    ]
    if missing:
        raise ValidationError(
            f"Missing required customization: {', '.join(missing)}",
            code="CUSTOMIZATION_REQUIRED",
        )


def selection_summary(selection: dict) -> str:
    """Short human label for emails / admin listings."""
    parts = []
    for field in ("selectedColors", "selectedMaterial", "selectedSize", "selectedStrength", "selectedOption"):
        val = selection.get(field)
        if not val:
            continue
        items = val if isinstance(val, list) else [val]
        parts.extend(str(i.get("label") or i.get("name") or i.get("value")) for i in items)
    if selection.get("textValue"):
        parts.append(f'"{selection["textValue"]}"')
    if selection.get("uploadedFiles"):
        parts.append(f"{len(selection['uploadedFiles'])} file(s)")
    label = selection.get("optionLabel") or selection.get("optionId") or ""
    return f"{label}: {', '.join(parts)}" if parts else str(label)

