# catalog/customization/pricing.py

"""
CUSTOMIZATION PRICER

Resolves a selection for one option into a price modifier, then folds all
selections of a line into a customization price.

Two accumulation channels:
- amount: additive money (add / free_limit policies)
- factor: multiplier on the running price (multiply policy)

Multiply factors compound on the running price first (base price, in
selection order). Each factor's monetary effect is attributed to the
selection that introduced it, so the per-selection deltas always sum to the
line's customization price. Additive amounts are applied afterwards.

The pricer never checks required-ness (see catalog.customization.selection).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from core.money import TWOPLACES, ZERO, money

from .types import (
    PRICE_ADD,
    PRICE_FREE_LIMIT,
    PRICE_MULTIPLY,
    TYPE_FILE,
    TYPE_TEXT,
    ChoiceOption,
    CustomizationOption,
)

ONE = Decimal("1")


@dataclass(frozen=True)
class PriceModifier:
    amount: Decimal = ZERO
    factor: Decimal = ONE

    @property
    def is_neutral(self) -> bool:
        return self.amount == ZERO and self.factor == ONE


@dataclass(frozen=True)
class CustomizationPrice:
    """Per-selection deltas (same order as input) + their sum."""

    deltas: tuple
    total: Decimal


def _q(v: Decimal) -> Decimal:
    return v.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def selection_units(option: CustomizationOption, selection: dict) -> list:
    """
    Chargeable units of a selection, in selection order.

    Each unit is the Decimal price of that unit, or None when the admin left
    the modifier empty.
    """
    selection = selection or {}

    if isinstance(option, ChoiceOption):
        return [c.price_modifier for c in selected_choices(option, selection)]

    if option.type == TYPE_TEXT:
        text = str(selection.get("textValue") or "")
        return [option.unit_price] * len(text)

    if option.type == TYPE_FILE:
        files = selection.get("uploadedFiles") or []
        return [option.unit_price] * len(files)

    return []


def selected_choices(option: ChoiceOption, selection: dict) -> list:
    """Choices a (resolved) selection refers to, unknown keys dropped."""
    out = []
    for key in option.selected_keys(selection):
        choice = option.find_choice(key)
        if choice is not None:
            out.append(choice)
    return out


def _has_value(option: CustomizationOption, selection: dict) -> bool:
    return bool(selection_units(option, selection))


def option_modifier(option: CustomizationOption, selection: dict | None) -> PriceModifier:
    """
    Price modifier for one option given its selection.

    - add: sum of choice modifiers. Text/file count as one unit of
      unitPrice when present.
    - free_limit: first N units free; units beyond N charged.
    - multiply: product of choice modifiers (empty modifier = 1). Text/file
      presence multiplies by unitPrice when one is set.
    - no selection: neutral.
    """
    if not selection or not _has_value(option, selection):
        return PriceModifier()

    units = selection_units(option, selection)
    is_unit_priced = option.type in (TYPE_TEXT, TYPE_FILE)

    if option.price_type == PRICE_FREE_LIMIT:
        charged = units[int(option.free_limit or 0):]
        return PriceModifier(amount=money(sum((u or ZERO) for u in charged)))

    if option.price_type == PRICE_MULTIPLY:
        if is_unit_priced:
            factor = option.unit_price if option.unit_price else ONE
            return PriceModifier(factor=factor)
        factor = ONE
        for u in units:
            if u is not None:
                factor *= u
        return PriceModifier(factor=factor)

    if is_unit_priced:
        return PriceModifier(amount=money(option.unit_price))

    return PriceModifier(amount=money(sum((u or ZERO) for u in units)))


def customization_price(base_price, priced_selections) -> CustomizationPrice:
    """
    Fold (option, selection) pairs into per-selection deltas.

    priced_selections: iterable of (CustomizationOption, selection dict).
    """
    pairs = list(priced_selections)
    modifiers = [option_modifier(opt, sel) for opt, sel in pairs]
    deltas = [ZERO] * len(pairs)

    running = money(base_price)
    for idx, mod in enumerate(modifiers):
        if mod.factor == ONE:
            continue
        new_running = _q(running * mod.factor)
        deltas[idx] += new_running - running
        running = new_running

    for idx, mod in enumerate(modifiers):
        if mod.amount:
            deltas[idx] += mod.amount

    deltas = tuple(_q(d) for d in deltas)
    return CustomizationPrice(deltas=deltas, total=_q(sum(deltas, ZERO)))


def line_total(base_price, customization_total, quantity) -> Decimal:
    """(base + customization) * quantity, 2dp."""
    return _q((money(base_price) + money(customization_total)) * int(quantity))
