# cart/services/cart.py

"""
CART AGGREGATOR

Ordered list of cart lines kept in a client-bound store (the Django session
in production, any dict in tests) under CART_SESSION_KEY, written back on
every mutation.

Line identity:
- id            product id
- cartItemId    identity of the line itself (same product can appear on
                several lines when customized differently)

Merge rule:
- an uncustomized add merges into an existing uncustomized line of the same
  product (quantity + 1)
- customized adds always open a new line

Storage schema:
- v1: bare list of lines, cartItemId may be missing (legacy client format)
- v2: {"version": 2, "items": [...]}
upgrade_cart_payload() runs once on load; writes are always v2.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings

from catalog.customization import line_total
from core.exceptions import ValidationError
from core.money import ZERO, money, money_str

logger = logging.getLogger(__name__)

CART_SCHEMA_VERSION = 2


def new_cart_item_id() -> str:
    return f"cart_{uuid.uuid4().hex[:16]}"


@dataclass(frozen=True)
class ProductRef:
    """What the cart needs to know about a product when adding it."""

    id: str
    name: str
    price: Decimal
    image: str = ""
    non_refundable: bool = False

    @classmethod
    def from_product(cls, product) -> "ProductRef":
        return cls(
            id=str(product.id),
            name=product.name,
            price=money(product.price),
            image=product.cover_image,
            non_refundable=product.is_non_refundable,
        )


@dataclass
class CartLine:
    id: str
    cart_item_id: str
    name: str
    price: Decimal
    quantity: int = 1
    image: str = ""
    customizations: list = field(default_factory=list)
    customization_price: Decimal = ZERO
    non_refundable: bool = False
    non_refundable_accepted: bool = False

    @property
    def is_customized(self) -> bool:
        return bool(self.customizations)

    @property
    def unit_total(self) -> Decimal:
        return money(self.price) + money(self.customization_price)

    @property
    def price_total(self) -> Decimal:
        return line_total(self.price, self.customization_price, self.quantity)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cartItemId": self.cart_item_id,
            "name": self.name,
            "price": money_str(self.price),
            "image": self.image,
            "quantity": self.quantity,
            "customizations": list(self.customizations),
            "customizationPrice": money_str(self.customization_price),
            "nonRefundable": self.non_refundable,
            "nonRefundableAccepted": self.non_refundable_accepted,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        try:
            quantity = int(data.get("quantity") or 1)
        except (TypeError, ValueError):
            quantity = 1
        return cls(
            id=str(data.get("id") or ""),
            cart_item_id=str(data.get("cartItemId") or new_cart_item_id()),
            name=str(data.get("name") or ""),
            price=money(data.get("price")),
            quantity=max(quantity, 1),
            image=str(data.get("image") or ""),
            customizations=list(data.get("customizations") or []),
            customization_price=money(data.get("customizationPrice")),
            non_refundable=bool(data.get("nonRefundable", False)),
            non_refundable_accepted=bool(data.get("nonRefundableAccepted", False)),
        )


def _with_line_ids(items) -> list:
    out = []
    for item in items:
        if not isinstance(item, dict) or not item.get("id"):
            continue
        if item.get("cartItemId"):
            out.append(item)
        else:
            out.append({**item, "cartItemId": new_cart_item_id()})
    return out


def upgrade_cart_payload(raw) -> dict:
    """
    Bring any stored cart payload to the current schema.

    - None / garbage -> empty v2 cart
    - v1 (bare list) -> v2 envelope, missing cartItemIds assigned
    """
    if raw is None:
        return {"version": CART_SCHEMA_VERSION, "items": []}

    if isinstance(raw, list):
        items = _with_line_ids(raw)
        logger.info("Cart upgraded from v1", extra={"items": len(items)})
        return {"version": CART_SCHEMA_VERSION, "items": items}

    if isinstance(raw, dict) and raw.get("version") == CART_SCHEMA_VERSION:
        return {"version": CART_SCHEMA_VERSION, "items": _with_line_ids(raw.get("items") or [])}

    logger.warning("Discarding unreadable cart payload", extra={"payload_type": type(raw).__name__})
    return {"version": CART_SCHEMA_VERSION, "items": []}


class Cart:
    """
    Session-backed cart.

    `store` is any mutable mapping (request.session). The cart is rehydrated
    once on construction and persisted after every mutation.
    """

    def __init__(self, store, *, key: str | None = None):
        self.store = store
        self.key = key or getattr(settings, "CART_SESSION_KEY", "layered-cart")

        raw = store.get(self.key)
        payload = upgrade_cart_payload(raw)
        self.lines = [CartLine.from_dict(i) for i in payload["items"]]

        if raw is not None and raw != payload:
            self._persist()

    # -----------------------------
    # PERSISTENCE
    # -----------------------------
    def to_payload(self) -> dict:
        return {"version": CART_SCHEMA_VERSION, "items": [line.to_dict() for line in self.lines]}

    def _persist(self):
        self.store[self.key] = self.to_payload()
        # request.session only notices top-level assignment
        if hasattr(self.store, "modified"):
            self.store.modified = True

    # -----------------------------
    # READS
    # -----------------------------
    def __iter__(self):
        return iter(self.lines)

    def __len__(self):
        return len(self.lines)

    def get(self, cart_item_id) -> CartLine | None:
        for line in self.lines:
            if line.cart_item_id == str(cart_item_id):
                return line
        return None

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_price(self) -> Decimal:
        return money(sum((line.price_total for line in self.lines), ZERO))

    @property
    def has_non_refundable(self) -> bool:
        return any(line.non_refundable for line in self.lines)

    # -----------------------------
    # MUTATIONS
    # -----------------------------
    def add_item(self, product: ProductRef, customizations=None, customization_price=ZERO) -> CartLine:
        customizations = list(customizations or [])

        if not customizations:
            for line in self.lines:
                if line.id == product.id and not line.is_customized:
                    line.quantity += 1
                    self._persist()
                    logger.debug(
                        "Cart line merged",
                        extra={"product_id": product.id, "cart_item_id": line.cart_item_id},
                    )
                    return line

        line = CartLine(
            id=product.id,
            cart_item_id=new_cart_item_id(),
            name=product.name,
            price=money(product.price),
            quantity=1,
            image=product.image,
            customizations=customizations,
            customization_price=money(customization_price) if customizations else ZERO,
            non_refundable=product.non_refundable,
        )
        self.lines.append(line)
        self._persist()
        logger.debug(
            "Cart line added",
            extra={"product_id": product.id, "cart_item_id": line.cart_item_id},
        )
        return line

    def remove_item(self, cart_item_id) -> None:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.cart_item_id != str(cart_item_id)]
        if len(self.lines) != before:
            self._persist()

    def update_quantity(self, cart_item_id, quantity) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("quantity must be an integer", code="INVALID_QUANTITY")

        if quantity <= 0:
            self.remove_item(cart_item_id)
            return

        line = self.get(cart_item_id)
        if line is None:
            return
        line.quantity = quantity
        self._persist()

    def update_customizations(self, cart_item_id, customizations, customization_price) -> None:
        line = self.get(cart_item_id)
        if line is None:
            return
        line.customizations = list(customizations or [])
        line.customization_price = money(customization_price) if line.customizations else ZERO
        self._persist()

    def set_non_refundable_accepted(self, cart_item_id, accepted: bool) -> None:
        line = self.get(cart_item_id)
        if line is None:
            return
        line.non_refundable_accepted = bool(accepted)
        self._persist()

    def clear(self) -> None:
        self.lines = []
        self._persist()
