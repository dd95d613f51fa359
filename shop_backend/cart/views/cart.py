# cart/views/cart.py

"""
CART API VIEWS

Session-scoped cart for guests and signed-in customers alike.

- GET    /api/cart/                                         cart + totals
- DELETE /api/cart/                                         clear
- POST   /api/cart/items/                                   add product
- PATCH  /api/cart/items/<cart_item_id>/                    set quantity (<= 0 removes)
- DELETE /api/cart/items/<cart_item_id>/                    remove (unknown id is a no-op)
- PUT    /api/cart/items/<cart_item_id>/customizations/     replace customizations
- PUT    /api/cart/items/<cart_item_id>/non-refundable/     record acceptance

Money rule:
- base price and customization modifiers are resolved server-side from the
  catalog; client-sent prices are ignored.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.serializers import (
    AddCartItemInputSerializer,
    CartSerializer,
    NonRefundableAcceptanceInputSerializer,
    UpdateCustomizationsInputSerializer,
    UpdateQuantityInputSerializer,
)
from cart.services.cart import Cart, ProductRef
from catalog.customization import resolve_selections
from catalog.models import Product
from core.api import domain_error_response, error_response
from core.exceptions import ShopError

logger = logging.getLogger(__name__)


def _cart_for(request) -> Cart:
    return Cart(request.session)


def _cart_response(cart: Cart, http_status=status.HTTP_200_OK):
    return Response(CartSerializer(cart).data, status=http_status)


def _purchasable_product(product_id):
    return Product.objects.filter(id=product_id, is_active=True).first()


class CartView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["Cart"], responses={200: CartSerializer})
    def get(self, request):
        return _cart_response(_cart_for(request))

    @extend_schema(tags=["Cart"], responses={200: CartSerializer})
    def delete(self, request):
        cart = _cart_for(request)
        cart.clear()
        return _cart_response(cart)


class CartItemsView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["Cart"],
        request=AddCartItemInputSerializer,
        responses={201: CartSerializer},
        description="Add a product. Uncustomized adds merge into an existing uncustomized line.",
    )
    def post(self, request):
        s = AddCartItemInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        product = _purchasable_product(s.validated_data["product_id"])
        if product is None:
            return error_response(
                code="PRODUCT_NOT_FOUND",
                message="Product not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )
        if not product.is_purchasable:
            return error_response(
                code="PRODUCT_UNAVAILABLE",
                message="Product is currently unavailable.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        cart = _cart_for(request)
        try:
            selections, customization_price = resolve_selections(
                product.parsed_customization,
                s.validated_data["customizations"],
                base_price=product.price,
            )
        except ShopError as exc:
            return domain_error_response(exc)

        line = cart.add_item(ProductRef.from_product(product), selections, customization_price)
        if s.validated_data["non_refundable_accepted"] and line.non_refundable:
            cart.set_non_refundable_accepted(line.cart_item_id, True)

        return _cart_response(cart, status.HTTP_201_CREATED)


class CartItemDetailView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(tags=["Cart"], request=UpdateQuantityInputSerializer, responses={200: CartSerializer})
    def patch(self, request, cart_item_id):
        s = UpdateQuantityInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        cart = _cart_for(request)
        try:
            cart.update_quantity(cart_item_id, s.validated_data["quantity"])
        except ShopError as exc:
            return domain_error_response(exc)
        return _cart_response(cart)

    @extend_schema(tags=["Cart"], responses={200: CartSerializer})
    def delete(self, request, cart_item_id):
        cart = _cart_for(request)
        cart.remove_item(cart_item_id)
        return _cart_response(cart)


class CartItemCustomizationsView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["Cart"],
        request=UpdateCustomizationsInputSerializer,
        responses={200: CartSerializer},
        description="Replace a line's customizations; modifiers are re-resolved from the catalog.",
    )
    def put(self, request, cart_item_id):
        s = UpdateCustomizationsInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        cart = _cart_for(request)
        line = cart.get(cart_item_id)
        if line is None:
            return error_response(
                code="CART_ITEM_NOT_FOUND",
                message="Cart item not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        product = _purchasable_product(line.id)
        if product is None:
            return error_response(
                code="PRODUCT_NOT_FOUND",
                message="Product is no longer available.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        try:
            selections, customization_price = resolve_selections(
                product.parsed_customization,
                s.validated_data["customizations"],
                base_price=line.price,
            )
        except ShopError as exc:
            return domain_error_response(exc)

        cart.update_customizations(cart_item_id, selections, customization_price)
        return _cart_response(cart)


class CartItemNonRefundableView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        tags=["Cart"],
        request=NonRefundableAcceptanceInputSerializer,
        responses={200: CartSerializer},
    )
    def put(self, request, cart_item_id):
        s = NonRefundableAcceptanceInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        cart = _cart_for(request)
        cart.set_non_refundable_accepted(cart_item_id, s.validated_data["accepted"])
        return _cart_response(cart)
