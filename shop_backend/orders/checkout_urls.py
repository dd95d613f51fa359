# orders/checkout_urls.py

from django.urls import path

from orders.views import CheckoutConfigView, CreatePaymentIntentView

urlpatterns = [
    path(
        "create-payment-intent/",
        CreatePaymentIntentView.as_view(),
        name="checkout-create-payment-intent",
    ),
    path("config/", CheckoutConfigView.as_view(), name="checkout-config"),
]
