# orders/payment_urls.py

from django.urls import path

from orders.views import StripeWebhookView

urlpatterns = [
    path("webhook/", StripeWebhookView.as_view(), name="stripe-webhook"),
]
