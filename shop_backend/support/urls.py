# support/urls.py

"""
Public contact form, mounted under /api/messages/.
"""

from django.urls import path

from support.views import ContactMessageView

urlpatterns = [
    path("", ContactMessageView.as_view(), name="contact-message"),
]
