# support/admin_urls.py

"""
Back-office message routes, mounted under /api/admin/.
"""

from django.urls import path

from support.views import AdminMessageDetailView, AdminMessageListView, AdminMessageReplyView

urlpatterns = [
    path("messages/", AdminMessageListView.as_view(), name="admin-messages"),
    path("messages/<uuid:message_id>/", AdminMessageDetailView.as_view(), name="admin-message"),
    path(
        "messages/<uuid:message_id>/reply/",
        AdminMessageReplyView.as_view(),
        name="admin-message-reply",
    ),
]
