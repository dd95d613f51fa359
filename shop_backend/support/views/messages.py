# support/views/messages.py

"""
MESSAGE VIEWS

Public:
- POST /api/messages/                       contact form

Back office (support staff, mounted under /api/admin/):
- GET  messages/                            roots only (?status=, ?priority=, ?order_id=, ?unread=)
- GET  messages/<id>/                       thread (marks read)
- PUT  messages/<id>/                       status / priority / tags / assignee
- POST messages/<id>/reply/                 reply + email to the customer
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from core.api import domain_error_response, error_response
from core.exceptions import ShopError
from support.filters import MessageFilter
from support.models import Message
from support.serializers import (
    ContactMessageSerializer,
    MessageReplySerializer,
    MessageSerializer,
    MessageThreadSerializer,
    MessageUpdateSerializer,
)
from support.services.messages import (
    create_contact_message,
    mark_read,
    reply_to_message,
    update_message,
)
from users.permissions import IsSupportStaff


class PublicWriteThrottle(AnonRateThrottle):
    scope = "public_write"


class ContactMessageView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicWriteThrottle]

    @extend_schema(
        tags=["Public"],
        request=ContactMessageSerializer,
        responses={201: OpenApiResponse(description="{success, messageId}")},
    )
    def post(self, request):
        ser = ContactMessageSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        try:
            message = create_contact_message(
                sender_email=data["sender_email"],
                sender_name=data.get("sender_name", ""),
                subject=data.get("subject", ""),
                content=data["content"],
                order_id=data.get("order_id"),
                order_no=data.get("order_no", ""),
                user=request.user,
            )
        except ShopError as exc:
            return domain_error_response(exc)

        return Response(
            {"success": True, "messageId": str(message.id)},
            status=status.HTTP_201_CREATED,
        )


class AdminMessageListView(generics.ListAPIView):
    serializer_class = MessageSerializer
    permission_classes = [IsAuthenticated, IsSupportStaff]
    filterset_class = MessageFilter

    def get_queryset(self):
        return (
            Message.objects.filter(thread__isnull=True)
            .select_related("order", "assigned_to")
            .order_by("-created_at")
        )

    @extend_schema(tags=["Admin - Messages"], responses={200: MessageSerializer(many=True)})
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminMessageDetailView(APIView):
    permission_classes = [IsAuthenticated, IsSupportStaff]

    @extend_schema(tags=["Admin - Messages"], responses={200: MessageThreadSerializer})
    def get(self, request, message_id):
        message = Message.objects.select_related("thread").filter(id=message_id).first()
        if message is None:
            return error_response(
                code="NOT_FOUND",
                message="Message not found",
                http_status=status.HTTP_404_NOT_FOUND,
            )
        root = mark_read(message.root)
        return Response(MessageThreadSerializer(root).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Admin - Messages"],
        request=MessageUpdateSerializer,
        responses={200: MessageSerializer},
    )
    def put(self, request, message_id):
        ser = MessageUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)

        try:
            message = update_message(
                message_id=message_id, data=ser.validated_data, actor=request.user
            )
        except ShopError as exc:
            return domain_error_response(exc)

        return Response(MessageSerializer(message).data, status=status.HTTP_200_OK)


class AdminMessageReplyView(APIView):
    permission_classes = [IsAuthenticated, IsSupportStaff]

    @extend_schema(
        tags=["Admin - Messages"],
        request=MessageReplySerializer,
        responses={201: OpenApiResponse(description="{success, replyId}")},
    )
    def post(self, request, message_id):
        ser = MessageReplySerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            reply = reply_to_message(
                message_id=message_id,
                content=ser.validated_data["content"],
                subject=ser.validated_data.get("subject", ""),
                actor=request.user,
            )
        except ShopError as exc:
            return domain_error_response(exc)

        return Response(
            {"success": True, "replyId": str(reply.id)},
            status=status.HTTP_201_CREATED,
        )
