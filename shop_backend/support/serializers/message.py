# support/serializers/message.py

from rest_framework import serializers

from support.models import Message


class MessageSerializer(serializers.ModelSerializer):
    order_no = serializers.CharField(source="order.order_no", read_only=True, default=None)
    assigned_email = serializers.EmailField(
        source="assigned_to.email", read_only=True, default=None
    )
    reply_count = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = [
            "id",
            "thread",
            "order",
            "order_no",
            "user",
            "sender_name",
            "sender_email",
            "subject",
            "content",
            "is_from_customer",
            "status",
            "priority",
            "tags",
            "assigned_to",
            "assigned_email",
            "reply_count",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_reply_count(self, obj) -> int:
        if obj.thread_id:
            return 0
        return obj.replies.count()


class MessageThreadSerializer(MessageSerializer):
    replies = serializers.SerializerMethodField()

    class Meta(MessageSerializer.Meta):
        fields = MessageSerializer.Meta.fields + ["replies"]
        read_only_fields = fields

    def get_replies(self, obj) -> list:
        replies = obj.replies.select_related("order", "assigned_to").order_by("created_at")
        return MessageSerializer(replies, many=True).data


class ContactMessageSerializer(serializers.Serializer):
    sender_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=160)
    sender_email = serializers.EmailField()
    subject = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    content = serializers.CharField(max_length=5000)
    order_id = serializers.UUIDField(required=False, allow_null=True)
    order_no = serializers.CharField(required=False, allow_blank=True, default="")


class MessageUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Message.STATUS_CHOICES, required=False)
    priority = serializers.ChoiceField(choices=Message.PRIORITY_CHOICES, required=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=40), required=False)
    assigned_to_id = serializers.UUIDField(required=False, allow_null=True)


class MessageReplySerializer(serializers.Serializer):
    content = serializers.CharField(max_length=10000)
    subject = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
