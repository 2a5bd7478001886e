from rest_framework import serializers

from ..config import MAX_QUALITY, MAX_SESSION_LIMIT, MAX_WORD_LENGTH
from ..domain.enums import SchedulingPolicy


class CardInSerializer(serializers.Serializer):
    owner_id = serializers.UUIDField()
    front = serializers.CharField(max_length=MAX_WORD_LENGTH)
    back = serializers.CharField(max_length=MAX_WORD_LENGTH)
    policy = serializers.ChoiceField(
        choices=[p.value for p in SchedulingPolicy], required=False
    )

class ReviewInSerializer(serializers.Serializer):
    owner_id = serializers.UUIDField()
    card_id = serializers.UUIDField()
    recalled = serializers.BooleanField(default=None, allow_null=True)
    quality = serializers.IntegerField(
        min_value=0, max_value=MAX_QUALITY, default=None, allow_null=True
    )
    idempotency_key = serializers.CharField(max_length=64)

    def validate(self, attrs):
        if (attrs.get("recalled") is None) == (attrs.get("quality") is None):
            raise serializers.ValidationError("send exactly one of 'recalled' or 'quality'")
        return attrs

class DueQuerySerializer(serializers.Serializer):
    at = serializers.DateTimeField(required=False)  # ISO-8601, defaults to now
    limit = serializers.IntegerField(min_value=1, max_value=MAX_SESSION_LIMIT, required=False)

class StatsQuerySerializer(serializers.Serializer):
    at = serializers.DateTimeField(required=False)

class CardUpdateSerializer(serializers.Serializer):
    owner_id = serializers.UUIDField()
    front = serializers.CharField(max_length=MAX_WORD_LENGTH)
    back = serializers.CharField(max_length=MAX_WORD_LENGTH)

class OwnerQuerySerializer(serializers.Serializer):
    owner_id = serializers.UUIDField()
