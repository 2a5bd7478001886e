import uuid

from django.db import models
from django.utils import timezone

from ..config import DEFAULT_EASE_FACTOR, MAX_WORD_LENGTH
from ..domain.enums import SchedulingPolicy

POLICY_CHOICES = [(p.value, p.name.replace("_", " ").title()) for p in SchedulingPolicy]


class Card(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.UUIDField()
    front = models.CharField(max_length=MAX_WORD_LENGTH)
    back = models.CharField(max_length=MAX_WORD_LENGTH)
    policy = models.CharField(max_length=16, choices=POLICY_CHOICES)
    level = models.PositiveIntegerField(default=0)
    ease_factor = models.FloatField(default=DEFAULT_EASE_FACTOR)
    repetitions = models.PositiveIntegerField(default=0)
    last_interval_ms = models.BigIntegerField(default=0)
    next_review_at = models.DateTimeField(default=timezone.now)  # UTC
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["owner_id", "next_review_at"], name="srs_card_owner_due_idx"),
        ]

class ReviewLog(models.Model):
    owner_id = models.UUIDField()
    card = models.ForeignKey(Card, on_delete=models.CASCADE, related_name="reviews")
    recalled = models.BooleanField(null=True)
    quality = models.SmallIntegerField(null=True)
    idempotency_key = models.CharField(max_length=64)
    created_at = models.DateTimeField(default=timezone.now)
    level = models.PositiveIntegerField()
    ease_factor = models.FloatField(default=DEFAULT_EASE_FACTOR)
    repetitions = models.PositiveIntegerField(default=0)
    next_review_at = models.DateTimeField()
    next_interval_ms = models.BigIntegerField()

    class Meta:
        unique_together = (("owner_id", "card", "idempotency_key"),)
        indexes = [
            models.Index(fields=["owner_id", "card", "created_at"], name="srs_review_owner_card_idx"),
        ]
