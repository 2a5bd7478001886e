import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Card",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("owner_id", models.UUIDField()),
                ("front", models.CharField(max_length=500)),
                ("back", models.CharField(max_length=500)),
                ("policy", models.CharField(choices=[("leveled", "Leveled"), ("ease_factor", "Ease Factor")], max_length=16)),
                ("level", models.PositiveIntegerField(default=0)),
                ("ease_factor", models.FloatField(default=2.5)),
                ("repetitions", models.PositiveIntegerField(default=0)),
                ("last_interval_ms", models.BigIntegerField(default=0)),
                ("next_review_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "indexes": [models.Index(fields=["owner_id", "next_review_at"], name="srs_card_owner_due_idx")],
            },
        ),
        migrations.CreateModel(
            name="ReviewLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("owner_id", models.UUIDField()),
                ("recalled", models.BooleanField(null=True)),
                ("quality", models.SmallIntegerField(null=True)),
                ("idempotency_key", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("level", models.PositiveIntegerField()),
                ("ease_factor", models.FloatField(default=2.5)),
                ("repetitions", models.PositiveIntegerField(default=0)),
                ("next_review_at", models.DateTimeField()),
                ("next_interval_ms", models.BigIntegerField()),
                ("card", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="srs.card")),
            ],
            options={
                "indexes": [models.Index(fields=["owner_id", "card", "created_at"], name="srs_review_owner_card_idx")],
                "unique_together": {("owner_id", "card", "idempotency_key")},
            },
        ),
    ]
