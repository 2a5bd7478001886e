import json
import os
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from srs.data.models import Card
from srs.domain.errors import ValidationError
from srs.services.cards import create_card


class Command(BaseCommand):
    help = "Replace all cards with the word pairs listed in a JSON file"

    def add_arguments(self, parser):
        parser.add_argument(
            "--file", default="MOCK_DATA.json", help="JSON file name to load data from"
        )

    def handle(self, *args, **options):
        file_name = options.get("file", "MOCK_DATA.json")
        if file_name in ("", ".", "..") or os.path.basename(file_name) != file_name:
            raise CommandError(f"--file must be a bare file name, got {file_name!r}")
        json_file_path = os.path.join(os.path.dirname(__file__), file_name)

        try:
            with open(json_file_path) as json_file:
                rows = json.load(json_file)
        except (OSError, json.JSONDecodeError) as e:
            raise CommandError(f"Error loading data: {e}") from e

        with transaction.atomic():
            Card.objects.all().delete()
            self.stdout.write(self.style.SUCCESS("All existing card data has been deleted"))

            for i, row in enumerate(rows):
                try:
                    create_card(row["owner_id"], row["front"], row["back"], row.get("policy"))
                except (KeyError, TypeError, ValidationError) as e:
                    raise CommandError(f"Bad card at index {i}: {e}") from e

        self.stdout.write(
            self.style.SUCCESS(f"{len(rows)} cards loaded successfully from {file_name}")
        )
