from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def check_policy_setting():
    """Fail at startup on an unknown SRS_SCHEDULING_POLICY, not per request."""
    from .domain.errors import ValidationError
    from .domain.state import coerce_policy

    try:
        coerce_policy(settings.SRS_SCHEDULING_POLICY)
    except ValidationError as e:
        raise ImproperlyConfigured(f"SRS_SCHEDULING_POLICY: {e}") from e


class SrsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "srs"
    verbose_name = "Spaced repetition"

    def ready(self):
        check_policy_setting()
