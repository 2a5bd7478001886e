from .data.models import Card, ReviewLog  # noqa: F401
