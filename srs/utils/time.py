from zoneinfo import ZoneInfo

from django.conf import settings


def display_tz():
    return ZoneInfo(settings.DISPLAY_TIME_ZONE)


def to_local_iso(dt_utc):
    return dt_utc.astimezone(display_tz()).isoformat()
