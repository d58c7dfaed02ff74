"""Temporal anchor injected into every generation call."""

from datetime import datetime
from zoneinfo import ZoneInfo

from config.defaults import DEFAULTS


def temporal_anchor(now=None, tz=None):
    """Return e.g. 'Current Date/Time: 19/10/2026, 5:09:03 pm (Asia/Kolkata)'."""
    tz = tz or DEFAULTS["timezone"]
    zone = ZoneInfo(tz)
    now = now.astimezone(zone) if now else datetime.now(zone)
    hour = now.hour % 12 or 12
    stamp = f"{now:%d/%m/%Y}, {hour}:{now:%M:%S} {'am' if now.hour < 12 else 'pm'}"
    return f"Current Date/Time: {stamp} ({tz})"
