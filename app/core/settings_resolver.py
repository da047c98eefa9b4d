"""
Typed access to admin-editable platform settings.

Values come from core.models.PlatformSetting and are read on every call;
nothing is cached in-process, so an admin change is visible to the next
request on every worker.

Usage:
    from core.settings_resolver import get_decimal

    pct = get_decimal("booking.commission_percent", default=Decimal("3"))
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import DatabaseError

logger = logging.getLogger(__name__)

_MISSING = object()


def get_setting(key: str, default: Any) -> Any:
    """
    Resolve a setting value by key.

    Falls back to ``default`` when the key is absent or the settings table is
    unreachable (e.g. migrations not applied yet).
    """
    from core.models import PlatformSetting

    try:
        value = (
            PlatformSetting.objects.filter(key=key)
            .values_list("value", flat=True)
            .first()
        )
    except DatabaseError:
        logger.warning(
            "Platform settings unavailable, using default",
            extra={"setting_key": key},
            exc_info=True,
        )
        return default

    if value is None:
        return default
    return value


def get_decimal(key: str, default: Decimal) -> Decimal:
    """
    Resolve a numeric setting as Decimal.

    Accepts JSON numbers and numeric strings; booleans and malformed values
    fall back to ``default``.
    """
    value = get_setting(key, _MISSING)
    if value is _MISSING or isinstance(value, bool):
        return default
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            logger.warning(
                "Malformed decimal setting, using default",
                extra={"setting_key": key, "value": value},
            )
            return default
    return default
