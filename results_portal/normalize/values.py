from __future__ import annotations

import logging
import numbers
from datetime import UTC, date, datetime, timedelta
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Spreadsheet day serial of 1970-01-01.
UNIX_EPOCH_SERIAL = 25569
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MILLISECONDS_PER_DAY = 86_400_000


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    return bool(pd.api.types.is_scalar(value) and pd.isna(value))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def cell_text(value: Any) -> str:
    """Render a table cell as text; integral floats lose their `.0`."""
    if is_missing(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def serial_to_iso_date(serial: float) -> str:
    millis = round((float(serial) - UNIX_EPOCH_SERIAL) * _MILLISECONDS_PER_DAY)
    moment = _UNIX_EPOCH + timedelta(milliseconds=millis)
    return moment.date().isoformat()


def format_birth_date(value: Any) -> str:
    """Normalize a birth-date cell to `YYYY-MM-DD` text, or `""` when absent.

    Numbers are spreadsheet day serials. Text is only trimmed, never reparsed.
    """
    if is_missing(value):
        return ""

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if _is_number(value):
        if value == 0:
            return ""
        try:
            return serial_to_iso_date(value)
        except OverflowError:
            logger.warning("Date serial %r is out of range; leaving birth date empty", value)
            return ""

    return str(value).strip()


def format_phone(value: Any) -> str:
    return cell_text(value).strip()
