"""Phone number helpers shared by the WhatsApp and reset-memory forms.

Stored numbers are digit strings (country + area + local). Only the local part
is ever shown with a separator, as ``<prefix>-<last four digits>``.
"""
from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")

DEFAULT_COUNTRY_CODE = "55"


def unformat_number(value: str | None) -> str:
    """Strip everything but digits."""
    if not value:
        return ""
    return _NON_DIGITS.sub("", value)


def format_local_number(value: str | None) -> str:
    """Format a local number for display.

    Non-digit input is dropped, so the only hyphen in the result is the one
    inserted here. Four digits or fewer are returned unchanged.
    """
    digits = unformat_number(value)
    if len(digits) > 4:
        return f"{digits[:-4]}-{digits[-4:]}"
    return digits


def sanitize_digits(value: str | None, max_length: int) -> str:
    return unformat_number(value)[:max_length]


def split_wa_number(
    stored: str | None, default_country_code: str = DEFAULT_COUNTRY_CODE
) -> tuple[str, str, str]:
    """Split a stored WhatsApp number into ``(country, area, local)``.

    Numbers shorter than 12 digits carry no recognisable country/area prefix
    and are returned as the local part, unformatted.
    """
    if not stored:
        return default_country_code, "", ""
    digits = str(stored)
    if len(digits) >= 12:
        return digits[:2], digits[2:4], f"{digits[4:-4]}-{digits[-4:]}"
    return default_country_code, "", digits


def compose_wa_number(country_code: str, area_code: str, local_number: str) -> str:
    return unformat_number(country_code) + unformat_number(area_code) + unformat_number(local_number)


def mask_phone(value: str | None) -> str:
    """Hide all but the last four digits, for logs."""
    digits = unformat_number(value)
    return "*" * max(len(digits) - 4, 0) + digits[-4:]
