import re

COUNTRY_CODE = "255"
TRUNK_PREFIX = "0"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: str) -> str:
    """Canonical country-coded digit string for a mobile-money number.

    ``0712345678``, ``712345678``, ``+255 712 345 678`` all map to
    ``255712345678``. The gateway correlates calls by this exact string.
    """
    digits = _NON_DIGITS.sub("", raw or "")
    if digits.startswith(COUNTRY_CODE):
        return digits
    if digits.startswith(TRUNK_PREFIX):
        return COUNTRY_CODE + digits[len(TRUNK_PREFIX) :]
    return COUNTRY_CODE + digits


# Country code plus a nine-digit subscriber number
NORMALIZED_LENGTH = len(COUNTRY_CODE) + 9


def is_valid_phone(raw: str) -> bool:
    return len(normalize_phone(raw)) == NORMALIZED_LENGTH
