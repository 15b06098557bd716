import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 5


def _base36(number: int) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(_ALPHABET[remainder])
        if number == 0:
            return "".join(reversed(digits))


def generate_order_reference(now: float | None = None) -> str:
    """Correlation id for one checkout attempt: base36 millisecond timestamp plus a random suffix."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"ORD{_base36(millis)}{suffix}"
