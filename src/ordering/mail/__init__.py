"""Mail adapter registry.

MAIL_ADAPTER selects the adapter; only the in-memory fake ships today.
"""

import os

from ordering.mail.fake_adapter import FakeMailAdapter
from ordering.mail.port import MailPort

_current_mailer: MailPort | None = None


def get_mailer() -> MailPort:
    global _current_mailer
    if _current_mailer is None:
        adapter = os.getenv("MAIL_ADAPTER", "fake").lower()
        if adapter != "fake":
            raise ValueError(f"Unknown mail adapter: {adapter}")
        _current_mailer = FakeMailAdapter()
    return _current_mailer


def set_mailer(mailer: MailPort) -> None:
    global _current_mailer
    _current_mailer = mailer


def reset_mailer() -> None:
    global _current_mailer
    _current_mailer = None
