"""Mail port: abstract interface for transactional e-mail dispatch."""

from abc import ABC, abstractmethod


class MailPort(ABC):
    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send an e-mail message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
