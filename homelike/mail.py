"""Mail composer capability used to hand receipts off."""

from __future__ import annotations

import logging
import webbrowser
from abc import ABC, abstractmethod
from typing import Callable
from urllib.parse import quote

logger = logging.getLogger(__name__)


class MailComposer(ABC):
    """Accepts a fully composed message. Delivery is not our concern."""

    @abstractmethod
    def compose(self, recipient: str, subject: str, body: str) -> None:
        ...


def build_mailto_url(recipient: str, subject: str, body: str) -> str:
    return (
        f"mailto:{quote(recipient, safe='@')}"
        f"?subject={quote(subject, safe='')}&body={quote(body, safe='')}"
    )


class MailtoComposer(MailComposer):
    """Opens the user's mail client with a prefilled draft."""

    def __init__(self, opener: Callable[[str], bool] = webbrowser.open) -> None:
        self._open = opener

    def compose(self, recipient: str, subject: str, body: str) -> None:
        url = build_mailto_url(recipient, subject, body)
        if not self._open(url):
            logger.warning("No mail client accepted the draft for %s", recipient)
