"""Verteilt die Events eines Webhook-Aufrufs an den Nachrichten-Handler."""
import logging
from typing import Sequence

from app.core.models import InboundEvent, MessageEvent, TextContent

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Arbeitet die Events strikt nacheinander in Eingangsreihenfolge ab.

    Nur Textnachrichten werden an ``handler.handle_text_message`` gegeben,
    alles andere wird ignoriert.
    """

    def __init__(self, handler) -> None:
        self.handler = handler

    async def dispatch(self, events: Sequence[InboundEvent]) -> int:
        dispatched = 0
        for event in events:
            if isinstance(event, MessageEvent) and isinstance(event.message, TextContent):
                await self.handler.handle_text_message(event, event.message.text)
                dispatched += 1
            else:
                logger.debug(f"Ignoring event of type {event.type}")
        return dispatched
