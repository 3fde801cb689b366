"""Sendet die Antwort des Bots über die LINE Reply API zurück."""
import logging
from typing import Optional

from linebot.v3.messaging import AsyncMessagingApi, ReplyMessageRequest, TextMessage

logger = logging.getLogger(__name__)


class LineReplySender:
    """Kapselt den Reply-Aufruf. Ein Reply-Token gilt nur einmal und nur kurz,
    daher wird bei Fehlern nicht wiederholt."""

    def __init__(self, messaging_api: AsyncMessagingApi) -> None:
        self.messaging_api = messaging_api

    async def reply(self, reply_token: Optional[str], text: str) -> bool:
        """Schickt genau eine Textnachricht. Fehler werden nur geloggt."""
        if not reply_token:
            logger.error("Cannot reply without reply token (standby mode?)")
            return False
        request = ReplyMessageRequest(reply_token=reply_token, messages=[TextMessage(text=text)])
        try:
            await self.messaging_api.reply_message(request)
        except Exception as e:
            logger.error(f"Failed to reply with token {reply_token}: {e}")
            return False
        return True
