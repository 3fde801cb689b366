"""Der eigentliche Ablauf pro Textnachricht.

Pipeline:
1) Verlauf laden (nur mit Datenbank), User-Nachricht speichern, Kontext bauen.
2) Gemini fragen.
3) Antwort über das Reply-Token senden.
4) Bot-Antwort speichern (nur mit Datenbank).
"""
import asyncio
import datetime
import logging
from typing import Callable, List, Optional

from app.core.assistant import GeminiAssistant
from app.core.history import HistoryStore, HistoryStoreError
from app.core.models import Kind, MessageEvent, Role, StoredMessage
from app.core.prompt import compose_context, stateless_context
from app.core.replier import LineReplySender

logger = logging.getLogger(__name__)


class SecretaryHandler:
    """Beantwortet Textnachrichten; mit ``history`` als Sekretär mit
    Gedächtnis, ohne als einfacher Weiterleiter an Gemini."""

    def __init__(
        self,
        assistant: GeminiAssistant,
        replier: LineReplySender,
        history: Optional[HistoryStore] = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self.assistant = assistant
        self.replier = replier
        self.history = history
        self.clock = clock

    async def _run_sync(self, fn, *args):
        # SQLAlchemy ist synchron, daher über den ThreadPool.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def _load_history(self, user_id: str) -> List[Optional[StoredMessage]]:
        try:
            return await self._run_sync(self.history.fetch_history, user_id)
        except HistoryStoreError as e:
            logger.error(f"Failed to load history for {user_id}, continuing without: {e}")
            return []

    async def _save(self, user_id: str, role: Role, content: str) -> None:
        try:
            await self._run_sync(self.history.append, user_id, role, Kind.text, content, self.clock())
        except HistoryStoreError as e:
            logger.error(f"Failed to save {role.value} message for {user_id}: {e}")

    async def build_context(self, event: MessageEvent, text: str) -> List[str]:
        if self.history is None:
            return stateless_context(text)

        user_id = event.source_id
        messages = await self._load_history(user_id)
        # Erst nach dem Lesen speichern: die aktuelle Nachricht gehört nicht in den Verlauf.
        await self._save(user_id, Role.user, text)
        return compose_context(messages, text, self.clock())

    async def handle_text_message(self, event: MessageEvent, text: str) -> str:
        context = await self.build_context(event, text)

        reply = await self.assistant.ask(context)
        await self.replier.reply(event.reply_token, reply)

        if self.history is not None:
            await self._save(event.source_id, Role.bot, reply)
        return reply
