"""Steuert die Kommunikation mit Gemini über dessen OpenAI-kompatible API.

Pro Anfrage wird ein eigener Client geöffnet und wieder geschlossen; es gibt
keinen Chat-Zustand zwischen zwei Aufrufen.
"""
import logging
import time
from typing import Callable, List, Sequence

from openai import AsyncOpenAI

from app.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GeminiAssistant:
    """Schickt die Kontextfragmente als eine Nachricht an Gemini und liefert
    die Antwort als Text zurück."""

    def __init__(self, config: Settings = None, client_factory: Callable[..., AsyncOpenAI] = AsyncOpenAI) -> None:
        self.settings = config or default_settings
        self._client_factory = client_factory

    def _build_messages(self, fragments: Sequence[str]) -> List[dict]:
        # Eine einzige User-Nachricht, jedes Fragment als eigener Text-Part.
        return [
            {
                "role": "user",
                "content": [{"type": "text", "text": fragment} for fragment in fragments],
            }
        ]

    async def ask(self, fragments: Sequence[str]) -> str:
        """Sendet den Kontext und gibt die Antwort zurück.

        Rückgabe:
            Inhalt aller Kandidaten hintereinander, ohne führende oder
            abschließende Leerzeichen. Schlägt der Aufruf fehl, ist die
            Fehlerbeschreibung selbst die Antwort.
        """
        start = time.monotonic()
        try:
            async with self._client_factory(
                api_key=self.settings.gemini_api_key,
                base_url=self.settings.gemini_base_url,
            ) as client:
                completion = await client.chat.completions.create(
                    model=self.settings.gemini_model,
                    messages=self._build_messages(fragments),
                    n=self.settings.gemini_candidate_count,
                )
        except Exception as e:
            logger.warning(f"Gemini request failed after {time.monotonic() - start:.2f}s: {e}")
            return str(e)

        logger.info(
            f"Gemini took {time.monotonic() - start:.2f}s to reply, context length {len(fragments)}"
        )

        reply = ""
        for choice in completion.choices:
            if choice.message is not None and choice.message.content:
                reply += choice.message.content
        return reply.strip()
