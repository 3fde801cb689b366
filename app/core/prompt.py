"""Baut den Kontext für Gemini: erst Anweisungen, dann Verlauf, dann die
aktuelle Frage, zum Schluss die Stilvorgaben. Die Reihenfolge ist Teil des
Prompts und darf nicht umgestellt werden."""
import datetime
from typing import List, Optional, Sequence

from app.core.models import StoredMessage

PERSONA = (
    "You are a secretary. Your job is to answer the user's questions "
    "based on the chat history between you and the user."
)
HISTORY_HEADER = "Here is the chat history so far:"
UTTERANCE_HEADER = "Based on the chat history above, the user now says to you:"
DECODE_FAILED = "system: user sent a message but failed to decode"

DIRECTIVES = [
    "Give the user a fitting reply. Do not use markdown syntax and keep the tone as natural as possible.",
    "Note: the user's question may or may not be related to the chat history, decide for yourself.",
    "Note: as a secretary, avoid drifting into pointless tangents with the user.",
    "Note: reply to the user directly instead of saying things like "
    "\"based on our chat history, I should answer...\".",
    "Note: when the user asks about a photo, what you see is the photo already converted "
    "into a text description, but treat it as a \"photo\" and not a \"photo description\", "
    "because to the user it feels like they uploaded a photo.",
    "Note: to sound more natural, do not end with a period or with unnecessary emoji.",
    "Note: if the user asks about \"this\", it refers to the last parts of the chat history. "
    "The history is ordered by time, so \"this\" means the most recent thing sent to you.",
]


def format_now(now: datetime.datetime) -> str:
    return f"The current time is {now.strftime('%Y-%m-%d %H:%M:%S')}, {now.strftime('%A')}"


def format_history_entry(message: Optional[StoredMessage]) -> str:
    if message is None:
        return DECODE_FAILED
    return f"{message.role.value}: {message.content}"


def compose_context(
    history: Sequence[Optional[StoredMessage]],
    text: str,
    now: datetime.datetime,
) -> List[str]:
    """Liefert die Fragmente in fester Reihenfolge.

    ``history`` wird so übernommen, wie der Speicher sie liefert (neueste
    zuerst); ``None`` steht für eine nicht lesbare Nachricht.
    """
    fragments = [PERSONA, format_now(now), HISTORY_HEADER]
    fragments.extend(format_history_entry(m) for m in history)
    fragments.append(UTTERANCE_HEADER)
    fragments.append(text)
    fragments.extend(DIRECTIVES)
    return fragments


def stateless_context(text: str) -> List[str]:
    """Ohne Verlauf geht nur die Nachricht selbst an das Modell."""
    return [text]
