"""Datenmodelle des Bots: eingehende LINE-Events als getaggte Varianten und
die gespeicherten Nachrichten des Gesprächsverlaufs."""
import datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated


class Role(str, Enum):
    user = "user"
    bot = "bot"


class Kind(str, Enum):
    text = "text"
    image = "image"


class StoredMessage(BaseModel):
    """Eine Nachricht im Verlauf eines Nutzers (nur anlegen, nie ändern)."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    role: Role
    kind: Kind
    # Bei Bildern die bereits erzeugte Textbeschreibung.
    content: str
    created_at: datetime.datetime


# ---------------------------------------------------------------------
# Nachrichteninhalte
# ---------------------------------------------------------------------
class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    type: Literal["image"] = "image"
    message_id: str


class OtherContent(BaseModel):
    """Sticker, Video, Audio, Ort, ... werden nicht beantwortet."""

    type: Literal["other"] = "other"
    original_type: Optional[str] = None


MessageContent = Annotated[
    Union[TextContent, ImageContent, OtherContent], Field(discriminator="type")
]


# ---------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------
class MessageEvent(BaseModel):
    type: Literal["message"] = "message"
    # Fehlt z.B. im Standby-Modus; dann kann nicht geantwortet werden.
    reply_token: Optional[str] = None
    source_id: Optional[str] = None
    message: MessageContent


class OtherEvent(BaseModel):
    type: Literal["other"] = "other"
    original_type: Optional[str] = None
    reply_token: Optional[str] = None
    source_id: Optional[str] = None


InboundEvent = Annotated[Union[MessageEvent, OtherEvent], Field(discriminator="type")]
