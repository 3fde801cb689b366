"""Prüft die Signatur eingehender LINE-Webhooks und übersetzt die Events der
SDK in unsere eigenen Varianten (``MessageEvent`` / ``OtherEvent``)."""
from typing import List, Optional

from linebot.v3 import WebhookParser
from linebot.v3.webhooks import (
    Event,
    GroupSource,
    ImageMessageContent,
    MessageEvent as LineMessageEvent,
    RoomSource,
    TextMessageContent,
    UserSource,
)

from app.core.models import (
    ImageContent,
    InboundEvent,
    MessageContent,
    MessageEvent,
    OtherContent,
    OtherEvent,
    TextContent,
)


def source_id(source) -> Optional[str]:
    """Nutzer-ID bei 1:1-Chats, sonst die Gruppen- bzw. Raum-ID."""
    if isinstance(source, UserSource):
        return source.user_id
    if isinstance(source, GroupSource):
        return source.group_id
    if isinstance(source, RoomSource):
        return source.room_id
    return None


def convert_content(message) -> MessageContent:
    if isinstance(message, TextMessageContent):
        return TextContent(text=message.text)
    if isinstance(message, ImageMessageContent):
        return ImageContent(message_id=message.id)
    return OtherContent(original_type=getattr(message, "type", None))


def convert_event(event: Event) -> InboundEvent:
    if isinstance(event, LineMessageEvent):
        return MessageEvent(
            reply_token=event.reply_token,
            source_id=source_id(event.source),
            message=convert_content(event.message),
        )
    return OtherEvent(
        original_type=getattr(event, "type", None),
        reply_token=getattr(event, "reply_token", None),
        source_id=source_id(getattr(event, "source", None)),
    )


class WebhookReceiver:
    """Wrapper um den ``WebhookParser`` der LINE SDK.

    ``InvalidSignatureError`` der SDK wird unverändert weitergereicht, damit
    der Router mit 400 antworten kann.
    """

    def __init__(self, channel_secret: str) -> None:
        self.parser = WebhookParser(channel_secret)

    def parse(self, body: str, signature: str) -> List[InboundEvent]:
        return [convert_event(e) for e in self.parser.parse(body, signature)]
