import base64
import datetime
import hashlib
import hmac
import json

import pytest

from app.core.config import Settings
from app.core.db_sqla import create_db_engine, create_session_factory, init_db
from app.core.history import HistoryStore

CHANNEL_SECRET = "test_channel_secret"


@pytest.fixture
def test_settings():
    return Settings(
        LINE_CHANNEL_TOKEN="test_token",
        LINE_CHANNEL_SECRET=CHANNEL_SECRET,
        GEMINI_API_KEY="test_key",
        GEMINI_MODEL="gemini-test",
        DATABASE_URL="",
    )


@pytest.fixture
def session_factory(tmp_path):
    # Datei statt :memory:, damit auch Threads aus dem Executor dieselbe DB sehen.
    engine = create_db_engine(f"sqlite:///{tmp_path / 'history.db'}")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def history_store(session_factory):
    return HistoryStore(session_factory)


@pytest.fixture
def fixed_now():
    return datetime.datetime(2024, 5, 17, 9, 30, 0)


def sign(body, secret: str = CHANNEL_SECRET) -> str:
    if isinstance(body, str):
        body = body.encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def _base_event(event_type: str, user_id: str) -> dict:
    return {
        "type": event_type,
        "mode": "active",
        "timestamp": 1462629479859,
        "source": {"type": "user", "userId": user_id},
        "webhookEventId": f"01FZ74A0TDDPYRVKNK77XKC3{event_type[:2].upper()}",
        "deliveryContext": {"isRedelivery": False},
    }


def text_event(text: str, reply_token: str = "reply_1", user_id: str = "U_alice") -> dict:
    event = _base_event("message", user_id)
    event["replyToken"] = reply_token
    event["message"] = {
        "id": "444573844083572737",
        "type": "text",
        "quoteToken": "q3Plxr4AgKd",
        "text": text,
    }
    return event


def image_event(reply_token: str = "reply_img", user_id: str = "U_alice") -> dict:
    event = _base_event("message", user_id)
    event["replyToken"] = reply_token
    event["message"] = {
        "id": "354718705033693861",
        "type": "image",
        "quoteToken": "yHAz4Ua2wx7",
        "contentProvider": {"type": "line"},
    }
    return event


def unfollow_event(user_id: str = "U_alice") -> dict:
    return _base_event("unfollow", user_id)


def webhook_body(*events: dict) -> str:
    return json.dumps({"destination": "U_bot", "events": list(events)})
