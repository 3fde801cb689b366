"""FastAPI-Einstiegspunkt für den LINE-Sekretär-Bot."""
import logging

import uvicorn
from fastapi import FastAPI
from linebot.v3.messaging import AsyncApiClient, AsyncMessagingApi, Configuration

from app.core.assistant import GeminiAssistant
from app.core.config import settings
from app.core.db_sqla import create_db_engine, create_session_factory, init_db
from app.core.dispatcher import EventDispatcher
from app.core.handler import SecretaryHandler
from app.core.history import HistoryStore
from app.core.logging_setup import setup_logging
from app.core.replier import LineReplySender
from app.core.webhook import WebhookReceiver

from app.routers import callback as callback_router

logger = logging.getLogger(__name__)

# Initialisierung der App
app = FastAPI(
    title="LINE Secretary Bot",
    version="1.0.0",
    description="Relays LINE messages to Gemini, optionally with per-user chat history.",
)

# Setup Logging (File + Console)
setup_logging()


@app.on_event("startup")
async def startup_event() -> None:
    """Initialisiert alle Services einmalig beim Start der Anwendung.

    - Verbindet die Datenbank (nur wenn DATABASE_URL gesetzt ist).
    - Erstellt den LINE Messaging API Client.
    - Verdrahtet Receiver, Handler und Dispatcher im App State.
    """
    history = None
    app.state.engine = None
    if settings.history_enabled:
        engine = create_db_engine(settings.database_url, settings.db_connect_timeout)
        init_db(engine)
        app.state.engine = engine
        history = HistoryStore(create_session_factory(engine))

    app.state.line_api_client = AsyncApiClient(Configuration(access_token=settings.line_channel_token))
    replier = LineReplySender(AsyncMessagingApi(app.state.line_api_client))

    handler = SecretaryHandler(GeminiAssistant(settings), replier, history=history)
    app.state.receiver = WebhookReceiver(settings.line_channel_secret)
    app.state.dispatcher = EventDispatcher(handler)
    app.state.history_enabled = history is not None

    if history is not None:
        logger.info("LINE Secretary Bot started WITH chat history.")
    else:
        logger.info("LINE Secretary Bot started WITHOUT chat history (set DATABASE_URL to enable).")


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await app.state.line_api_client.close()
    if app.state.engine is not None:
        app.state.engine.dispose()


@app.get("/health")
async def health():
    return {"status": "ok", "history": getattr(app.state, "history_enabled", False)}


# Router registrieren
app.include_router(callback_router.router)


if __name__ == "__main__":
    logger.info(f"http://localhost:{settings.port}/")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
