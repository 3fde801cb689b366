"""LINE Webhook Router: nimmt POST /callback entgegen."""
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from linebot.v3.exceptions import InvalidSignatureError

router = APIRouter(tags=["LINE Webhook"])
logger = logging.getLogger(__name__)


@router.post("/callback")
async def callback(request: Request):
    """Endpunkt für die LINE Plattform.

    - 400 bei ungültiger Signatur (es wird nichts verarbeitet).
    - 500 wenn der Body nicht gelesen werden kann.
    - sonst werden alle Textnachrichten nacheinander beantwortet.
    """
    receiver = request.app.state.receiver
    dispatcher = request.app.state.dispatcher

    signature = request.headers.get("X-Line-Signature", "")
    raw_body = await request.body()

    try:
        events = receiver.parse(raw_body.decode("utf-8"), signature)
    except InvalidSignatureError as e:
        logger.warning(f"Cannot parse request, invalid signature: {e}")
        return Response(status_code=400)
    except Exception as e:
        logger.error(f"Cannot parse request: {e}")
        return Response(status_code=500)

    count = await dispatcher.dispatch(events)
    logger.info(f"Webhook with {len(events)} events, {count} text messages handled")
    return PlainTextResponse("OK")
