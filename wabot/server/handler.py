"""Routes forwarding HTTP automation requests to the live socket."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from ..core.logging import get_logger

router = APIRouter(prefix="/handler")

logger = get_logger("server.handler")


class SendRequest(BaseModel):
    """Pydantic model for an outgoing text message."""

    jid: str = Field(..., min_length=1, description="Recipient WhatsApp id")
    text: str = Field(..., min_length=1, description="Message body")


def _context(request: Request):
    return request.app.state.context


@router.get("/status")
async def status(request: Request):
    """Report connection and session state."""
    context = _context(request)
    socket = context.socket
    user = getattr(socket, "user", None) if socket is not None else None
    if isinstance(user, dict):
        user = user.get("id")
    else:
        user = getattr(user, "id", None)
    return {
        "connected": context.connected,
        "mode": "public" if context.public else "private",
        "user": user,
        "session": context.store.exists(),
    }


@router.post("/send")
async def send(payload: SendRequest, request: Request):
    """Forward a text message to the connected socket.

    Raises:
        HTTPException: 503 when no socket is connected, 502 when the
            messaging library rejects the message
    """
    context = _context(request)
    socket = context.socket
    if socket is None or not context.connected:
        raise HTTPException(status_code=503, detail="Socket not connected")

    try:
        await socket.send_message(payload.jid, {"text": payload.text})
    except Exception as e:
        logger.error(f"Failed to send message to {payload.jid}: {e!r}")
        raise HTTPException(status_code=502, detail="Failed to send message")

    logger.info(f"Message forwarded to {payload.jid}")
    return {"status": "sent", "jid": payload.jid}
