import logging
from typing import Mapping, Sequence

from fastapi import APIRouter, BackgroundTasks, FastAPI, Header, HTTPException, Request
from linebot.v3.exceptions import InvalidSignatureError

from core.errors import DeliveryError
from logger import logger as app_logger
from schemas.line import InboundEvent
from services.channels import Channel

router = APIRouter(tags=["line"])


def get_channels(request: Request) -> Mapping[str, Channel]:
    # Provided by create_app: app.state.channels
    return request.app.state.channels


async def process_events(
    channel: Channel,
    events: Sequence[InboundEvent],
    logger: logging.Logger = app_logger,
):
    """
    Reply to the text messages of one callback, in order. A failed delivery
    only loses that event's reply; the rest of the batch is still handled.
    """
    for event in events:
        logger.debug(f"Handling event: {event.kind} for {channel.name}")
        if not event.is_text_message:
            if event.kind != "message":
                logger.debug(f"Unsupported event type: {event.kind} for {channel.name}")
            else:
                logger.debug(
                    f"Unsupported message content: {event.message_kind} for {channel.name}"
                )
            continue

        logger.debug(f"Received text message: {event.text} for {channel.name}")
        reply_text = await channel.engine.reply(channel.config, event.text or "")
        if reply_text is None:
            continue
        if not event.reply_token:
            logger.warning(f"Message event without reply token for {channel.name}")
            continue

        try:
            await channel.client.send_text(event.reply_token, reply_text)
        except DeliveryError as e:
            logger.error(f"Error replying to message for {channel.name}: {e}")
            continue
        logger.debug(f"Sent reply for {channel.name}")


def make_callback_handler(channel: Channel, logger: logging.Logger = app_logger):
    """Build the POST /{name}/callback endpoint bound to one channel."""

    async def callback(
        request: Request,
        background: BackgroundTasks,
        x_line_signature: str | None = Header(default=None),
    ):
        logger.debug(f"Received callback request for {channel.name}")
        raw = await request.body()

        try:
            # undecodable bytes must still reach the signature check
            body = raw.decode("utf-8", errors="replace")
            sdk_events = channel.parser.parse(body, x_line_signature or "")
        except InvalidSignatureError:
            logger.warning(f"Invalid signature on callback for {channel.name}")
            raise HTTPException(status_code=400, detail="Invalid signature")
        except Exception as e:
            logger.error(f"Error parsing request for {channel.name}: {e}")
            raise HTTPException(status_code=500, detail="Could not parse callback")

        events = [InboundEvent.from_sdk_event(ev) for ev in sdk_events]

        # Reply after acknowledging; per-event failures never change the status
        background.add_task(process_events, channel, events, logger)
        return {"status": "OK"}

    callback.__name__ = f"{channel.name}_callback"
    return callback


def register_callbacks(
    app: FastAPI,
    channels: Mapping[str, Channel],
    logger: logging.Logger = app_logger,
):
    for name, channel in channels.items():
        app.add_api_route(
            channel.path,
            make_callback_handler(channel, logger),
            methods=["POST"],
            name=f"{name}_callback",
        )
        logger.debug(f"Registered callback handler at path: {channel.path} for {name}")


@router.get("/_debug/tenants")
async def debug_tenants(request: Request):
    channels = get_channels(request)
    return {
        "tenants": {
            name: channel.config.behavior_type.value for name, channel in channels.items()
        }
    }
