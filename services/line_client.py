from __future__ import annotations
from starlette.concurrency import run_in_threadpool
from linebot.v3.messaging import (
    ApiClient,
    Configuration,
    MessagingApi,
    ReplyMessageRequest,
    TextMessage,
)
from linebot.v3.messaging.exceptions import ApiException

from core.errors import DeliveryError, ReplyClientError


def _check_access_token(token: str) -> str:
    if not isinstance(token, str) or not token.strip():
        raise ReplyClientError("channel access token is empty")
    # token goes straight into an Authorization header
    if any(ch.isspace() or not ch.isprintable() for ch in token):
        raise ReplyClientError("channel access token contains invalid characters")
    return token


class LineReplyClient:
    """
    Wrapper around the LINE Messaging API (sync) client.
    Replies are exposed as async by running the blocking call in the thread pool.
    One instance per channel access token, kept for the process lifetime.
    """

    def __init__(self, access_token: str):
        configuration = Configuration(access_token=_check_access_token(access_token))
        self.api_client = ApiClient(configuration)
        self.messaging = MessagingApi(self.api_client)

    def reply_text(self, reply_token: str, text: str) -> None:
        # exactly one delivery attempt; callers decide what a failure means
        request = ReplyMessageRequest(
            reply_token=reply_token,
            messages=[TextMessage(text=text)],
        )
        try:
            self.messaging.reply_message(request)
        except ApiException as e:
            raise DeliveryError(
                f"LINE reply failed with status {e.status}: {e.body}", status=e.status
            ) from e
        except Exception as e:
            raise DeliveryError(f"LINE reply failed: {e}") from e

    async def send_text(self, reply_token: str, text: str) -> None:
        await run_in_threadpool(self.reply_text, reply_token, text)

    def close(self) -> None:
        self.api_client.close()
