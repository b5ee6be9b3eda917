from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class InboundEvent(BaseModel):
    """One event of a verified callback, reduced to what the router needs."""

    model_config = ConfigDict(frozen=True)

    kind: str
    reply_token: Optional[str] = None
    message_kind: Optional[str] = None
    text: Optional[str] = None

    @property
    def is_text_message(self) -> bool:
        return self.kind == "message" and self.message_kind == "text"

    @classmethod
    def from_sdk_event(cls, event: Any) -> "InboundEvent":
        # Works with linebot.v3.webhooks models; unknown events lack most attributes
        message = getattr(event, "message", None)
        return cls(
            kind=str(getattr(event, "type", None) or "unknown"),
            reply_token=getattr(event, "reply_token", None),
            message_kind=getattr(message, "type", None) if message is not None else None,
            text=getattr(message, "text", None) if message is not None else None,
        )
