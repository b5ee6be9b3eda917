from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from linebot.v3 import WebhookParser

from core.errors import ReplyClientError
from data.tenants_store import TenantConfig, TenantsStore
from services.answer_client import ExternalAnswerClient
from services.engines.base import ResponseEngine
from services.engines.factory import get_engine
from services.line_client import LineReplyClient


@dataclass(frozen=True)
class Channel:
    """Everything one tenant needs at request time. Built once, shared read-only."""

    name: str
    config: TenantConfig
    client: Any  # LineReplyClient or anything with async send_text(token, text)
    engine: ResponseEngine
    parser: Any  # WebhookParser or anything with parse(body, signature)

    @property
    def path(self) -> str:
        return f"/{self.name}/callback"


def build_channels(
    store: TenantsStore,
    answers: ExternalAnswerClient,
    logger: logging.Logger,
    client_factory: Callable[[str], Any] = LineReplyClient,
) -> Mapping[str, Channel]:
    """
    Build the tenant -> Channel mapping. A tenant whose reply client cannot be
    created is left out (and logged); the others are still served.
    """
    channels: dict[str, Channel] = {}
    for name, cfg in store.items():
        try:
            client = client_factory(cfg.channel_access_token)
        except ReplyClientError as e:
            logger.error(f"Failed to initialize Messaging API for {name}: {e}")
            continue
        channels[name] = Channel(
            name=name,
            config=cfg,
            client=client,
            engine=get_engine(cfg, answers, logger),
            parser=WebhookParser(cfg.channel_secret),
        )
        logger.debug(f"Built channel {name} ({cfg.behavior_type.value})")
    return MappingProxyType(channels)


def close_channels(channels: Mapping[str, Channel]) -> None:
    for channel in channels.values():
        close = getattr(channel.client, "close", None)
        if close:
            close()
