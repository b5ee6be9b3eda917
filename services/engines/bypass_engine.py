from __future__ import annotations
import logging
from starlette.concurrency import run_in_threadpool

from core.errors import AnswerError, EmptyAnswerError
from data.tenants_store import TenantConfig
from services.answer_client import ExternalAnswerClient
from .base import ResponseEngine

PROCESSING_ERROR_TEXT = "Sorry, I encountered an error processing your request."
EMPTY_RESPONSE_TEXT = "Sorry, I couldn't generate a response."


class BypassEngine(ResponseEngine):
    """
    Forwards the user's text to the tenant's question-answering API and relays
    the answer. Upstream failures become a plain apology, never an error code.
    """

    def __init__(self, answers: ExternalAnswerClient, logger: logging.Logger | None = None):
        self.answers = answers
        self.log = logger or logging.getLogger(__name__)

    def question_for(self, tenant_cfg: TenantConfig, text: str) -> str | None:
        prefix = tenant_cfg.command_prefix
        if not prefix:
            return text
        if not text.startswith(prefix):
            return None
        return text[len(prefix):].strip() or None

    async def reply(self, tenant_cfg: TenantConfig, text: str) -> str | None:
        question = self.question_for(tenant_cfg, text)
        if question is None:
            self.log.debug(
                f"No {tenant_cfg.command_prefix!r} command in text, ignoring"
            )
            return None

        try:
            answer = await run_in_threadpool(
                self.answers.ask,
                tenant_cfg.api_url,
                tenant_cfg.api_auth_token,
                question,
                tenant_cfg.auth_scheme,
            )
            if not answer.strip():
                raise EmptyAnswerError("empty answer from API")
        except EmptyAnswerError as e:
            self.log.warning(f"Empty response from API {tenant_cfg.api_url}: {e}")
            return EMPTY_RESPONSE_TEXT
        except AnswerError as e:
            self.log.error(f"Error querying API {tenant_cfg.api_url}: {e}")
            return PROCESSING_ERROR_TEXT

        return answer
