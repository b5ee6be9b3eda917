from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import httpx

from core.errors import (
    AnswerTransportError,
    MalformedResponseError,
    UnexpectedShapeError,
    UpstreamStatusError,
)

# Checked in order; the first one present wins
ANSWER_FIELDS: tuple[str, ...] = ("answer", "response", "result", "output", "text")


def authorization_header(auth_token: str | None, auth_scheme: str = "raw") -> Optional[str]:
    if not auth_token:
        return None
    if auth_scheme == "bearer" and not auth_token.lower().startswith("bearer "):
        return f"Bearer {auth_token}"
    return auth_token


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def extract_answer(payload: Mapping[str, Any]) -> str:
    """
    Pull the answer text out of a loosely shaped API response.

    - ``success: false`` is an upstream-reported failure; its ``message`` is
      relayed as the answer.
    - Otherwise the first of ANSWER_FIELDS holding a non-null value is used,
      serialised to JSON when it is not already a string.
    - Neither a known field nor ``success`` means the shape is not understood.

    An empty string is returned as-is; deciding what an empty answer means is
    up to the caller.
    """
    success = payload.get("success")
    if success is False:
        return _as_text(payload.get("message") or "")

    for field in ANSWER_FIELDS:
        value = payload.get(field)
        if value is not None:
            return _as_text(value)

    if "success" not in payload:
        raise UnexpectedShapeError(
            f"no answer field in response (keys: {sorted(payload.keys())})"
        )
    return ""


class ExternalAnswerClient:
    """
    Blocking client for the question-answering APIs used by bypass tenants.
    A single instance (and its connection pool) is shared by every tenant.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
    ):
        self.http = httpx.Client(timeout=timeout, transport=transport)
        self.log = logger or logging.getLogger(__name__)

    def ask(
        self,
        api_url: str,
        auth_token: str | None,
        question: str,
        auth_scheme: str = "raw",
    ) -> str:
        headers = {"Content-Type": "application/json"}
        authorization = authorization_header(auth_token, auth_scheme)
        if authorization:
            headers["Authorization"] = authorization

        try:
            resp = self.http.post(
                api_url,
                content=json.dumps({"question": question}),
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise AnswerTransportError(f"timeout calling {api_url}: {e}") from e
        except httpx.HTTPError as e:
            raise AnswerTransportError(f"error sending request to {api_url}: {e}") from e
        except httpx.InvalidURL as e:
            # not an HTTPError subclass
            raise AnswerTransportError(f"invalid API URL {api_url!r}: {e}") from e

        body = resp.text
        if not resp.is_success:
            raise UpstreamStatusError(resp.status_code, body)

        self.log.debug(f"API response from {api_url}: {body}")

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise MalformedResponseError(f"error parsing response: {e}, body: {body}") from e
        if not isinstance(payload, dict):
            raise MalformedResponseError(f"response is not a JSON object, body: {body}")

        return extract_answer(payload)

    def close(self) -> None:
        self.http.close()
