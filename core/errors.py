"""Error taxonomy for the callback service.

Configuration errors abort startup. Answer and delivery errors are per event
and never change the HTTP status already decided for a callback.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Tenant configuration could not be loaded."""


class MissingConfigError(ConfigError):
    pass


class MalformedConfigError(ConfigError):
    pass


class InvalidTenantConfigError(ConfigError):
    def __init__(self, tenant: str, reason: str):
        super().__init__(f"invalid config for tenant {tenant!r}: {reason}")
        self.tenant = tenant
        self.reason = reason


class ReplyClientError(Exception):
    """The messaging client for a tenant could not be built."""


class DeliveryError(Exception):
    """A reply could not be delivered to the platform."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class AnswerError(Exception):
    """The external question-answering API did not yield an answer."""


class UpstreamStatusError(AnswerError):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"API returned status code {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class MalformedResponseError(AnswerError):
    pass


class UnexpectedShapeError(AnswerError):
    pass


class EmptyAnswerError(AnswerError):
    pass


class AnswerTransportError(AnswerError):
    pass
