import logging

from .base import ResponseEngine


class SilentEngine(ResponseEngine):
    """Used for tenants whose Type is not recognised: log and stay quiet."""

    def __init__(self, logger: logging.Logger | None = None):
        self.log = logger or logging.getLogger(__name__)

    async def reply(self, tenant_cfg, text):
        self.log.debug("Unrecognised Type, ignoring message")
        return None
