from abc import ABC, abstractmethod

from data.tenants_store import TenantConfig


class ResponseEngine(ABC):
    """Decides the reply text for one inbound text message. None means no reply."""

    @abstractmethod
    async def reply(self, tenant_cfg: TenantConfig, text: str) -> str | None: ...
