from .base import ResponseEngine


class EchoEngine(ResponseEngine):
    async def reply(self, tenant_cfg, text):
        return text
