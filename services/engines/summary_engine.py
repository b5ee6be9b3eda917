from .base import ResponseEngine

PERIODIC_SUMMARY_TEXT = "This is a periodic summary."


class SummaryEngine(ResponseEngine):
    async def reply(self, tenant_cfg, text):
        return PERIODIC_SUMMARY_TEXT
