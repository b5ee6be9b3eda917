import logging

from data.tenants_store import BehaviorType, TenantConfig
from services.answer_client import ExternalAnswerClient
from .base import ResponseEngine
from .bypass_engine import BypassEngine
from .echo_engine import EchoEngine
from .silent_engine import SilentEngine
from .summary_engine import SummaryEngine


def get_engine(
    tenant_cfg: TenantConfig,
    answers: ExternalAnswerClient,
    logger: logging.Logger | None = None,
) -> ResponseEngine:
    match tenant_cfg.behavior_type:
        case BehaviorType.ECHO:
            return EchoEngine()
        case BehaviorType.BYPASS:
            return BypassEngine(answers, logger)
        case BehaviorType.PERIODIC_SUMMARY:
            return SummaryEngine()
        case BehaviorType.UNKNOWN:
            return SilentEngine(logger)
    raise ValueError(f"Unsupported behavior type: {tenant_cfg.behavior_type}")
