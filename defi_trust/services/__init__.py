"""Services for the DeFi trust engine."""

from defi_trust.services.cache_service import EvaluationCache
from defi_trust.services.contract_analyzer import ContractAnalyzer
from defi_trust.services.monitor_service import MonitorSet
from defi_trust.services.platform_aggregator import PlatformAggregator
from defi_trust.services.swap_guard import SwapGuard
from defi_trust.services.trust_engine import TrustEngine

__all__ = [
    "ContractAnalyzer",
    "EvaluationCache",
    "MonitorSet",
    "PlatformAggregator",
    "SwapGuard",
    "TrustEngine",
]
