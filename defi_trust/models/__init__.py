"""Pydantic models for the DeFi trust engine."""

from defi_trust.models.trust import (
    BatchOutcome,
    ContractActivity,
    ContractMetadata,
    EvaluationResult,
    InteractionFlag,
    SafetyIndicators,
    SyncFailure,
    SyncReport,
    TrustTier,
)
from defi_trust.models.analysis import (
    ContractAnalysis,
    Platform,
    PlatformConfig,
    PlatformContract,
    PlatformList,
    RawPlatformContract,
    RecommendedAction,
    SwapRoute,
    TokenLibraryEntry,
)
from defi_trust.models.quotes import (
    JupiterQuote,
    ProfitabilityCheck,
    QuoteResult,
    QuoteSafety,
    RoutePlanStep,
    SwapInfo,
    TransactionStatus,
    WalletTransaction,
)

__all__ = [
    "BatchOutcome",
    "ContractActivity",
    "ContractAnalysis",
    "ContractMetadata",
    "EvaluationResult",
    "InteractionFlag",
    "JupiterQuote",
    "ProfitabilityCheck",
    "Platform",
    "PlatformConfig",
    "PlatformContract",
    "PlatformList",
    "QuoteResult",
    "QuoteSafety",
    "RawPlatformContract",
    "RecommendedAction",
    "RoutePlanStep",
    "SafetyIndicators",
    "SwapInfo",
    "SwapRoute",
    "SyncFailure",
    "SyncReport",
    "TokenLibraryEntry",
    "TransactionStatus",
    "TrustTier",
    "WalletTransaction",
]
