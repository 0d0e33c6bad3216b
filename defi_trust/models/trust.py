"""
Trust evaluation data models.

This module defines Pydantic models for the data that flows through the
trust engine: raw safety indicators, scoring metadata, the three trust
tiers and the cached evaluation results.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    """Immutable variant of :class:`CamelModel`."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TrustTier(str, Enum):
    """
    Trust classification of a contract.

    Tiers are ordered ``red < yellow < green``. The order is used for display
    and sorting only.
    """
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, TrustTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, TrustTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, TrustTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, TrustTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_RANK = {TrustTier.RED: 0, TrustTier.YELLOW: 1, TrustTier.GREEN: 2}


class SafetyIndicators(FrozenCamelModel):
    """
    Raw safety signals for a contract, as supplied by a signal provider.
    """
    rug_pull_risk: float = Field(ge=0, le=100)
    liquidity_score: float = Field(ge=0, le=100)
    holder_distribution: float = Field(ge=0, le=100)
    contract_verified: bool
    honeypot_detected: bool
    has_renounced: bool


class ContractActivity(FrozenCamelModel):
    """On-chain activity figures used by tier classification."""
    contract_age: int = Field(default=0, ge=0)
    transaction_volume: float = Field(default=0, ge=0)


class ContractMetadata(FrozenCamelModel):
    """
    Scoring input for tier classification.

    ``safety_score`` is always derived from indicators, never supplied.
    """
    contract_age: int = Field(ge=0)
    transaction_volume: float = Field(ge=0)
    safety_score: float = Field(ge=0, le=100)
    name: Optional[str] = None
    address: Optional[str] = None
    deployer: Optional[str] = None


class EvaluationResult(FrozenCamelModel):
    """
    Outcome of evaluating one contract address.

    Instances are immutable; a re-evaluation produces a new result that
    replaces the cached one.
    """
    address: str
    tier: TrustTier
    is_unsafe: bool
    safety_score: int
    indicators: SafetyIndicators
    advisory_signals: Tuple[str, ...] = ()
    evaluated_at: datetime


class InteractionFlag(CamelModel):
    """Decision on whether an interaction with a contract should be blocked."""
    should_block: bool
    reason: str


class SyncFailure(CamelModel):
    """A single address that could not be evaluated during a batch."""
    address: str
    code: str
    message: str


class SyncReport(CamelModel):
    """Result of re-evaluating the monitored set."""
    synced: List[str] = Field(default_factory=list)
    failures: List[SyncFailure] = Field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failures)


class BatchOutcome(BaseModel):
    """Successes and failures of a settled batch evaluation."""
    results: Dict[str, EvaluationResult] = Field(default_factory=dict)
    failures: List[SyncFailure] = Field(default_factory=list)
