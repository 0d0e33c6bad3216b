"""
Trust evaluation service.

The engine ties the pieces together: it fetches fresh safety indicators
from the signal provider, scores and classifies them, derives advisory
signals and caches the result per address.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

from defi_trust.config import TrustThresholds
from defi_trust.logging_config import log_with_context
from defi_trust.models.trust import (
    BatchOutcome,
    ContractActivity,
    ContractMetadata,
    EvaluationResult,
    InteractionFlag,
    SafetyIndicators,
    SyncFailure,
    TrustTier,
)
from defi_trust.providers.signal_provider import ActivityProvider, SignalProvider
from defi_trust.scoring import (
    CRITICAL_RUG_RISK_ABOVE,
    classify_trust_tier,
    compute_safety_score,
    derive_advisory_signals,
)
from defi_trust.services.base_service import BaseService, handle_errors
from defi_trust.services.cache_service import EvaluationCache
from defi_trust.utils.errors import ErrorCode, ProviderError, TrustEngineError
from defi_trust.utils.validation import require_address, require_addresses

REASON_HONEYPOT = "Honeypot detected - transaction may not be reversible"
REASON_CRITICAL_RUG_RISK = "Critical rug pull risk detected"
REASON_PASSED = "Contract passed safety checks"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _signal_provider_error(message: str) -> ProviderError:
    return ProviderError(message, provider="signal")


def _activity_provider_error(message: str) -> ProviderError:
    return ProviderError(message, provider="activity")


def failure_from_exception(address: str, error: BaseException) -> SyncFailure:
    """Describe a per-address batch failure."""
    if isinstance(error, TrustEngineError):
        return SyncFailure(address=address, code=error.code.value, message=error.message)
    return SyncFailure(address=address, code=ErrorCode.UNKNOWN_ERROR.value, message=str(error))


class TrustEngine(BaseService):
    """
    Evaluates contracts into trust tiers and gates interactions on them.

    Evaluations are served from the cache while fresh. Provider failures
    propagate to the caller and are never cached.
    """

    def __init__(
        self,
        signal_provider: SignalProvider,
        cache: EvaluationCache[EvaluationResult],
        thresholds: TrustThresholds,
        activity_provider: Optional[ActivityProvider] = None,
        clock: Callable[[], datetime] = utc_now,
        concurrency_limit: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the trust engine.

        Args:
            signal_provider: Source of safety indicators
            cache: Evaluation cache keyed by address
            thresholds: Tier classification thresholds
            activity_provider: Optional source of contract age and volume;
                without one both are taken as zero
            clock: Returns the current UTC time
            concurrency_limit: Maximum concurrent evaluations in a batch
            logger: Optional logger instance
        """
        super().__init__(concurrency_limit=concurrency_limit, logger=logger)
        self.signal_provider = signal_provider
        self.activity_provider = activity_provider
        self.cache = cache
        self.thresholds = thresholds
        self.clock = clock

    @handle_errors(_signal_provider_error)
    async def _fetch_indicators(self, address: str) -> SafetyIndicators:
        return await self.signal_provider.fetch(address)

    @handle_errors(_activity_provider_error)
    async def _fetch_activity(self, address: str) -> ContractActivity:
        if self.activity_provider is None:
            return ContractActivity()
        return await self.activity_provider.fetch_activity(address)

    async def evaluate(self, address: str) -> EvaluationResult:
        """
        Evaluate a contract, serving a fresh cached result when there is one.

        Args:
            address: Contract address

        Returns:
            The evaluation result

        Raises:
            ValidationError: If the address is empty
            ProviderError: If indicators or activity could not be fetched
        """
        require_address(address)

        cached = self.cache.get_fresh(address, self.clock())
        if cached is not None:
            return cached

        indicators = await self._fetch_indicators(address)
        activity = await self._fetch_activity(address)

        safety_score = compute_safety_score(indicators)
        metadata = ContractMetadata(
            contract_age=activity.contract_age,
            transaction_volume=activity.transaction_volume,
            safety_score=safety_score,
            address=address,
        )
        tier = classify_trust_tier(metadata, indicators, self.thresholds)

        result = EvaluationResult(
            address=address,
            tier=tier,
            is_unsafe=tier == TrustTier.RED,
            safety_score=safety_score,
            indicators=indicators,
            advisory_signals=derive_advisory_signals(indicators, tier),
            evaluated_at=self.clock(),
        )
        self.cache.put(address, result)

        log_with_context(
            self.logger,
            "info",
            f"Evaluated {address} as {tier.value}",
            safety_score=safety_score,
            signals=list(result.advisory_signals)
        )
        return result

    async def flag_interaction(self, address: str) -> InteractionFlag:
        """
        Decide whether interacting with a contract should be blocked.

        The reason names the most specific cause: a honeypot, then critical
        rug-pull risk, then the red tier and its signals.

        Raises:
            ValidationError: If the address is empty
            ProviderError: If the contract could not be evaluated
        """
        result = await self.evaluate(address)
        indicators = result.indicators

        if indicators.honeypot_detected:
            return InteractionFlag(should_block=True, reason=REASON_HONEYPOT)

        if indicators.rug_pull_risk > CRITICAL_RUG_RISK_ABOVE:
            return InteractionFlag(should_block=True, reason=REASON_CRITICAL_RUG_RISK)

        if result.tier == TrustTier.RED:
            return InteractionFlag(
                should_block=True,
                reason=f"Contract flagged as {result.tier.value}: {', '.join(result.advisory_signals)}",
            )

        return InteractionFlag(should_block=False, reason=REASON_PASSED)

    async def evaluate_many(self, addresses: Iterable[str]) -> BatchOutcome:
        """
        Evaluate several contracts concurrently.

        Every address is attempted; one failure never aborts the others.
        Duplicates are evaluated once.

        Raises:
            ValidationError: If no addresses are given
        """
        unique = require_addresses(addresses)

        async with self.log_timing(f"Batch evaluation of {len(unique)} contracts"):
            successes, errors = await self.gather_settled(unique, self.evaluate)

        failures = []
        for address, error in errors:
            failure = failure_from_exception(address, error)
            log_with_context(
                self.logger,
                "warning",
                f"Evaluation failed for {address}",
                code=failure.code,
                error=failure.message
            )
            failures.append(failure)

        return BatchOutcome(results=dict(successes), failures=failures)

    async def rank_many(self, addresses: Iterable[str]) -> Dict[str, TrustTier]:
        """
        Get the trust tier of several contracts.

        Addresses whose evaluation failed are omitted from the result.

        Raises:
            ValidationError: If no addresses are given
        """
        outcome = await self.evaluate_many(addresses)
        return {address: result.tier for address, result in outcome.results.items()}
