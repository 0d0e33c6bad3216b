"""Common test fixtures for DeFi trust engine tests.

This module provides fixtures that can be reused across different test modules.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

import pytest

from defi_trust.config import AnalysisConfig, TrustThresholds
from defi_trust.models.quotes import JupiterQuote, RoutePlanStep, SwapInfo
from defi_trust.models.trust import ContractActivity, EvaluationResult, SafetyIndicators
from defi_trust.providers.signal_provider import DEFAULT_INDICATORS, StaticActivityProvider
from defi_trust.services.cache_service import EvaluationCache
from defi_trust.services.contract_analyzer import ContractAnalyzer
from defi_trust.services.monitor_service import MonitorSet
from defi_trust.services.swap_guard import SwapGuard
from defi_trust.services.trust_engine import TrustEngine
from defi_trust.utils.errors import ProviderError

# Valid base58-encoded 32-byte addresses
RAY_MINT = "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R"
ORCA_MINT = "orcaEKTdK7LKz57vaAYr9QeNsVEPfiu6QeMU1kektZE"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
WSOL_MINT = "So11111111111111111111111111111111111111112"
WALLET = "11111111111111111111111111111111"

SAFE_INDICATORS = SafetyIndicators(
    rug_pull_risk=0,
    liquidity_score=90,
    holder_distribution=90,
    contract_verified=True,
    honeypot_detected=False,
    has_renounced=True,
)
HONEYPOT_INDICATORS = SAFE_INDICATORS.model_copy(update={"honeypot_detected": True})
RUG_INDICATORS = DEFAULT_INDICATORS.model_copy(update={"rug_pull_risk": 85})

ESTABLISHED = ContractActivity(contract_age=400, transaction_volume=5_000_000)
YOUNG = ContractActivity(contract_age=10, transaction_volume=20_000)

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock for TTL tests."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, microseconds: int = 0) -> None:
        self.now += timedelta(seconds=seconds, microseconds=microseconds)


class CountingSignalProvider:
    """Signal provider double that counts calls and fails for chosen addresses."""

    name = "counting"

    def __init__(
        self,
        indicators: SafetyIndicators = DEFAULT_INDICATORS,
        overrides: Optional[Dict[str, SafetyIndicators]] = None,
        failing: Iterable[str] = ()
    ):
        self.indicators = indicators
        self.overrides = dict(overrides or {})
        self.failing = set(failing)
        self.calls: List[str] = []

    async def fetch(self, address: str) -> SafetyIndicators:
        self.calls.append(address)
        if address in self.failing:
            raise ProviderError(f"Signal API unavailable for {address}", provider=self.name, address=address)
        return self.overrides.get(address, self.indicators)

    def call_count(self, address: str) -> int:
        return self.calls.count(address)


def make_quote(
    input_mint: str = USDC_MINT,
    output_mint: str = RAY_MINT,
    in_amount: str = "1000000",
    out_amount: str = "1200000",
    price_impact_pct: float = 0.1,
    slippage_bps: int = 50,
    hops: int = 1
) -> JupiterQuote:
    """Build a quote with ``hops`` single-AMM route steps."""
    steps = [
        RoutePlanStep(swap_info=SwapInfo(
            amm_key=f"amm{index}",
            label="Raydium",
            input_mint=input_mint,
            output_mint=output_mint,
            in_amount=in_amount,
            out_amount=out_amount,
        ))
        for index in range(hops)
    ]
    return JupiterQuote(
        input_mint=input_mint,
        output_mint=output_mint,
        in_amount=in_amount,
        out_amount=out_amount,
        price_impact_pct=price_impact_pct,
        slippage_bps=slippage_bps,
        route_plan=steps,
    )


class StubQuoteProvider:
    """Quote provider double returning a preset quote for any pair."""

    def __init__(self, **quote_fields):
        self.quote_fields = quote_fields
        self.calls: List[dict] = []

    async def get_quote(self, input_mint, output_mint, amount, slippage_bps=None, only_direct_routes=False):
        self.calls.append({
            "input_mint": input_mint,
            "output_mint": output_mint,
            "amount": amount,
            "slippage_bps": slippage_bps,
        })
        fields = {"in_amount": str(amount), **self.quote_fields}
        if slippage_bps is not None:
            fields["slippage_bps"] = slippage_bps
        return make_quote(input_mint=input_mint, output_mint=output_mint, **fields)


@pytest.fixture
def clock():
    """A fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def signal_provider():
    """Signal provider serving the placeholder indicators."""
    return CountingSignalProvider()


@pytest.fixture
def thresholds():
    """Default tier thresholds."""
    return TrustThresholds()


@pytest.fixture
def evaluation_cache():
    """Evaluation cache with the default five-minute TTL."""
    return EvaluationCache[EvaluationResult](300, name="rug_pull")


@pytest.fixture
def engine(signal_provider, evaluation_cache, thresholds, clock):
    """Trust engine without an activity provider."""
    return TrustEngine(
        signal_provider=signal_provider,
        cache=evaluation_cache,
        thresholds=thresholds,
        clock=clock,
    )


@pytest.fixture
def activity_engine(signal_provider, evaluation_cache, thresholds, clock):
    """Trust engine whose contracts are established unless overridden."""
    return TrustEngine(
        signal_provider=signal_provider,
        cache=evaluation_cache,
        thresholds=thresholds,
        activity_provider=StaticActivityProvider(ESTABLISHED),
        clock=clock,
    )


@pytest.fixture
def monitor(engine):
    """Monitor set over the default engine."""
    return MonitorSet(engine)


@pytest.fixture
def analyzer(activity_engine):
    """Contract analyzer over the engine with activity data."""
    cache = EvaluationCache(600, timestamp_getter=lambda analysis: analysis.updated_at, name="contract_analysis")
    return ContractAnalyzer(activity_engine, cache, config=AnalysisConfig())


@pytest.fixture
def basic_quotes():
    """Basic quote provider double."""
    return StubQuoteProvider()


@pytest.fixture
def ultra_quotes():
    """Ultra quote provider double."""
    return StubQuoteProvider()


@pytest.fixture
def swap_guard(activity_engine, basic_quotes, ultra_quotes):
    """Swap guard over the engine with activity data."""
    return SwapGuard(activity_engine, basic_quotes, ultra_quotes, config=AnalysisConfig())
