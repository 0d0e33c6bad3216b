"""Unit tests for ContractAnalyzer."""

import pytest

from defi_trust.config import AnalysisConfig
from defi_trust.models.analysis import Platform, RecommendedAction, TokenLibraryEntry
from defi_trust.models.trust import TrustTier
from defi_trust.services.cache_service import EvaluationCache
from defi_trust.services.contract_analyzer import ContractAnalyzer, determine_recommended_action
from defi_trust.utils.errors import ProviderError
from tests.fixtures.common import (
    HONEYPOT_INDICATORS,
    ORCA_MINT,
    RAY_MINT,
    SAFE_INDICATORS,
    START,
    USDC_MINT,
)


@pytest.mark.parametrize("tier, profitability, slippage_safe, expected", [
    (TrustTier.RED, 100, True, RecommendedAction.AVOID),
    (TrustTier.GREEN, 100, False, RecommendedAction.AVOID),
    (TrustTier.YELLOW, 61, True, RecommendedAction.HOLD),
    (TrustTier.YELLOW, 60, True, RecommendedAction.AVOID),
    (TrustTier.GREEN, 71, True, RecommendedAction.BUY),
    (TrustTier.GREEN, 70, True, RecommendedAction.HOLD),
    (TrustTier.GREEN, 41, True, RecommendedAction.HOLD),
    (TrustTier.GREEN, 40, True, RecommendedAction.SELL),
])
def test_determine_recommended_action(tier, profitability, slippage_safe, expected):
    assert determine_recommended_action(tier, profitability, slippage_safe) == expected


def analysis_cache():
    return EvaluationCache(600, timestamp_getter=lambda analysis: analysis.updated_at)


class TestContractAnalyzer:
    """Test suite for ContractAnalyzer."""

    @pytest.mark.asyncio
    async def test_assess_library_token(self, analyzer):
        analysis = await analyzer.assess_contract_safety(RAY_MINT)

        assert analysis.address == RAY_MINT
        assert analysis.safety_assessment == TrustTier.YELLOW
        assert analysis.slippage_safety is True
        assert analysis.gas_estimate == 0.001
        assert analysis.profitability_score == 50
        assert analysis.recommended_action == RecommendedAction.AVOID
        assert analysis.updated_at == START

    @pytest.mark.asyncio
    async def test_green_library_token_with_high_profitability_is_a_buy(self, activity_engine, signal_provider):
        signal_provider.overrides[RAY_MINT] = SAFE_INDICATORS
        analyzer = ContractAnalyzer(
            activity_engine,
            analysis_cache(),
            config=AnalysisConfig(baseline_profitability=80),
        )

        analysis = await analyzer.assess_contract_safety(RAY_MINT)

        assert analysis.safety_assessment == TrustTier.GREEN
        assert analysis.recommended_action == RecommendedAction.BUY

    @pytest.mark.asyncio
    async def test_unknown_token_is_not_slippage_safe(self, analyzer):
        analysis = await analyzer.assess_contract_safety(USDC_MINT)
        assert analysis.slippage_safety is False
        assert analysis.recommended_action == RecommendedAction.AVOID

    @pytest.mark.asyncio
    async def test_analysis_is_cached(self, analyzer, signal_provider, clock):
        first = await analyzer.assess_contract_safety(RAY_MINT)
        clock.advance(seconds=400)
        second = await analyzer.assess_contract_safety(RAY_MINT)

        assert second is first
        assert signal_provider.call_count(RAY_MINT) == 1

    @pytest.mark.asyncio
    async def test_analysis_expires_after_ttl(self, analyzer, clock):
        first = await analyzer.assess_contract_safety(RAY_MINT)
        clock.advance(seconds=600)
        second = await analyzer.assess_contract_safety(RAY_MINT)

        assert second.updated_at == clock.now
        assert second.updated_at > first.updated_at

    @pytest.mark.asyncio
    async def test_batch_analyze_omits_failures(self, analyzer, signal_provider):
        signal_provider.failing.add(USDC_MINT)

        results = await analyzer.batch_analyze_contracts([RAY_MINT, USDC_MINT, ORCA_MINT])

        assert list(results) == [RAY_MINT, ORCA_MINT]

    @pytest.mark.asyncio
    async def test_swap_route_between_library_tokens_is_safe(self, analyzer):
        route = await analyzer.get_swap_route(RAY_MINT, ORCA_MINT, 250)
        assert route.safe is True
        assert route.route == [RAY_MINT, ORCA_MINT]
        assert route.estimated_output == 250

    @pytest.mark.asyncio
    async def test_swap_route_with_red_token_is_unsafe(self, analyzer, signal_provider):
        signal_provider.overrides[ORCA_MINT] = HONEYPOT_INDICATORS
        route = await analyzer.get_swap_route(RAY_MINT, ORCA_MINT, 250)
        assert route.safe is False

    @pytest.mark.asyncio
    async def test_swap_route_with_unknown_token_is_unsafe(self, analyzer):
        route = await analyzer.get_swap_route(RAY_MINT, USDC_MINT, 250)
        assert route.safe is False

    @pytest.mark.asyncio
    async def test_swap_route_propagates_provider_errors(self, analyzer, signal_provider):
        signal_provider.failing.add(USDC_MINT)
        with pytest.raises(ProviderError):
            await analyzer.get_swap_route(RAY_MINT, USDC_MINT, 250)


class TestTokenLibrary:
    """Tests for the verified token library."""

    def test_seeded_tokens(self, analyzer):
        ray = analyzer.get_token(RAY_MINT)
        assert ray.symbol == "RAY"
        assert ray.decimals == 6
        assert ray.platform == Platform.RAYDIUM
        assert analyzer.get_token(USDC_MINT) is None

    def test_verified_tokens_by_platform(self, analyzer):
        orca_tokens = analyzer.get_verified_tokens_by_platform(Platform.ORCA)
        assert [token.symbol for token in orca_tokens] == ["ORCA"]
        assert analyzer.get_verified_tokens_by_platform("pump") == []

    def test_unverified_tokens_are_not_listed(self, analyzer):
        analyzer.add_token(TokenLibraryEntry(
            symbol="USDC", address=USDC_MINT, decimals=6, platform=Platform.ORCA, verified=False
        ))
        assert [token.symbol for token in analyzer.get_verified_tokens_by_platform(Platform.ORCA)] == ["ORCA"]

    @pytest.mark.asyncio
    async def test_added_token_becomes_slippage_safe(self, analyzer):
        first = await analyzer.assess_contract_safety(USDC_MINT)
        assert first.slippage_safety is False

        analyzer.add_token(TokenLibraryEntry(symbol="USDC", address=USDC_MINT, decimals=6, platform=Platform.ORCA))

        second = await analyzer.assess_contract_safety(USDC_MINT)
        assert second.slippage_safety is True

    @pytest.mark.asyncio
    async def test_unverified_library_token_is_not_slippage_safe(self, analyzer):
        analyzer.add_token(TokenLibraryEntry(
            symbol="USDC", address=USDC_MINT, decimals=6, platform=Platform.ORCA, verified=False
        ))

        assert analyzer.get_token(USDC_MINT) is not None
        assert await analyzer.check_slippage_safety(USDC_MINT) is False
        assert await analyzer.check_slippage_safety(ORCA_MINT) is True
