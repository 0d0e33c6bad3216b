"""
Contract analysis service.

Combines the trust evaluation of a contract with slippage, gas and
profitability estimates into a recommended trading action. Analyses are
cached separately from trust evaluations, with their own TTL.
"""

import logging
from typing import Dict, Iterable, List, Optional

from defi_trust.config import AnalysisConfig
from defi_trust.models.analysis import (
    ContractAnalysis,
    Platform,
    RecommendedAction,
    SwapRoute,
    TokenLibraryEntry,
)
from defi_trust.models.trust import TrustTier
from defi_trust.services.base_service import BaseService
from defi_trust.services.cache_service import EvaluationCache
from defi_trust.services.trust_engine import TrustEngine
from defi_trust.utils.validation import require_address, require_addresses

# Verified tokens the library starts with
DEFAULT_TOKEN_LIBRARY = (
    TokenLibraryEntry(
        symbol="RAY",
        address="4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
        decimals=6,
        platform=Platform.RAYDIUM,
    ),
    TokenLibraryEntry(
        symbol="ORCA",
        address="orcaEKTdK7LKz57vaAYr9QeNsVEPfiu6QeMU1kektZE",
        decimals=6,
        platform=Platform.ORCA,
    ),
)


def determine_recommended_action(
    safety_level: TrustTier,
    profitability: float,
    slippage_safe: bool
) -> RecommendedAction:
    """
    Map a safety level and profitability score to a trading action.

    Red contracts and contracts without slippage safety are always avoided.
    Yellow contracts are held only when quite profitable. Green contracts
    are bought, held or sold depending on profitability.
    """
    if safety_level == TrustTier.RED or not slippage_safe:
        return RecommendedAction.AVOID

    if safety_level == TrustTier.YELLOW:
        return RecommendedAction.HOLD if profitability > 60 else RecommendedAction.AVOID

    if profitability > 70:
        return RecommendedAction.BUY
    if profitability > 40:
        return RecommendedAction.HOLD
    return RecommendedAction.SELL


class ContractAnalyzer(BaseService):
    """Live safety and profitability assessment for contracts."""

    def __init__(
        self,
        engine: TrustEngine,
        cache: EvaluationCache[ContractAnalysis],
        config: Optional[AnalysisConfig] = None,
        token_library: Optional[Iterable[TokenLibraryEntry]] = None,
        concurrency_limit: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the analyzer.

        Args:
            engine: Trust engine supplying safety assessments
            cache: Analysis cache keyed by address
            config: Gas and profitability settings
            token_library: Initial verified tokens; defaults to RAY and ORCA
            concurrency_limit: Maximum concurrent analyses in a batch
            logger: Optional logger instance
        """
        super().__init__(concurrency_limit=concurrency_limit, logger=logger)
        self.engine = engine
        self.cache = cache
        self.config = config or AnalysisConfig()
        self._token_library: Dict[str, TokenLibraryEntry] = {}
        for token in (DEFAULT_TOKEN_LIBRARY if token_library is None else token_library):
            self.add_token(token)

    async def assess_contract_safety(self, address: str) -> ContractAnalysis:
        """
        Analyze a contract, serving a fresh cached analysis when there is one.

        Raises:
            ValidationError: If the address is empty
            ProviderError: If the contract could not be evaluated
        """
        require_address(address)

        cached = self.cache.get_fresh(address, self.engine.clock())
        if cached is not None:
            return cached

        evaluation = await self.engine.evaluate(address)
        gas_estimate = await self.estimate_gas_costs(address)
        profitability = await self.analyze_profitability(address)
        slippage_safety = await self.check_slippage_safety(address)

        analysis = ContractAnalysis(
            address=address,
            safety_assessment=evaluation.tier,
            profitability_score=profitability,
            gas_estimate=gas_estimate,
            slippage_safety=slippage_safety,
            recommended_action=determine_recommended_action(
                evaluation.tier, profitability, slippage_safety
            ),
            updated_at=self.engine.clock(),
        )
        self.cache.put(address, analysis)
        self.logger.info(
            f"Analyzed {address}: {analysis.safety_assessment.value}, "
            f"recommend {analysis.recommended_action.value}"
        )
        return analysis

    async def check_slippage_safety(self, address: str) -> bool:
        """Whether swaps of a token are considered slippage-safe.

        Only tokens in the verified token library are slippage-safe.
        """
        token = self._token_library.get(address)
        return token is not None and token.verified

    async def estimate_gas_costs(self, address: str) -> float:
        """Estimated cost of interacting with a contract, in SOL."""
        return self.config.gas_estimate_sol

    async def analyze_profitability(self, address: str) -> float:
        """Profitability score between 0 and 100."""
        return self.config.baseline_profitability

    async def batch_analyze_contracts(self, addresses: Iterable[str]) -> Dict[str, ContractAnalysis]:
        """
        Analyze several contracts concurrently.

        Contracts whose analysis failed are omitted from the result.

        Raises:
            ValidationError: If no addresses are given
        """
        unique = require_addresses(addresses)
        successes, failures = await self.gather_settled(unique, self.assess_contract_safety)
        for address, error in failures:
            self.logger.warning(f"Analysis failed for {address}: {str(error)}")
        return dict(successes)

    async def get_swap_route(self, input_token: str, output_token: str, amount: float) -> SwapRoute:
        """
        Check whether swapping between two tokens is safe.

        The swap is safe when neither token is red and both are
        slippage-safe. Routing is direct.

        Raises:
            ValidationError: If either address is empty
            ProviderError: If either token could not be evaluated
        """
        input_analysis, output_analysis = await self.gather_with_concurrency(
            self.assess_contract_safety(input_token),
            self.assess_contract_safety(output_token),
        )

        safe = (
            input_analysis.safety_assessment != TrustTier.RED
            and output_analysis.safety_assessment != TrustTier.RED
            and input_analysis.slippage_safety
            and output_analysis.slippage_safety
        )
        return SwapRoute(safe=safe, route=[input_token, output_token], estimated_output=amount)

    def add_token(self, token: TokenLibraryEntry) -> None:
        """Add or replace a token in the library."""
        self._token_library[token.address] = token
        # A cached analysis may predate the token's slippage safety
        self.cache.invalidate(token.address)

    def get_token(self, address: str) -> Optional[TokenLibraryEntry]:
        """Get a token from the library."""
        return self._token_library.get(address)

    def get_verified_tokens_by_platform(self, platform: Platform) -> List[TokenLibraryEntry]:
        """Get the verified library tokens of a platform."""
        platform = Platform(platform)
        return [
            token for token in self._token_library.values()
            if token.platform == platform and token.verified
        ]
