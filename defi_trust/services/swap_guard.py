"""
Trust-gated wallet swaps.

Every quote and swap is checked against the trust engine first: if either
token would be blocked, no quote is requested and no transaction is
recorded. Quotes are then checked for price impact, slippage tolerance and
route complexity.
"""

import logging
import secrets
import string
import threading
from typing import Dict, List, Optional, Tuple

from defi_trust.config import AnalysisConfig
from defi_trust.logging_config import log_with_context
from defi_trust.models.quotes import (
    JupiterQuote,
    ProfitabilityCheck,
    QuoteResult,
    QuoteSafety,
    RoutePlanStep,
    TransactionStatus,
    WalletTransaction,
)
from defi_trust.providers.quote_client import JUPITER_PROGRAM_ADDRESS, QuoteProvider
from defi_trust.services.base_service import BaseService
from defi_trust.services.trust_engine import TrustEngine
from defi_trust.utils.errors import (
    ResourceNotFoundError,
    UnsafeInteractionError,
    UnsafeTransactionError,
)
from defi_trust.utils.validation import require_address

WARNING_PRICE_IMPACT = "High price impact detected (>{limit:g}%)"
WARNING_SLIPPAGE = "High slippage tolerance (>{limit:g}%)"
WARNING_ROUTE = "Complex routing may increase failure risk"

_ID_ALPHABET = string.ascii_lowercase + string.digits

# Oldest records are dropped beyond this many
MAX_RECORDED_TRANSACTIONS = 10_000


class SwapGuard(BaseService):
    """Quotes and swaps gated on the trust level of both tokens."""

    def __init__(
        self,
        engine: TrustEngine,
        basic_quotes: QuoteProvider,
        ultra_quotes: QuoteProvider,
        config: Optional[AnalysisConfig] = None,
        logger: Optional[logging.Logger] = None,
        max_transactions: int = MAX_RECORDED_TRANSACTIONS
    ):
        """
        Initialize the swap guard.

        Args:
            engine: Trust engine used to flag tokens
            basic_quotes: Quote provider for the basic API
            ultra_quotes: Quote provider for the ultra API
            config: Quote safety limits
            logger: Optional logger instance
            max_transactions: Number of swap records kept in memory
        """
        super().__init__(logger=logger)
        self.engine = engine
        self.basic_quotes = basic_quotes
        self.ultra_quotes = ultra_quotes
        self.config = config or AnalysisConfig()
        self._transactions: Dict[str, WalletTransaction] = {}
        self.max_transactions = max_transactions
        self._lock = threading.RLock()

    async def ensure_tokens_safe(self, input_mint: str, output_mint: str) -> None:
        """
        Flag both tokens concurrently and refuse the pair if either is blocked.

        Raises:
            UnsafeInteractionError: If either token should be blocked
            ProviderError: If either token could not be evaluated
        """
        input_flag, output_flag = await self.gather_with_concurrency(
            self.engine.flag_interaction(input_mint),
            self.engine.flag_interaction(output_mint),
        )

        if input_flag.should_block:
            raise UnsafeInteractionError(
                f"Input token unsafe: {input_flag.reason}",
                address=input_mint,
                reason=input_flag.reason
            )
        if output_flag.should_block:
            raise UnsafeInteractionError(
                f"Output token unsafe: {output_flag.reason}",
                address=output_mint,
                reason=output_flag.reason
            )

    def verify_transaction_safety(self, quote: JupiterQuote) -> QuoteSafety:
        """Check a quote's price impact, slippage tolerance and route length."""
        warnings = []

        if quote.price_impact_pct > self.config.max_price_impact_pct:
            warnings.append(WARNING_PRICE_IMPACT.format(limit=self.config.max_price_impact_pct))

        if quote.slippage_bps > self.config.max_slippage_bps:
            warnings.append(WARNING_SLIPPAGE.format(limit=self.config.max_slippage_bps / 100))

        if quote.hop_count > self.config.max_route_hops:
            warnings.append(WARNING_ROUTE)

        return QuoteSafety(safe=not warnings, warnings=warnings)

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: Optional[int] = None,
        use_ultra_api: bool = False
    ) -> QuoteResult:
        """
        Get a swap quote for two tokens that pass the trust check.

        Raises:
            UnsafeInteractionError: If either token should be blocked
            ProviderError: If either token could not be evaluated
            QuoteError: If the quote could not be fetched
        """
        require_address(input_mint, "input_mint")
        require_address(output_mint, "output_mint")
        await self.ensure_tokens_safe(input_mint, output_mint)

        provider = self.ultra_quotes if use_ultra_api else self.basic_quotes
        quote = await provider.get_quote(input_mint, output_mint, amount, slippage_bps=slippage_bps)

        safety = self.verify_transaction_safety(quote)
        return QuoteResult(quote=quote, safety_warnings=safety.warnings)

    async def execute_swap(self, quote: JupiterQuote, wallet_address: str) -> WalletTransaction:
        """
        Record a swap for a wallet.

        Both tokens are flagged again because the quote may have been held
        past the evaluation that produced it.

        Raises:
            UnsafeInteractionError: If either token should be blocked
            UnsafeTransactionError: If the quote fails the safety checks
        """
        require_address(wallet_address, "wallet_address")
        await self.ensure_tokens_safe(quote.input_mint, quote.output_mint)

        safety = self.verify_transaction_safety(quote)
        if not safety.safe:
            raise UnsafeTransactionError(
                f"Transaction not safe: {', '.join(safety.warnings)}",
                warnings=safety.warnings
            )

        now = self.engine.clock()
        transaction = WalletTransaction(
            id=self._generate_transaction_id(int(now.timestamp() * 1000)),
            wallet_address=wallet_address,
            status=TransactionStatus.PENDING,
            amount=float(quote.in_amount),
            token=quote.input_mint,
            safety_check=True,
            timestamp=now,
        )
        with self._lock:
            self._transactions[transaction.id] = transaction
            while len(self._transactions) > self.max_transactions:
                del self._transactions[next(iter(self._transactions))]

        log_with_context(
            self.logger,
            "info",
            f"Recorded swap {transaction.id}",
            wallet=wallet_address,
            input_mint=quote.input_mint,
            output_mint=quote.output_mint
        )
        return transaction

    def get_transaction(self, transaction_id: str) -> WalletTransaction:
        """
        Get a recorded transaction.

        Raises:
            ResourceNotFoundError: If no transaction has the id, or its record was dropped
        """
        with self._lock:
            transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise ResourceNotFoundError(
                "Transaction not found",
                resource_type="transaction",
                resource_id=transaction_id
            )
        return transaction

    def get_wallet_transactions(self, wallet_address: str) -> List[WalletTransaction]:
        """Get a wallet's transactions, oldest first."""
        with self._lock:
            return [tx for tx in self._transactions.values() if tx.wallet_address == wallet_address]

    async def check_profitability(self, input_mint: str, output_mint: str, amount: int) -> ProfitabilityCheck:
        """
        Estimate the profit of a swap from an ultra quote.

        Raises:
            QuoteError: If the quote could not be fetched
        """
        quote = await self.ultra_quotes.get_quote(input_mint, output_mint, amount)
        estimated_profit = float(quote.out_amount) - float(quote.in_amount)
        return ProfitabilityCheck(
            profitable=estimated_profit > 0,
            estimated_profit=estimated_profit,
            price_impact=quote.price_impact_pct,
        )

    async def get_best_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: int
    ) -> List[List[RoutePlanStep]]:
        """
        Get the non-empty route plans offered by the basic and ultra APIs.

        Raises:
            QuoteError: If either quote could not be fetched
        """
        quotes: Tuple[JupiterQuote, JupiterQuote] = await self.gather_with_concurrency(
            self.basic_quotes.get_quote(input_mint, output_mint, amount),
            self.ultra_quotes.get_quote(input_mint, output_mint, amount),
        )
        return [quote.route_plan for quote in quotes if quote.route_plan]

    def jupiter_program_address(self) -> str:
        """Address of the Jupiter aggregator program used for routing."""
        return JUPITER_PROGRAM_ADDRESS

    @staticmethod
    def _generate_transaction_id(timestamp_ms: int) -> str:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
        return f"tx_{timestamp_ms}_{suffix}"
