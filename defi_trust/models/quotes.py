"""
Swap quote and wallet transaction models.

Quote payloads follow the Jupiter v6 ``/quote`` response shape and are
validated when they enter the system through the quote client.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from defi_trust.models.trust import CamelModel


class SwapInfo(CamelModel):
    """One AMM hop inside a route plan."""
    amm_key: str
    label: Optional[str] = None
    input_mint: str
    output_mint: str
    in_amount: str
    out_amount: str
    fee_amount: Optional[str] = None
    fee_mint: Optional[str] = None


class RoutePlanStep(CamelModel):
    """A hop of the route plan and the share of the input it carries."""
    swap_info: SwapInfo
    percent: float = Field(default=100, ge=0, le=100)


class JupiterQuote(CamelModel):
    """Swap quote returned by the Jupiter aggregator."""
    input_mint: str
    output_mint: str
    in_amount: str
    out_amount: str
    price_impact_pct: float = 0.0
    slippage_bps: int = Field(default=50, ge=0)
    route_plan: List[RoutePlanStep] = Field(default_factory=list)
    other_amount_threshold: Optional[str] = None
    swap_mode: Optional[str] = None

    @property
    def hop_count(self) -> int:
        return len(self.route_plan)


class QuoteSafety(CamelModel):
    """Outcome of transaction safety verification for a quote."""
    safe: bool
    warnings: List[str] = Field(default_factory=list)


class QuoteResult(CamelModel):
    """A trust-gated quote along with its safety warnings."""
    quote: JupiterQuote
    safety_warnings: List[str] = Field(default_factory=list)


class TransactionStatus(str, Enum):
    """Lifecycle state of a wallet transaction."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class WalletTransaction(CamelModel):
    """A swap submitted on behalf of a wallet."""
    id: str
    wallet_address: str
    transaction_hash: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    amount: float
    token: str
    safety_check: bool
    profitability: Optional[float] = None
    timestamp: datetime


class ProfitabilityCheck(CamelModel):
    """Estimated profit of a swap, from the output and input amounts of a quote."""
    profitable: bool
    estimated_profit: float
    price_impact: float
