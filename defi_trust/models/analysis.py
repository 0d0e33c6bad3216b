"""
Contract analysis and platform data models.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from defi_trust.models.trust import CamelModel, FrozenCamelModel, TrustTier


class RecommendedAction(str, Enum):
    """Trading recommendation derived from a contract analysis."""
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"
    AVOID = "avoid"


class Platform(str, Enum):
    """DEX / launchpad platforms whose contract lists are aggregated."""
    RAYDIUM = "raydium"
    ORCA = "orca"
    PUMP = "pump"
    METEORS = "meteors"


class ContractAnalysis(FrozenCamelModel):
    """Live safety and profitability assessment for a contract."""
    address: str
    safety_assessment: TrustTier
    profitability_score: float = Field(ge=0, le=100)
    gas_estimate: float = Field(ge=0)
    slippage_safety: bool
    recommended_action: RecommendedAction
    updated_at: datetime


class TokenLibraryEntry(CamelModel):
    """A token known to the verified token library."""
    symbol: str
    address: str
    decimals: int = Field(ge=0)
    platform: Platform
    verified: bool = True


class SwapRoute(CamelModel):
    """Safety-checked routing between two tokens."""
    safe: bool
    route: List[str]
    estimated_output: float


class PlatformConfig(CamelModel):
    """Connection details for a platform."""
    name: str
    api_endpoint: str
    rpc_endpoint: str
    program_id: str


class RawPlatformContract(CamelModel):
    """A contract as listed by a platform, before scoring."""
    address: str
    name: Optional[str] = None
    deployer: Optional[str] = None
    deployed_at: datetime
    volume: float = Field(default=0, ge=0)


class PlatformContract(CamelModel):
    """A platform contract enriched with its safety score and trust tier."""
    name: str
    address: str
    deployer: str
    contract_age: int = Field(ge=0)
    transaction_volume: float = Field(ge=0)
    safety_score: int = Field(ge=0, le=100)
    trust_level: TrustTier


class PlatformList(CamelModel):
    """Scored contract list for one platform."""
    platform: Platform
    contracts: List[PlatformContract] = Field(default_factory=list)
    last_updated: datetime
