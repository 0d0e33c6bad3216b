"""Request validation models for the API.

This module defines Pydantic models for validating API request data.
Addresses must be base58-encoded 32-byte Solana public keys.
"""

from typing import Annotated, List, Optional

from pydantic import AfterValidator, Field

from defi_trust.models.analysis import Platform
from defi_trust.models.quotes import JupiterQuote
from defi_trust.models.trust import CamelModel
from defi_trust.utils.validation import validate_public_key


def _check_address(value: str) -> str:
    if not validate_public_key(value):
        raise ValueError(f"Invalid Solana address: {value}")
    return value


SolanaAddress = Annotated[str, AfterValidator(_check_address)]


class ContractRequest(CamelModel):
    """Model for requests about a single contract."""

    contract_address: SolanaAddress = Field(
        ...,
        description="The contract (token mint) address"
    )


class ContractBatchRequest(CamelModel):
    """Model for requests about several contracts."""

    contract_addresses: List[SolanaAddress] = Field(
        ...,
        min_length=1,
        description="Contract addresses to evaluate"
    )


class SwapRouteRequest(CamelModel):
    """Model for swap route requests."""

    input_token: SolanaAddress
    output_token: SolanaAddress
    amount: float = Field(..., gt=0)


class AddTokenRequest(CamelModel):
    """Model for adding a token to the verified token library."""

    symbol: str = Field(..., min_length=1)
    address: SolanaAddress
    decimals: int = Field(..., ge=0)
    platform: Platform
    verified: bool = True


class QuoteRequest(CamelModel):
    """Model for swap quote requests."""

    input_mint: SolanaAddress
    output_mint: SolanaAddress
    amount: int = Field(..., gt=0, description="Input amount in base units")
    slippage_bps: Optional[int] = Field(None, ge=0, le=10000)
    use_ultra_api: bool = False


class SwapRequest(CamelModel):
    """Model for swap execution requests."""

    quote: JupiterQuote
    wallet_address: SolanaAddress


class SwapAmountRequest(CamelModel):
    """Model for profitability and route requests."""

    input_mint: SolanaAddress
    output_mint: SolanaAddress
    amount: int = Field(..., gt=0, description="Input amount in base units")
