"""
Jupiter quote API client.

Quotes come from the Jupiter v6 ``/quote`` endpoint. The same client class
serves both the basic and the ultra endpoint; they differ only in base URL.
"""

from typing import Optional, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError as PydanticValidationError

from defi_trust.config import JupiterConfig
from defi_trust.logging_config import get_logger
from defi_trust.models.quotes import JupiterQuote
from defi_trust.providers.http_client import REQUEST_ERRORS, JsonApiClient
from defi_trust.utils.errors import QuoteError

logger = get_logger(__name__)

# Jupiter aggregator v6 program
JUPITER_PROGRAM_ADDRESS = "JUP4Fb2cqiRUcaTHdrPC8h2gNsA2ETXiPDD33WcGuJB"


@runtime_checkable
class QuoteProvider(Protocol):
    """Source of swap quotes."""

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: Optional[int] = None,
        only_direct_routes: bool = False
    ) -> JupiterQuote:
        """Fetch a quote; raises QuoteError on failure."""
        ...


class JupiterQuoteClient(JsonApiClient):
    """Client for one Jupiter quote endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        default_slippage_bps: int = 50,
        name: str = "basic",
        max_retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        initial_retry_delay: float = 1.0
    ):
        headers = {"x-api-key": api_key} if api_key else None
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            headers=headers,
            initial_retry_delay=initial_retry_delay,
            transport=transport
        )
        self.default_slippage_bps = default_slippage_bps
        self.name = name

    @classmethod
    def basic(cls, config: JupiterConfig, **kwargs) -> "JupiterQuoteClient":
        """Build a client for the basic quote endpoint."""
        return cls(
            config.basic_api_url,
            api_key=config.api_key,
            timeout=config.timeout,
            default_slippage_bps=config.default_slippage_bps,
            name="basic",
            **kwargs
        )

    @classmethod
    def ultra(cls, config: JupiterConfig, **kwargs) -> "JupiterQuoteClient":
        """Build a client for the ultra quote endpoint."""
        return cls(
            config.ultra_api_url,
            api_key=config.api_key,
            timeout=config.timeout,
            default_slippage_bps=config.default_slippage_bps,
            name="ultra",
            **kwargs
        )

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: Optional[int] = None,
        only_direct_routes: bool = False
    ) -> JupiterQuote:
        """
        Get a swap quote.

        Args:
            input_mint: Mint address of the token being sold
            output_mint: Mint address of the token being bought
            amount: Input amount in the token's base units
            slippage_bps: Slippage tolerance in basis points
            only_direct_routes: Restrict routing to single-hop routes

        Returns:
            The validated quote

        Raises:
            QuoteError: If the API fails or returns a malformed quote
        """
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps if slippage_bps is not None else self.default_slippage_bps),
        }
        if only_direct_routes:
            params["onlyDirectRoutes"] = "true"

        try:
            payload = await self.get_json("/quote", params=params)
        except REQUEST_ERRORS as e:
            raise QuoteError(
                f"Jupiter {self.name} quote failed: {str(e)}",
                details={"endpoint": self.name, "input_mint": input_mint, "output_mint": output_mint}
            ) from e

        try:
            quote = JupiterQuote.model_validate(payload)
        except PydanticValidationError as e:
            raise QuoteError(
                f"Malformed Jupiter {self.name} quote",
                details={"endpoint": self.name, "errors": e.errors(include_url=False, include_context=False)}
            ) from e

        logger.debug(f"Jupiter {self.name} quote {input_mint} -> {output_mint}: {quote.out_amount}")
        return quote
