"""API routes for trust-gated wallet swaps."""

# Standard library imports
from typing import Any, Dict

# Third-party library imports
from fastapi import APIRouter, Depends, Path

# Internal imports
from defi_trust.api.error_handling import success_response
from defi_trust.api.requests import QuoteRequest, SwapAmountRequest, SwapRequest
from defi_trust.dependencies import get_swap_guard
from defi_trust.services.swap_guard import SwapGuard
from defi_trust.utils.validation import validate_solana_address

# Create router
router = APIRouter(
    prefix="/wallet",
    tags=["wallet"],
)


@router.post("/quote")
async def get_quote(
    body: QuoteRequest,
    guard: SwapGuard = Depends(get_swap_guard)
) -> Dict[str, Any]:
    """Get a swap quote for two tokens that pass the trust check."""
    result = await guard.get_quote(
        body.input_mint,
        body.output_mint,
        body.amount,
        slippage_bps=body.slippage_bps,
        use_ultra_api=body.use_ultra_api,
    )
    data = success_response(result.quote)
    data["data"]["safetyWarnings"] = result.safety_warnings
    return data


@router.post("/swap")
async def execute_swap(
    body: SwapRequest,
    guard: SwapGuard = Depends(get_swap_guard)
) -> Dict[str, Any]:
    """Record a trust-gated swap for a wallet."""
    return success_response(await guard.execute_swap(body.quote, body.wallet_address))


@router.get("/transaction/{transaction_id}")
async def get_transaction(
    transaction_id: str = Path(..., description="The transaction id"),
    guard: SwapGuard = Depends(get_swap_guard)
) -> Dict[str, Any]:
    """Get a recorded transaction."""
    return success_response(guard.get_transaction(transaction_id))


@router.get("/transactions/{address}")
async def get_wallet_transactions(
    address: str = Path(..., description="The wallet address"),
    guard: SwapGuard = Depends(get_swap_guard)
) -> Dict[str, Any]:
    """Get every transaction recorded for a wallet."""
    validate_solana_address(address, "wallet_address")
    return success_response(guard.get_wallet_transactions(address))


@router.post("/profitability")
async def check_profitability(
    body: SwapAmountRequest,
    guard: SwapGuard = Depends(get_swap_guard)
) -> Dict[str, Any]:
    """Estimate the profit of a swap."""
    return success_response(await guard.check_profitability(body.input_mint, body.output_mint, body.amount))


@router.post("/routes")
async def best_routes(
    body: SwapAmountRequest,
    guard: SwapGuard = Depends(get_swap_guard)
) -> Dict[str, Any]:
    """Get the route plans offered by the basic and ultra quote APIs."""
    return success_response(await guard.get_best_routes(body.input_mint, body.output_mint, body.amount))


@router.get("/jupiter-address")
async def jupiter_address(guard: SwapGuard = Depends(get_swap_guard)) -> Dict[str, Any]:
    """Get the Jupiter aggregator program address."""
    return success_response({"address": guard.jupiter_program_address()})
