"""API routes for contract analysis and the verified token library."""

# Standard library imports
from typing import Any, Dict

# Third-party library imports
from fastapi import APIRouter, Depends, Path

# Internal imports
from defi_trust.api.error_handling import success_response
from defi_trust.api.requests import AddTokenRequest, ContractBatchRequest, ContractRequest, SwapRouteRequest
from defi_trust.dependencies import get_contract_analyzer
from defi_trust.logging_config import get_logger
from defi_trust.models.analysis import Platform, TokenLibraryEntry
from defi_trust.services.contract_analyzer import ContractAnalyzer
from defi_trust.utils.errors import ResourceNotFoundError
from defi_trust.utils.validation import validate_solana_address

# Set up logging
logger = get_logger(__name__)

# Create router
router = APIRouter(
    prefix="/contract",
    tags=["contract analysis"],
)


@router.post("/analyze")
async def analyze_contract(
    body: ContractRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Analyze a contract's safety and profitability."""
    return success_response(await analyzer.assess_contract_safety(body.contract_address))


@router.post("/batch-analyze")
async def batch_analyze(
    body: ContractBatchRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Analyze several contracts; failed contracts are left out."""
    return success_response(await analyzer.batch_analyze_contracts(body.contract_addresses))


@router.post("/slippage-check")
async def slippage_check(
    body: ContractRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Check whether a token is slippage-safe."""
    safe = await analyzer.check_slippage_safety(body.contract_address)
    return success_response({"contractAddress": body.contract_address, "slippageSafe": safe})


@router.post("/gas-estimate")
async def gas_estimate(
    body: ContractRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Estimate the gas cost of interacting with a contract, in SOL."""
    estimate = await analyzer.estimate_gas_costs(body.contract_address)
    return success_response({"contractAddress": body.contract_address, "gasEstimate": estimate})


@router.post("/swap-route")
async def swap_route(
    body: SwapRouteRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Get a safety-checked swap route between two tokens."""
    return success_response(await analyzer.get_swap_route(body.input_token, body.output_token, body.amount))


@router.get("/token/{address}")
async def get_token(
    address: str = Path(..., description="The token mint address"),
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Get a token from the verified token library."""
    validate_solana_address(address)
    token = analyzer.get_token(address)
    if token is None:
        raise ResourceNotFoundError("Token not found in library", resource_type="token", resource_id=address)
    return success_response(token)


@router.get("/tokens/{platform}")
async def get_platform_tokens(
    platform: Platform = Path(..., description="The platform name"),
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Get the verified library tokens of a platform."""
    return success_response(analyzer.get_verified_tokens_by_platform(platform))


@router.post("/token/add")
async def add_token(
    body: AddTokenRequest,
    analyzer: ContractAnalyzer = Depends(get_contract_analyzer)
) -> Dict[str, Any]:
    """Add a token to the verified token library."""
    token = TokenLibraryEntry(**body.model_dump())
    analyzer.add_token(token)
    logger.info(f"Added {token.symbol} ({token.address}) to the token library")
    return success_response(token)
