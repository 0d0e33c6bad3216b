"""API routes for rug-pull checks and contract monitoring."""

# Standard library imports
from typing import Any, Dict

# Third-party library imports
from fastapi import APIRouter, Depends, Path

# Internal imports
from defi_trust.api.error_handling import success_response
from defi_trust.api.requests import ContractBatchRequest, ContractRequest
from defi_trust.dependencies import get_monitor_set, get_trust_engine
from defi_trust.logging_config import get_logger, log_with_context
from defi_trust.scoring import get_trust_tier_color
from defi_trust.services.monitor_service import MonitorSet
from defi_trust.services.trust_engine import TrustEngine
from defi_trust.utils.validation import validate_solana_address

# Set up logging
logger = get_logger(__name__)

# Create router
router = APIRouter(
    prefix="/rug-check",
    tags=["rug-pull checks"],
)


@router.post("")
async def check_contract(
    body: ContractRequest,
    engine: TrustEngine = Depends(get_trust_engine)
) -> Dict[str, Any]:
    """Evaluate a contract for rug-pull indicators."""
    result = await engine.evaluate(body.contract_address)
    data = success_response(result)
    data["data"]["tierColor"] = get_trust_tier_color(result.tier)
    return data


@router.post("/monitor")
async def start_monitoring(
    body: ContractRequest,
    monitor: MonitorSet = Depends(get_monitor_set)
) -> Dict[str, Any]:
    """Start monitoring a contract."""
    added = await monitor.start(body.contract_address)
    log_with_context(logger, "info", "Monitoring requested", address=body.contract_address, added=added)
    return success_response({
        "contractAddress": body.contract_address,
        "monitoring": True,
        "added": added,
    })


@router.delete("/monitor/{address}")
async def stop_monitoring(
    address: str = Path(..., description="The contract address"),
    monitor: MonitorSet = Depends(get_monitor_set)
) -> Dict[str, Any]:
    """Stop monitoring a contract."""
    validate_solana_address(address)
    removed = monitor.stop(address)
    return success_response({
        "contractAddress": address,
        "monitoring": False,
        "removed": removed,
    })


@router.get("/monitored")
async def list_monitored(monitor: MonitorSet = Depends(get_monitor_set)) -> Dict[str, Any]:
    """List monitored contracts in the order they were added."""
    return success_response(monitor.list())


@router.post("/flag")
async def flag_interaction(
    body: ContractRequest,
    engine: TrustEngine = Depends(get_trust_engine)
) -> Dict[str, Any]:
    """Decide whether interacting with a contract should be blocked."""
    return success_response(await engine.flag_interaction(body.contract_address))


@router.post("/rankings")
async def trust_rankings(
    body: ContractBatchRequest,
    engine: TrustEngine = Depends(get_trust_engine)
) -> Dict[str, Any]:
    """Get the trust tier of several contracts; failed contracts are left out."""
    return success_response(await engine.rank_many(body.contract_addresses))


@router.post("/sync")
async def sync_monitored(monitor: MonitorSet = Depends(get_monitor_set)) -> Dict[str, Any]:
    """Re-evaluate every monitored contract."""
    return success_response(await monitor.sync_all())
