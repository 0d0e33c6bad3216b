"""API routes for platform contract lists."""

# Standard library imports
from typing import Any, Dict

# Third-party library imports
from fastapi import APIRouter, Depends, Path

# Internal imports
from defi_trust.api.error_handling import success_response
from defi_trust.dependencies import get_platform_aggregator
from defi_trust.models.analysis import Platform
from defi_trust.services.platform_aggregator import PlatformAggregator

# Create router
router = APIRouter(
    prefix="/platforms",
    tags=["platforms"],
)


@router.get("")
async def get_all_platforms(aggregator: PlatformAggregator = Depends(get_platform_aggregator)) -> Dict[str, Any]:
    """Fetch the contract lists of every platform."""
    return success_response(await aggregator.fetch_all_platforms())


@router.get("/cached")
async def get_cached_platforms(aggregator: PlatformAggregator = Depends(get_platform_aggregator)) -> Dict[str, Any]:
    """Get the platform lists fetched so far."""
    return success_response(aggregator.get_all_platform_lists())


@router.post("/refresh")
async def refresh_platforms(aggregator: PlatformAggregator = Depends(get_platform_aggregator)) -> Dict[str, Any]:
    """Re-fetch the contract lists of every platform."""
    return success_response(await aggregator.fetch_all_platforms())


@router.get("/{platform}")
async def get_platform(
    platform: Platform = Path(..., description="The platform name"),
    aggregator: PlatformAggregator = Depends(get_platform_aggregator)
) -> Dict[str, Any]:
    """Fetch the contract list of one platform."""
    return success_response(await aggregator.fetch_platform_list(platform))
