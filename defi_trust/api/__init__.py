"""REST API routers for the DeFi trust engine."""

from defi_trust.api.contracts import router as contract_router
from defi_trust.api.platforms import router as platform_router
from defi_trust.api.rug_check import router as rug_check_router
from defi_trust.api.wallet import router as wallet_router

__all__ = ["contract_router", "platform_router", "rug_check_router", "wallet_router"]
