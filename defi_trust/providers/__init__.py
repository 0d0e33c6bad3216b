"""External data providers for the DeFi trust engine."""

from defi_trust.providers.quote_client import JUPITER_PROGRAM_ADDRESS, JupiterQuoteClient, QuoteProvider
from defi_trust.providers.signal_provider import (
    ActivityProvider,
    HttpSignalProvider,
    SignalProvider,
    StaticActivityProvider,
    StaticSignalProvider,
)

__all__ = [
    "ActivityProvider",
    "HttpSignalProvider",
    "JUPITER_PROGRAM_ADDRESS",
    "JupiterQuoteClient",
    "QuoteProvider",
    "SignalProvider",
    "StaticActivityProvider",
    "StaticSignalProvider",
]
