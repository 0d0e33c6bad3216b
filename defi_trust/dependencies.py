"""
Dependency injection and service provider management for the trust engine API.

Services are built once per application by :func:`build_container` and kept
on ``app.state``; the FastAPI dependency providers below read them back
from the request. Nothing is held at module level, so every app (and every
test) gets its own caches and monitor set.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from fastapi import Request

from defi_trust.config import AppConfig, get_app_config
from defi_trust.providers.quote_client import JupiterQuoteClient, QuoteProvider
from defi_trust.providers.signal_provider import (
    ActivityProvider,
    HttpSignalProvider,
    SignalProvider,
    StaticSignalProvider,
)
from defi_trust.services.cache_service import EvaluationCache
from defi_trust.services.contract_analyzer import ContractAnalyzer
from defi_trust.services.monitor_service import MonitorSet
from defi_trust.services.platform_aggregator import (
    PlatformAggregator,
    PlatformListSource,
    StaticPlatformListSource,
)
from defi_trust.services.swap_guard import SwapGuard
from defi_trust.services.trust_engine import TrustEngine, utc_now

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Every service of one application instance."""

    config: AppConfig
    engine: TrustEngine
    monitor: MonitorSet
    analyzer: ContractAnalyzer
    swap_guard: SwapGuard
    platforms: PlatformAggregator
    closeables: List[object] = field(default_factory=list)

    async def close(self) -> None:
        """Stop periodic sync and close HTTP clients."""
        await self.monitor.stop_periodic_sync()
        for resource in self.closeables:
            await resource.close()


def build_container(
    config: Optional[AppConfig] = None,
    signal_provider: Optional[SignalProvider] = None,
    activity_provider: Optional[ActivityProvider] = None,
    basic_quotes: Optional[QuoteProvider] = None,
    ultra_quotes: Optional[QuoteProvider] = None,
    platform_source: Optional[PlatformListSource] = None,
    clock: Callable = utc_now
) -> ServiceContainer:
    """
    Build all services from configuration.

    Any collaborator passed in replaces the one the configuration would
    produce. Without a configured signal API the static signal provider is
    used and contract activity is unknown.

    Args:
        config: Application configuration; defaults to the environment
        signal_provider: Source of safety indicators
        activity_provider: Source of contract age and volume
        basic_quotes: Basic Jupiter quote provider
        ultra_quotes: Ultra Jupiter quote provider
        platform_source: Source of platform contract lists
        clock: Returns the current UTC time

    Returns:
        The wired service container
    """
    config = config or get_app_config()
    closeables = []

    if signal_provider is None:
        if config.signals.is_remote:
            http_provider = HttpSignalProvider(config.signals)
            closeables.append(http_provider)
            signal_provider = http_provider
            if activity_provider is None:
                activity_provider = http_provider
            logger.info(f"Using remote signal API at {config.signals.base_url}")
        else:
            signal_provider = StaticSignalProvider()
            logger.warning("SIGNAL_API_URL not set, serving static safety indicators")

    if basic_quotes is None:
        basic_quotes = JupiterQuoteClient.basic(config.jupiter)
        closeables.append(basic_quotes)
    if ultra_quotes is None:
        ultra_quotes = JupiterQuoteClient.ultra(config.jupiter)
        closeables.append(ultra_quotes)

    engine = TrustEngine(
        signal_provider=signal_provider,
        cache=EvaluationCache(config.cache.rug_pull_ttl, name="rug_pull"),
        thresholds=config.thresholds,
        activity_provider=activity_provider,
        clock=clock,
        concurrency_limit=config.monitor.concurrency,
    )
    analyzer = ContractAnalyzer(
        engine=engine,
        cache=EvaluationCache(
            config.cache.contract_analysis_ttl,
            timestamp_getter=lambda analysis: analysis.updated_at,
            name="contract_analysis",
        ),
        config=config.analysis,
        concurrency_limit=config.monitor.concurrency,
    )
    platforms = PlatformAggregator(
        source=platform_source or StaticPlatformListSource(),
        signal_provider=signal_provider,
        thresholds=config.thresholds,
        clock=clock,
        concurrency_limit=config.monitor.concurrency,
    )

    return ServiceContainer(
        config=config,
        engine=engine,
        monitor=MonitorSet(engine),
        analyzer=analyzer,
        swap_guard=SwapGuard(engine, basic_quotes, ultra_quotes, config=config.analysis),
        platforms=platforms,
        closeables=closeables,
    )


# FastAPI dependency providers
def get_container(request: Request) -> ServiceContainer:
    """Dependency provider for the application's service container."""
    return request.app.state.container


def get_trust_engine(request: Request) -> TrustEngine:
    """Dependency provider for TrustEngine."""
    return get_container(request).engine


def get_monitor_set(request: Request) -> MonitorSet:
    """Dependency provider for MonitorSet."""
    return get_container(request).monitor


def get_contract_analyzer(request: Request) -> ContractAnalyzer:
    """Dependency provider for ContractAnalyzer."""
    return get_container(request).analyzer


def get_swap_guard(request: Request) -> SwapGuard:
    """Dependency provider for SwapGuard."""
    return get_container(request).swap_guard


def get_platform_aggregator(request: Request) -> PlatformAggregator:
    """Dependency provider for PlatformAggregator."""
    return get_container(request).platforms
