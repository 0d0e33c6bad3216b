"""
Platform contract list aggregation.

Collects contract lists from Raydium, Orca, Pump and Meteors and enriches
each listed contract with its safety score and trust tier.
"""

import logging
import math
import threading
from datetime import timezone
from typing import Dict, List, Optional, Protocol, runtime_checkable

from defi_trust.config import TrustThresholds
from defi_trust.models.analysis import (
    Platform,
    PlatformConfig,
    PlatformContract,
    PlatformList,
    RawPlatformContract,
)
from defi_trust.models.trust import ContractMetadata
from defi_trust.providers.signal_provider import SignalProvider
from defi_trust.scoring import classify_trust_tier, compute_safety_score
from defi_trust.services.base_service import BaseService, handle_errors
from defi_trust.services.trust_engine import utc_now
from defi_trust.utils.errors import ProviderError

SOLANA_MAINNET_RPC = "https://api.mainnet-beta.solana.com"

PLATFORM_CONFIGS: Dict[Platform, PlatformConfig] = {
    Platform.RAYDIUM: PlatformConfig(
        name="Raydium",
        api_endpoint="https://api.raydium.io/v2",
        rpc_endpoint=SOLANA_MAINNET_RPC,
        program_id="RVKd61ztZW9GUwhRbbLoYVRE5Xf1B2tVscKqwZqXgEr",
    ),
    Platform.ORCA: PlatformConfig(
        name="Orca",
        api_endpoint="https://api.orca.so",
        rpc_endpoint=SOLANA_MAINNET_RPC,
        program_id="DjVE6JNiYqPL2QXyCUUh8rNjHrbz9hXHNYt99MQ59qw1",
    ),
    Platform.PUMP: PlatformConfig(
        name="Pump",
        api_endpoint="https://api.pump.fun",
        rpc_endpoint=SOLANA_MAINNET_RPC,
        program_id="6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P",
    ),
    Platform.METEORS: PlatformConfig(
        name="Meteors",
        api_endpoint="https://api.meteors.app",
        rpc_endpoint=SOLANA_MAINNET_RPC,
        program_id="METzRpA9qFMXv7Qq1KCFYfLzZvxW6FBRwJxFxLCPjVZ",
    ),
}

SECONDS_PER_DAY = 24 * 60 * 60


@runtime_checkable
class PlatformListSource(Protocol):
    """Source of the raw contracts listed on a platform."""

    async def fetch_contracts(self, platform: Platform, config: PlatformConfig) -> List[RawPlatformContract]:
        ...


class StaticPlatformListSource:
    """Platform list source serving preset contract lists.

    Platforms without a preset list have no contracts.
    """

    def __init__(self, contracts: Optional[Dict[Platform, List[RawPlatformContract]]] = None):
        self.contracts = {Platform(key): list(value) for key, value in (contracts or {}).items()}

    async def fetch_contracts(self, platform: Platform, config: PlatformConfig) -> List[RawPlatformContract]:
        return list(self.contracts.get(platform, []))


def _platform_source_error(message: str) -> ProviderError:
    return ProviderError(message, provider="platform")


def _signal_provider_error(message: str) -> ProviderError:
    return ProviderError(message, provider="signal")


class PlatformAggregator(BaseService):
    """Fetches, scores and keeps the latest contract list of each platform."""

    def __init__(
        self,
        source: PlatformListSource,
        signal_provider: SignalProvider,
        thresholds: TrustThresholds,
        clock=utc_now,
        concurrency_limit: int = 10,
        logger: Optional[logging.Logger] = None
    ):
        super().__init__(concurrency_limit=concurrency_limit, logger=logger)
        self.source = source
        self.signal_provider = signal_provider
        self.thresholds = thresholds
        self.clock = clock
        self._lists: Dict[Platform, PlatformList] = {}
        self._lock = threading.RLock()

    @staticmethod
    def get_platform_config(platform: Platform) -> PlatformConfig:
        """Connection details of a platform."""
        return PLATFORM_CONFIGS[Platform(platform)]

    def calculate_contract_age(self, raw: RawPlatformContract) -> int:
        """Days since deployment, rounded up."""
        deployed_at = raw.deployed_at
        if deployed_at.tzinfo is None:
            deployed_at = deployed_at.replace(tzinfo=timezone.utc)
        elapsed = abs((self.clock() - deployed_at).total_seconds())
        return math.ceil(elapsed / SECONDS_PER_DAY)

    @handle_errors(_signal_provider_error)
    async def _fetch_indicators(self, address: str):
        return await self.signal_provider.fetch(address)

    @handle_errors(_platform_source_error)
    async def _fetch_raw_contracts(self, platform: Platform) -> List[RawPlatformContract]:
        return await self.source.fetch_contracts(platform, self.get_platform_config(platform))

    async def enrich_contract_metadata(self, raw: RawPlatformContract, platform: Platform) -> PlatformContract:
        """
        Score and classify a contract listed on a platform.

        Unlike a trust evaluation, the contract's real age and volume are
        known here and take part in classification.

        Raises:
            ProviderError: If the contract's indicators could not be fetched
        """
        indicators = await self._fetch_indicators(raw.address)
        safety_score = compute_safety_score(indicators)

        metadata = ContractMetadata(
            name=raw.name or "Unknown",
            address=raw.address,
            deployer=raw.deployer or "Unknown",
            contract_age=self.calculate_contract_age(raw),
            transaction_volume=raw.volume,
            safety_score=safety_score,
        )
        trust_level = classify_trust_tier(metadata, indicators, self.thresholds)

        return PlatformContract(
            name=metadata.name,
            address=raw.address,
            deployer=metadata.deployer,
            contract_age=metadata.contract_age,
            transaction_volume=metadata.transaction_volume,
            safety_score=safety_score,
            trust_level=trust_level,
        )

    async def fetch_platform_list(self, platform: Platform) -> PlatformList:
        """
        Fetch and enrich the contract list of one platform.

        Contracts that cannot be enriched are left out of the list.

        Raises:
            ProviderError: If the platform list could not be fetched
        """
        platform = Platform(platform)
        raw_contracts = await self._fetch_raw_contracts(platform)
        by_address = {raw.address: raw for raw in raw_contracts}

        async def _enrich(address: str) -> PlatformContract:
            return await self.enrich_contract_metadata(by_address[address], platform)

        successes, failures = await self.gather_settled(by_address, _enrich)
        for address, error in failures:
            self.logger.warning(f"Skipping {platform.value} contract {address}: {str(error)}")

        platform_list = PlatformList(
            platform=platform,
            contracts=[contract for _, contract in successes],
            last_updated=self.clock(),
        )
        with self._lock:
            self._lists[platform] = platform_list

        self.logger.info(f"Fetched {len(platform_list.contracts)} contracts from {platform.value}")
        return platform_list

    async def fetch_all_platforms(self) -> List[PlatformList]:
        """Fetch every platform's list; platforms that fail are left out."""
        successes, failures = await self.gather_settled(
            [platform.value for platform in Platform],
            self.fetch_platform_list
        )
        for platform, error in failures:
            self.logger.warning(f"Error fetching {platform} list: {str(error)}")
        return [platform_list for _, platform_list in successes]

    def get_platform_list(self, platform: Platform) -> Optional[PlatformList]:
        """Last fetched list of a platform, if any."""
        with self._lock:
            return self._lists.get(Platform(platform))

    def get_all_platform_lists(self) -> List[PlatformList]:
        """Every platform list fetched so far."""
        with self._lock:
            return list(self._lists.values())
