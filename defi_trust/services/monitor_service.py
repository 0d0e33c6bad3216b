"""Monitored-contract set and periodic re-evaluation."""

import asyncio
import logging
import threading
from typing import Dict, Iterable, List, Optional, Set

from defi_trust.logging_config import log_with_context
from defi_trust.models.trust import SyncReport
from defi_trust.services.trust_engine import TrustEngine
from defi_trust.utils.validation import require_address


class MonitorSet:
    """Contracts selected for re-evaluation on demand or on a timer.

    Membership holds no evaluation data; results live in the engine's cache.
    """

    def __init__(self, engine: TrustEngine, logger: Optional[logging.Logger] = None):
        """Initialize the monitor set.

        Args:
            engine: Trust engine used for evaluations
            logger: Optional logger instance
        """
        self.engine = engine
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        # Insertion-ordered set
        self._addresses: Dict[str, None] = {}
        self._lock = threading.RLock()
        self.sync_task: Optional[asyncio.Task] = None
        self.running = False
        self.last_report: Optional[SyncReport] = None

    async def start(self, address: str) -> bool:
        """Start monitoring a contract.

        A newly added contract is evaluated once straight away. If that
        evaluation fails the contract stays monitored and the error is
        raised to the caller.

        Args:
            address: Contract address

        Returns:
            True if the address was newly added, False if it was already monitored

        Raises:
            ValidationError: If the address is empty
            ProviderError: If the initial evaluation failed
        """
        require_address(address)
        with self._lock:
            if address in self._addresses:
                return False
            self._addresses[address] = None

        self.logger.info(f"Started monitoring {address}")
        await self.engine.evaluate(address)
        self._forget_stopped([address])
        return True

    def stop(self, address: str) -> bool:
        """Stop monitoring a contract and drop its cached evaluation.

        The cache entry is invalidated even if the address was not monitored.

        Returns:
            True if the address was monitored, False otherwise
        """
        with self._lock:
            removed = address in self._addresses
            if removed:
                del self._addresses[address]

        self.engine.cache.invalidate(address)
        if removed:
            self.logger.info(f"Stopped monitoring {address}")
        return removed

    def list(self) -> List[str]:
        """Get the monitored addresses in the order they were added."""
        with self._lock:
            return list(self._addresses)

    def __contains__(self, address: str) -> bool:
        with self._lock:
            return address in self._addresses

    def __len__(self) -> int:
        with self._lock:
            return len(self._addresses)

    async def sync_all(self) -> SyncReport:
        """Re-evaluate every monitored contract.

        Per-address failures are collected in the report, never raised.
        Fresh cached evaluations are served from the cache.

        Returns:
            Report of synced addresses and failures
        """
        addresses = self.list()
        if not addresses:
            report = SyncReport()
        else:
            outcome = await self.engine.evaluate_many(addresses)
            stopped = self._forget_stopped(outcome.results)
            report = SyncReport(
                synced=[address for address in outcome.results if address not in stopped],
                failures=[failure for failure in outcome.failures if failure.address not in stopped],
            )

        log_with_context(
            self.logger,
            "info",
            "Monitored contracts synced",
            synced=len(report.synced),
            failed=report.failed_count
        )
        self.last_report = report
        return report

    def _forget_stopped(self, addresses: Iterable[str]) -> Set[str]:
        """Invalidate addresses that were stopped while being evaluated.

        An evaluation that finishes after ``stop`` writes its result back
        into the cache; that entry must not outlive the monitoring.

        Returns:
            The addresses that are no longer monitored
        """
        with self._lock:
            stopped = {address for address in addresses if address not in self._addresses}
        for address in stopped:
            self.engine.cache.invalidate(address)
            self.logger.debug(f"Dropped evaluation of {address}, stopped during evaluation")
        return stopped

    async def start_periodic_sync(self, interval_seconds: float = 300):
        """Start re-evaluating monitored contracts on a timer.

        Args:
            interval_seconds: Interval between syncs in seconds
        """
        if self.sync_task is not None:
            return

        self.running = True
        self.sync_task = asyncio.create_task(self._sync_loop(interval_seconds))
        self.logger.info(f"Periodic sync started every {interval_seconds}s")

    async def stop_periodic_sync(self):
        """Stop the periodic sync."""
        self.running = False
        if self.sync_task:
            self.sync_task.cancel()
            try:
                await self.sync_task
            except asyncio.CancelledError:
                pass
            self.sync_task = None
            self.logger.info("Periodic sync stopped")

    async def _sync_loop(self, interval_seconds: float):
        while self.running:
            try:
                await asyncio.sleep(interval_seconds)
                await self.sync_all()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.error(f"Error in periodic sync loop: {str(e)}")
