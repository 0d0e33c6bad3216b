"""Unit tests for BaseService.

This module tests the base service functionality.
"""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from defi_trust.services.base_service import BaseService, handle_errors
from defi_trust.utils.errors import ProviderError, ValidationError


def _provider_error(message):
    return ProviderError(message, provider="test")


class FlakyService(BaseService):
    """Service with one decorated method for error handling tests."""

    def __init__(self, error):
        super().__init__()
        self.error = error

    @handle_errors(_provider_error)
    async def fetch(self):
        raise self.error


class TestHandleErrors:
    """Tests for the handle_errors decorator."""

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self):
        service = FlakyService(KeyError("rugPullRisk"))

        with pytest.raises(ProviderError) as exc_info:
            await service.fetch()

        assert exc_info.value.message == "Error in fetch: 'rugPullRisk'"
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_trust_engine_errors_pass_through(self):
        original = ValidationError("Invalid address: ''")
        service = FlakyService(original)

        with pytest.raises(ValidationError) as exc_info:
            await service.fetch()
        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_cancellation_passes_through(self):
        with pytest.raises(asyncio.CancelledError):
            await FlakyService(asyncio.CancelledError()).fetch()

    @pytest.mark.asyncio
    async def test_return_value(self):
        @handle_errors(_provider_error)
        async def compute(value):
            return value * 2

        assert await compute(21) == 42


class TestBaseService:
    """Test suite for BaseService."""

    @pytest.fixture
    def base_service(self):
        """Create a BaseService instance for testing."""
        return BaseService(concurrency_limit=2)

    def test_default_logger_is_named_after_class(self):
        assert BaseService().logger.name == "BaseService"

    @pytest.mark.asyncio
    async def test_gather_with_concurrency_limits_parallelism(self, base_service):
        running = 0
        peak = 0

        async def task(value):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return value

        results = await base_service.gather_with_concurrency(*[task(i) for i in range(6)])

        assert results == list(range(6))
        assert peak == 2

    @pytest.mark.asyncio
    async def test_gather_with_concurrency_raises_first_error(self, base_service):
        async def fail():
            raise ValueError("boom")

        async def succeed():
            return 1

        with pytest.raises(ValueError):
            await base_service.gather_with_concurrency(succeed(), fail())

    @pytest.mark.asyncio
    async def test_gather_settled_splits_outcomes(self, base_service):
        async def operation(key):
            if key == "bad":
                raise ProviderError("unavailable", provider="test", address=key)
            return key.upper()

        successes, failures = await base_service.gather_settled(["a", "bad", "b"], operation)

        assert successes == [("a", "A"), ("b", "B")]
        assert len(failures) == 1
        key, error = failures[0]
        assert key == "bad"
        assert isinstance(error, ProviderError)

    @pytest.mark.asyncio
    async def test_gather_settled_empty(self, base_service):
        async def operation(key):
            return key

        assert await base_service.gather_settled([], operation) == ([], [])

    @pytest.mark.asyncio
    async def test_log_timing_success(self):
        logger = MagicMock(spec=logging.Logger)
        service = BaseService(logger=logger)

        async with service.log_timing("Batch evaluation"):
            pass

        logger.info.assert_called_once()
        assert "Batch evaluation completed" in logger.info.call_args[0][0]

    @pytest.mark.asyncio
    async def test_log_timing_failure(self):
        logger = MagicMock(spec=logging.Logger)
        service = BaseService(logger=logger)

        with pytest.raises(RuntimeError):
            async with service.log_timing("Batch evaluation"):
                raise RuntimeError("provider down")

        logger.error.assert_called_once()
        assert "provider down" in logger.error.call_args[0][0]
