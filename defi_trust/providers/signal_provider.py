"""
Safety signal providers.

A signal provider turns a contract address into :class:`SafetyIndicators`.
An activity provider supplies the contract's age and transaction volume.
The engine only depends on the protocols below; the HTTP implementation
talks to a remote signal API and the static implementation returns fixed
values for development and tests.
"""

from typing import Dict, Optional, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError as PydanticValidationError

from defi_trust.config import SignalProviderConfig
from defi_trust.logging_config import get_logger
from defi_trust.models.trust import ContractActivity, SafetyIndicators
from defi_trust.providers.http_client import REQUEST_ERRORS, JsonApiClient
from defi_trust.utils.errors import DataParsingError, ProviderError

logger = get_logger(__name__)


@runtime_checkable
class SignalProvider(Protocol):
    """Source of safety indicators for a contract."""

    async def fetch(self, address: str) -> SafetyIndicators:
        """Fetch fresh indicators; raises ProviderError on failure."""
        ...


@runtime_checkable
class ActivityProvider(Protocol):
    """Source of on-chain activity figures for a contract."""

    async def fetch_activity(self, address: str) -> ContractActivity:
        """Fetch age and volume; raises ProviderError on failure."""
        ...


# Placeholder signals served when no signal API is configured
DEFAULT_INDICATORS = SafetyIndicators(
    rug_pull_risk=30,
    liquidity_score=75,
    holder_distribution=70,
    contract_verified=True,
    honeypot_detected=False,
    has_renounced=False,
)


class StaticSignalProvider:
    """Signal provider that serves fixed indicators.

    Per-address overrides take precedence over the default indicators.
    """

    name = "static"

    def __init__(
        self,
        indicators: Optional[SafetyIndicators] = None,
        overrides: Optional[Dict[str, SafetyIndicators]] = None
    ):
        self.indicators = indicators or DEFAULT_INDICATORS
        self.overrides = dict(overrides or {})

    async def fetch(self, address: str) -> SafetyIndicators:
        return self.overrides.get(address, self.indicators)


class StaticActivityProvider:
    """Activity provider that serves fixed age and volume figures."""

    name = "static"

    def __init__(
        self,
        activity: Optional[ContractActivity] = None,
        overrides: Optional[Dict[str, ContractActivity]] = None
    ):
        self.activity = activity or ContractActivity()
        self.overrides = dict(overrides or {})

    async def fetch_activity(self, address: str) -> ContractActivity:
        return self.overrides.get(address, self.activity)


class HttpSignalProvider(JsonApiClient):
    """Signal and activity provider backed by a remote safety API.

    Endpoints, relative to the configured base URL:

    - ``GET /contracts/{address}/safety`` returns camelCase safety indicators
    - ``GET /contracts/{address}/activity`` returns ``contractAge`` and
      ``transactionVolume``
    """

    name = "http"

    def __init__(
        self,
        config: SignalProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        initial_retry_delay: float = 1.0
    ):
        if not config.base_url:
            raise ValueError("SignalProviderConfig.base_url is required for HttpSignalProvider")

        headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else None
        super().__init__(
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            headers=headers,
            initial_retry_delay=initial_retry_delay,
            transport=transport
        )

    async def _fetch_model(self, address: str, resource: str, model):
        try:
            payload = await self.get_json(f"/contracts/{address}/{resource}")
        except REQUEST_ERRORS as e:
            raise ProviderError(
                f"Failed to fetch {resource} for {address}: {str(e)}",
                provider=self.name,
                address=address
            ) from e

        # Some deployments wrap the payload in a response envelope
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]

        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            raise DataParsingError(
                f"Malformed {resource} payload for {address}",
                provider=self.name,
                address=address,
                details={"errors": e.errors(include_url=False, include_context=False)}
            ) from e

    async def fetch(self, address: str) -> SafetyIndicators:
        """Fetch safety indicators for a contract.

        Raises:
            ProviderError: If the API could not be reached or answered with an error
            DataParsingError: If the payload is not valid indicators
        """
        indicators = await self._fetch_model(address, "safety", SafetyIndicators)
        logger.debug(f"Fetched safety indicators for {address}")
        return indicators

    async def fetch_activity(self, address: str) -> ContractActivity:
        """Fetch age and transaction volume for a contract.

        Raises:
            ProviderError: If the API could not be reached or answered with an error
            DataParsingError: If the payload is not valid activity data
        """
        return await self._fetch_model(address, "activity", ContractActivity)
