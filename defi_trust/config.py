"""Configuration module for the DeFi trust engine."""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from defi_trust.utils.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[callable] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ValueError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ValueError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None or value == "":
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default

    if validator:
        try:
            return validator(value)
        except Exception as e:
            raise ValueError(f"Invalid value for environment variable '{key}': {str(e)}")

    return value


def bool_validator(value: str) -> bool:
    """Validate and convert string to boolean."""
    return value.lower() in ("true", "1", "yes", "y", "on")


def int_validator(value: str) -> int:
    """Validate and convert string to integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def float_validator(value: str) -> float:
    """Validate and convert string to float.

    Raises:
        ValueError: If not a valid number
    """
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")


def positive_float_validator(value: str) -> float:
    """Validate a strictly positive number (durations, timeouts)."""
    number = float_validator(value)
    if number <= 0:
        raise ValueError(f"'{value}' must be greater than zero")
    return number


def url_validator(value: str) -> str:
    """Validate URL format.

    Args:
        value: URL to validate

    Returns:
        The validated URL without a trailing slash

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value.rstrip("/")


def log_level_validator(value: str) -> str:
    """Validate log level.

    Raises:
        ValueError: If not a valid log level
    """
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


def environment_validator(value: str) -> str:
    """Validate environment name.

    Raises:
        ValueError: If not a valid environment name
    """
    valid_environments = ("development", "testing", "staging", "production")
    if value.lower() not in valid_environments:
        raise ValueError(f"Environment must be one of: {', '.join(valid_environments)}")
    return value.lower()


@dataclass(frozen=True)
class TierThresholds:
    """Minimums and maximums a contract must satisfy to reach a tier."""

    min_safety_score: float
    max_rug_pull_risk: float
    min_contract_age: int  # days
    min_transaction_volume: float

    def validate(self, tier: str) -> None:
        """Check that every threshold lies in its domain.

        Raises:
            ConfigurationError: If a threshold is out of range
        """
        for name in ("min_safety_score", "max_rug_pull_risk"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(
                    f"{tier}.{name} must be between 0 and 100",
                    details={"setting": f"{tier}.{name}", "value": value}
                )
        for name in ("min_contract_age", "min_transaction_volume"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(
                    f"{tier}.{name} must be non-negative",
                    details={"setting": f"{tier}.{name}", "value": value}
                )


@dataclass(frozen=True)
class TrustThresholds:
    """Tier classification thresholds.

    Red has no thresholds of its own: anything that fails yellow is red.
    """

    green: TierThresholds = field(default_factory=lambda: TierThresholds(
        min_safety_score=80,
        max_rug_pull_risk=20,
        min_contract_age=30,
        min_transaction_volume=100000,
    ))
    yellow: TierThresholds = field(default_factory=lambda: TierThresholds(
        min_safety_score=50,
        max_rug_pull_risk=50,
        min_contract_age=7,
        min_transaction_volume=10000,
    ))

    def validate(self) -> None:
        """Validate both tiers and their relative strictness.

        Raises:
            ConfigurationError: If green is looser than yellow anywhere
        """
        self.green.validate("green")
        self.yellow.validate("yellow")

        looser = [
            name for name, green_is_looser in (
                ("min_safety_score", self.green.min_safety_score < self.yellow.min_safety_score),
                ("max_rug_pull_risk", self.green.max_rug_pull_risk > self.yellow.max_rug_pull_risk),
                ("min_contract_age", self.green.min_contract_age < self.yellow.min_contract_age),
                ("min_transaction_volume",
                 self.green.min_transaction_volume < self.yellow.min_transaction_volume),
            )
            if green_is_looser
        ]
        if looser:
            raise ConfigurationError(
                "Green thresholds must be at least as strict as yellow thresholds",
                details={"settings": looser}
            )


@lru_cache()
def get_trust_thresholds() -> TrustThresholds:
    """Get tier thresholds from environment variables.

    Raises:
        ValueError: If environment variables fail validation
        ConfigurationError: If the thresholds are inconsistent
    """
    defaults = TrustThresholds()
    thresholds = TrustThresholds(
        green=TierThresholds(
            min_safety_score=get_env_var("GREEN_MIN_SAFETY_SCORE", defaults.green.min_safety_score,
                                         validator=float_validator),
            max_rug_pull_risk=get_env_var("GREEN_MAX_RUG_PULL_RISK", defaults.green.max_rug_pull_risk,
                                          validator=float_validator),
            min_contract_age=get_env_var("GREEN_MIN_CONTRACT_AGE", defaults.green.min_contract_age,
                                         validator=int_validator),
            min_transaction_volume=get_env_var("GREEN_MIN_TRANSACTION_VOLUME",
                                               defaults.green.min_transaction_volume,
                                               validator=float_validator),
        ),
        yellow=TierThresholds(
            min_safety_score=get_env_var("YELLOW_MIN_SAFETY_SCORE", defaults.yellow.min_safety_score,
                                         validator=float_validator),
            max_rug_pull_risk=get_env_var("YELLOW_MAX_RUG_PULL_RISK", defaults.yellow.max_rug_pull_risk,
                                          validator=float_validator),
            min_contract_age=get_env_var("YELLOW_MIN_CONTRACT_AGE", defaults.yellow.min_contract_age,
                                         validator=int_validator),
            min_transaction_volume=get_env_var("YELLOW_MIN_TRANSACTION_VOLUME",
                                               defaults.yellow.min_transaction_volume,
                                               validator=float_validator),
        ),
    )
    thresholds.validate()
    return thresholds


@dataclass(frozen=True)
class CacheConfig:
    """Configuration for the evaluation caches."""

    rug_pull_ttl: float = 300.0  # seconds
    contract_analysis_ttl: float = 600.0  # seconds


@lru_cache()
def get_cache_config() -> CacheConfig:
    """Get cache configuration from environment variables."""
    return CacheConfig(
        rug_pull_ttl=get_env_var("RUG_PULL_CACHE_TTL", 300.0, validator=positive_float_validator),
        contract_analysis_ttl=get_env_var("CONTRACT_ANALYSIS_CACHE_TTL", 600.0,
                                          validator=positive_float_validator),
    )


@dataclass(frozen=True)
class MonitorConfig:
    """Configuration for periodic re-evaluation of monitored contracts."""

    sync_interval: float = 300.0  # seconds
    concurrency: int = 10
    enable_periodic_sync: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.concurrency <= 0:
            raise ConfigurationError(
                f"Monitor concurrency must be positive: {self.concurrency}",
                details={"setting": "MONITOR_CONCURRENCY", "value": self.concurrency}
            )


@lru_cache()
def get_monitor_config() -> MonitorConfig:
    """Get monitoring configuration from environment variables."""
    return MonitorConfig(
        sync_interval=get_env_var("MONITOR_SYNC_INTERVAL", 300.0, validator=positive_float_validator),
        concurrency=get_env_var("MONITOR_CONCURRENCY", 10, validator=int_validator),
        enable_periodic_sync=get_env_var("ENABLE_PERIODIC_SYNC", False, validator=bool_validator),
    )


@dataclass(frozen=True)
class SignalProviderConfig:
    """Configuration for the remote safety-signal API."""

    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout: float = 10.0  # seconds
    max_retries: int = 2

    @property
    def is_remote(self) -> bool:
        """True when a remote signal API is configured."""
        return bool(self.base_url)


@lru_cache()
def get_signal_provider_config() -> SignalProviderConfig:
    """Get signal provider configuration from environment variables."""
    return SignalProviderConfig(
        base_url=get_env_var("SIGNAL_API_URL", validator=url_validator),
        api_key=get_env_var("SIGNAL_API_KEY"),
        timeout=get_env_var("SIGNAL_API_TIMEOUT", 10.0, validator=positive_float_validator),
        max_retries=get_env_var("SIGNAL_API_MAX_RETRIES", 2, validator=int_validator),
    )


@dataclass(frozen=True)
class JupiterConfig:
    """Configuration for the Jupiter quote aggregator."""

    basic_api_url: str = "https://quote-api.jup.ag/v6"
    ultra_api_url: str = "https://lite.jup.ag/v6"
    api_key: Optional[str] = None
    timeout: float = 10.0  # seconds
    default_slippage_bps: int = 50


@lru_cache()
def get_jupiter_config() -> JupiterConfig:
    """Get Jupiter configuration from environment variables."""
    return JupiterConfig(
        basic_api_url=get_env_var("JUPITER_BASIC_API_URL", "https://quote-api.jup.ag/v6",
                                  validator=url_validator),
        ultra_api_url=get_env_var("JUPITER_ULTRA_API_URL", "https://lite.jup.ag/v6",
                                  validator=url_validator),
        api_key=get_env_var("JUPITER_API_KEY"),
        timeout=get_env_var("JUPITER_TIMEOUT", 10.0, validator=positive_float_validator),
        default_slippage_bps=get_env_var("DEFAULT_SLIPPAGE_BPS", 50, validator=int_validator),
    )


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for contract analysis and quote safety checks."""

    gas_estimate_sol: float = 0.001
    baseline_profitability: float = 50.0
    max_price_impact_pct: float = 5.0
    max_slippage_bps: int = 100
    max_route_hops: int = 3


@lru_cache()
def get_analysis_config() -> AnalysisConfig:
    """Get analysis configuration from environment variables."""
    return AnalysisConfig(
        gas_estimate_sol=get_env_var("GAS_ESTIMATE_SOL", 0.001, validator=float_validator),
        baseline_profitability=get_env_var("BASELINE_PROFITABILITY", 50.0, validator=float_validator),
        max_price_impact_pct=get_env_var("MAX_PRICE_IMPACT_PCT", 5.0, validator=float_validator),
        max_slippage_bps=get_env_var("MAX_SLIPPAGE_BPS", 100, validator=int_validator),
        max_route_hops=get_env_var("MAX_ROUTE_HOPS", 3, validator=int_validator),
    )


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the server."""

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.environment not in ("development", "testing", "staging", "production"):
            raise ValueError(f"Invalid environment: {self.environment}")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")


@lru_cache()
def get_server_config() -> ServerConfig:
    """Get server configuration from environment variables.

    Raises:
        ValueError: If environment variables fail validation
    """
    return ServerConfig(
        host=get_env_var("HOST", "0.0.0.0"),
        port=get_env_var("PORT", 8000, validator=int_validator),
        debug=get_env_var("DEBUG", False, validator=bool_validator),
        environment=get_env_var("ENVIRONMENT", "development", validator=environment_validator),
        log_level=get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator),
    )


@dataclass(frozen=True)
class AppConfig:
    """Comprehensive application configuration."""

    thresholds: TrustThresholds = field(default_factory=get_trust_thresholds)
    cache: CacheConfig = field(default_factory=get_cache_config)
    monitor: MonitorConfig = field(default_factory=get_monitor_config)
    signals: SignalProviderConfig = field(default_factory=get_signal_provider_config)
    jupiter: JupiterConfig = field(default_factory=get_jupiter_config)
    analysis: AnalysisConfig = field(default_factory=get_analysis_config)
    server: ServerConfig = field(default_factory=get_server_config)


@lru_cache()
def get_app_config() -> AppConfig:
    """Get the comprehensive application configuration.

    Loaded once per process; there is no hot reload.
    """
    return AppConfig()


def reset_config_cache() -> None:
    """Forget cached configuration so the next getter call re-reads the environment."""
    for getter in (
        get_trust_thresholds,
        get_cache_config,
        get_monitor_config,
        get_signal_provider_config,
        get_jupiter_config,
        get_analysis_config,
        get_server_config,
        get_app_config,
    ):
        getter.cache_clear()
