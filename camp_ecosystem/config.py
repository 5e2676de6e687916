"""Configuration module for the Camp Ecosystem server."""

# Standard library imports
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from camp_ecosystem.constants import (
    ALCHEMY_URL_TEMPLATE, PECOIN_MINT, PUBLIC_DAS_FALLBACK_URLS
)
from camp_ecosystem.utils.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ConfigurationError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ConfigurationError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None or value == "":
        if required:
            raise ConfigurationError(
                f"Required environment variable '{key}' not found",
                details={"setting": key}
            )
        return default

    if validator:
        try:
            return validator(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for environment variable '{key}': {str(e)}",
                details={"setting": key, "value": value}
            )

    return value


def bool_validator(value: str) -> bool:
    """Validate and convert string to boolean."""
    return value.lower() in ("true", "1", "yes", "y", "on")


def int_validator(value: str) -> int:
    """Validate and convert string to a positive integer.

    Raises:
        ValueError: If not a valid positive integer
    """
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")
    if number <= 0:
        raise ValueError(f"'{value}' must be positive")
    return number


def float_validator(value: str) -> float:
    """Validate and convert string to a non-negative float.

    Raises:
        ValueError: If not a valid non-negative number
    """
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")
    if number < 0:
        raise ValueError(f"'{value}' must not be negative")
    return number


def url_validator(value: str) -> str:
    """Validate URL format.

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
    return value


def csv_validator(value: str) -> List[str]:
    """Split a comma separated value into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level.

    Raises:
        ValueError: If not a valid commitment level
    """
    valid_commitments = ("processed", "confirmed", "finalized")
    if value.lower() not in valid_commitments:
        raise ValueError(f"Commitment must be one of: {', '.join(valid_commitments)}")
    return value.lower()


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


def normalize_alchemy_key(value: str) -> str:
    """Accept either a bare Alchemy key or a full Alchemy URL."""
    if value.startswith("https://"):
        return value.rstrip("/").split("/")[-1]
    return value


@dataclass
class RpcConfig:
    """Configuration for Solana RPC and DAS endpoints."""

    rpc_url: str
    alchemy_api_key: str = ""
    das_rpc_urls: List[str] = field(default_factory=list)
    timeout: float = 8.0  # seconds
    attempt_timeout: float = 5.0  # seconds, per retried balance read
    commitment: str = "confirmed"
    max_retries: int = 2
    retry_base_delay: float = 0.3  # seconds

    @property
    def alchemy_url(self) -> Optional[str]:
        """Full Alchemy endpoint, if a key is configured."""
        if not self.alchemy_api_key:
            return None
        return ALCHEMY_URL_TEMPLATE.format(key=self.alchemy_api_key)


@dataclass
class CacheConfig:
    """Configuration for the in-memory server cache."""

    cleanup_interval: float = 300.0  # seconds
    ttl_overrides: Dict[str, float] = field(default_factory=dict)


@dataclass
class BatchConfig:
    """Chunk sizes and deadlines for the batch lookup engine."""

    nft_count_chunk_size: int = 5
    nft_count_timeout: float = 6.0
    nft_metadata_chunk_size: int = 3
    nft_metadata_timeout: float = 15.0
    token_balance_chunk_size: int = 10
    token_balance_timeout: float = 5.0
    sol_balance_chunk_size: int = 10
    sol_balance_timeout: float = 5.0
    chunk_delay: float = 0.2


@dataclass
class EcosystemConfig:
    """Camp ecosystem specific settings."""

    pecoin_mint: str = PECOIN_MINT
    token_2022_mints: List[str] = field(default_factory=list)
    cron_secret: Optional[str] = None
    tracked_wallets: List[str] = field(default_factory=list)
    environment: str = "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    debug: bool = False


@lru_cache()
def get_rpc_config() -> RpcConfig:
    """Get RPC configuration from environment variables.

    The DAS candidate list is the user RPC, then Alchemy, then public
    fallbacks, with blanks and duplicates removed.

    Returns:
        RpcConfig object
    """
    alchemy_key = normalize_alchemy_key(
        get_env_var("ALCHEMY_API_KEY", default="")
        or get_env_var("NEXT_PUBLIC_ALCHEMY_API_KEY", default="")
    )
    alchemy_url = ALCHEMY_URL_TEMPLATE.format(key=alchemy_key) if alchemy_key else ""
    user_rpc_url = get_env_var("RPC_URL", default="", validator=url_validator)

    rpc_url = user_rpc_url or alchemy_url or PUBLIC_DAS_FALLBACK_URLS[-1]

    candidates = [user_rpc_url, alchemy_url]
    candidates += get_env_var("DAS_RPC_URLS", default=PUBLIC_DAS_FALLBACK_URLS, validator=csv_validator)
    das_rpc_urls = list(dict.fromkeys(url for url in candidates if url and url.strip()))

    return RpcConfig(
        rpc_url=rpc_url,
        alchemy_api_key=alchemy_key,
        das_rpc_urls=das_rpc_urls,
        timeout=get_env_var("RPC_TIMEOUT", default=8.0, validator=float_validator),
        attempt_timeout=get_env_var("RPC_ATTEMPT_TIMEOUT", default=5.0, validator=float_validator),
        commitment=get_env_var("SOLANA_COMMITMENT", default="confirmed", validator=commitment_validator),
        max_retries=get_env_var("RPC_MAX_RETRIES", default=2, validator=int_validator),
        retry_base_delay=get_env_var("RPC_RETRY_BASE_DELAY", default=0.3, validator=float_validator),
    )


@lru_cache()
def get_cache_config() -> CacheConfig:
    """Get cache configuration from environment variables.

    ``CACHE_TTL_<KIND>`` variables (seconds) override the TTL of a cache kind.

    Returns:
        CacheConfig object
    """
    overrides: Dict[str, float] = {}
    for key in os.environ:
        if key.startswith("CACHE_TTL_"):
            kind = key[len("CACHE_TTL_"):].upper()
            overrides[kind] = get_env_var(key, validator=float_validator)

    return CacheConfig(
        cleanup_interval=get_env_var("CACHE_CLEANUP_INTERVAL", default=300.0, validator=float_validator),
        ttl_overrides=overrides,
    )


@lru_cache()
def get_batch_config() -> BatchConfig:
    """Get batch engine configuration from environment variables.

    Returns:
        BatchConfig object
    """
    return BatchConfig(
        nft_count_chunk_size=get_env_var("BATCH_NFT_COUNT_SIZE", default=5, validator=int_validator),
        nft_count_timeout=get_env_var("BATCH_NFT_COUNT_TIMEOUT", default=6.0, validator=float_validator),
        nft_metadata_chunk_size=get_env_var("BATCH_NFT_METADATA_SIZE", default=3, validator=int_validator),
        nft_metadata_timeout=get_env_var("BATCH_NFT_METADATA_TIMEOUT", default=15.0, validator=float_validator),
        token_balance_chunk_size=get_env_var("BATCH_TOKEN_BALANCE_SIZE", default=10, validator=int_validator),
        token_balance_timeout=get_env_var("BATCH_TOKEN_BALANCE_TIMEOUT", default=5.0, validator=float_validator),
        sol_balance_chunk_size=get_env_var("BATCH_SOL_BALANCE_SIZE", default=10, validator=int_validator),
        sol_balance_timeout=get_env_var("BATCH_SOL_BALANCE_TIMEOUT", default=5.0, validator=float_validator),
        chunk_delay=get_env_var("BATCH_CHUNK_DELAY", default=0.2, validator=float_validator),
    )


@lru_cache()
def get_ecosystem_config() -> EcosystemConfig:
    """Get ecosystem configuration from environment variables.

    Returns:
        EcosystemConfig object
    """
    return EcosystemConfig(
        pecoin_mint=get_env_var("PECOIN_MINT", default=PECOIN_MINT),
        token_2022_mints=get_env_var("TOKEN_2022_MINTS", default=[], validator=csv_validator),
        cron_secret=get_env_var("CRON_SECRET"),
        tracked_wallets=get_env_var("TRACKED_WALLETS", default=[], validator=csv_validator),
        environment=get_env_var("ENVIRONMENT", default="development", validator=environment_validator),
    )


@lru_cache()
def get_server_config() -> ServerConfig:
    """Get server configuration from environment variables.

    Returns:
        ServerConfig object
    """
    return ServerConfig(
        host=get_env_var("HOST", default="0.0.0.0"),
        port=get_env_var("PORT", default=8000, validator=int_validator),
        log_level=get_env_var("LOG_LEVEL", default="INFO", validator=log_level_validator),
        debug=get_env_var("DEBUG", default=False, validator=bool_validator),
    )


def clear_config_cache() -> None:
    """Drop memoised configuration so the next getter re-reads the environment."""
    for getter in (get_rpc_config, get_cache_config, get_batch_config,
                   get_ecosystem_config, get_server_config):
        getter.cache_clear()
