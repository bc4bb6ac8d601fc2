"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STANDARD_NETWORK_RPC_URLS: dict[str, str] = {
    "mainnet": "https://ethereum-rpc.publicnode.com",
    "sepolia": "https://ethereum-sepolia-rpc.publicnode.com",
    "local": "http://127.0.0.1:8545",
}


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for API runtime and oracle workflow configuration.

    Environment variable names map directly to field names in uppercase.
    Example: `ledger_rpc_url` reads from `LEDGER_RPC_URL`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root log level name.
        log_format: Log renderer (`pretty` or `json`).
        ledger_network: Network selection (`custom`, `mainnet`, `sepolia`, `local`).
        ledger_rpc_url: Node endpoint, required for the `custom` network.
        ledger_chain_id: Chain id used when building transactions.
        ledger_private_key: Signing key of the oracle submitter account.
        ledger_contract_address: Oracle contract address.
        ledger_abi_path: Optional path to a contract ABI JSON file.
        ledger_confirmations: Confirmation depth required for finality.
        ledger_poll_interval_seconds: Receipt and event polling interval.
        ledger_finality_timeout_seconds: Finality wait budget, `0` disables the timeout.
        oracle_operation_name: Contract operation invoked for submissions.
        oracle_completion_channel: Contract event observed after finality.
        source_uri: Default data source URI for the workflow.
        request_id: Default oracle request identifier for the workflow.
        source_uri_allowlist: Comma-separated URIs API callers may request besides `source_uri`.
        fetch_max_retries: Retries after the first fetch attempt.
        fetch_retry_delay_ms: Linear backoff unit in milliseconds.
        fetch_use_cache: Whether fetch results are cached.
        fetch_timeout_seconds: HTTP request timeout in seconds.
        cache_backend: Cache store backend (`none`, `memory`, `database`).
        database_url: SQLAlchemy URL for the `database` cache backend.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="pretty", pattern="^(pretty|json)$")
    ledger_network: str = Field(default="custom", pattern="^(custom|mainnet|sepolia|local)$")
    ledger_rpc_url: str | None = Field(default=None)
    ledger_chain_id: int = Field(default=31337, ge=1)
    ledger_private_key: str = Field(min_length=1)
    ledger_contract_address: str = Field(min_length=1)
    ledger_abi_path: str | None = Field(default=None)
    ledger_confirmations: int = Field(default=1, ge=1)
    ledger_poll_interval_seconds: float = Field(default=2.0, gt=0)
    ledger_finality_timeout_seconds: float = Field(default=120.0, ge=0)
    oracle_operation_name: str = Field(default="submitData", min_length=1)
    oracle_completion_channel: str = Field(default="DataSubmitted", min_length=1)
    source_uri: str = Field(default="https://api.example.com/data", min_length=1)
    request_id: int = Field(default=1, ge=0)
    source_uri_allowlist: str = Field(default="")
    fetch_max_retries: int = Field(default=3, ge=0)
    fetch_retry_delay_ms: int = Field(default=1000, ge=0)
    fetch_use_cache: bool = Field(default=False)
    fetch_timeout_seconds: float = Field(default=30.0, gt=0)
    cache_backend: str = Field(default="memory", pattern="^(none|memory|database)$")
    database_url: str = Field(default="sqlite:///oracle_relay.db")

    @field_validator(
        "ledger_private_key",
        "ledger_contract_address",
        "oracle_operation_name",
        "oracle_completion_channel",
        "source_uri",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_level = value.strip().upper()
        if normalized_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return normalized_level

    @model_validator(mode="after")
    def _validate_custom_network_endpoint(self) -> "AppSettings":
        if self.ledger_network == "custom" and not (self.ledger_rpc_url or "").strip():
            raise ValueError("ledger_rpc_url is required when ledger_network is custom")
        return self

    def settings_ledger_endpoint(self) -> str:
        """Resolve the node endpoint for the selected network.

        Returns:
            str: Explicit RPC URL when set, otherwise the standard network endpoint.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        explicit_url = (self.ledger_rpc_url or "").strip()
        if explicit_url:
            return explicit_url
        return STANDARD_NETWORK_RPC_URLS[self.ledger_network]

    def settings_source_uri_allowlist(self) -> tuple[str, ...]:
        """Return the configured source URI plus every allowlisted override URI."""

        extra_uris = [uri.strip() for uri in self.source_uri_allowlist.split(",") if uri.strip()]
        return tuple(dict.fromkeys([self.source_uri, *extra_uris]))

    def settings_finality_timeout(self) -> float | None:
        """Return finality wait budget in seconds, or None when disabled."""

        if self.ledger_finality_timeout_seconds <= 0:
            return None
        return float(self.ledger_finality_timeout_seconds)


class DatabaseUrlSettings(BaseSettings):
    """Minimal settings model used by migration tooling.

    This model validates only database connectivity inputs so schema migration
    commands can run without ledger credentials.

    Attributes:
        database_url: SQLAlchemy URL for schema migrations.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    database_url: str = Field(default="sqlite:///oracle_relay.db")


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error


def config_load_database_url() -> str:
    """Load and validate only the database URL setting.

    Returns:
        str: Non-empty database URL for migration and db tooling.

    Raises:
        SettingsLoadError: Raised when database URL cannot be loaded.
    """

    try:
        database_settings = DatabaseUrlSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Database URL configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error

    database_url = str(database_settings.database_url).strip()
    if not database_url:
        raise SettingsLoadError("Database URL configuration validation failed. DATABASE_URL must not be blank.")
    return database_url
