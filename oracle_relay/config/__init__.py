"""Configuration package for runtime settings and startup validation."""

from .settings import (
	STANDARD_NETWORK_RPC_URLS,
	AppSettings,
	SettingsLoadError,
	config_load_database_url,
	config_load_settings,
)

__all__ = [
	"AppSettings",
	"STANDARD_NETWORK_RPC_URLS",
	"SettingsLoadError",
	"config_load_settings",
	"config_load_database_url",
]
