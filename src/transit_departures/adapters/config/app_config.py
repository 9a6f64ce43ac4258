"""12-factor configuration adapter using environment variables and TOML config."""

import logging
import re
import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transit_departures.domain.models.network_profile import (
    DEFAULT_PROVIDER_PRIORITY,
    DEFAULT_TEOR_LINE_PATTERN,
    NetworkProfile,
)

DEFAULT_STATIC_GTFS_URL = (
    "https://api.mrn.cityway.fr/dataflow/offre-tc/download"
    "?provider=ASTUCE&dataFormat=gtfs&dataProfil=ASTUCE"
)
DEFAULT_TRIP_UPDATES_URLS = (
    "https://api.mrn.cityway.fr/dataflow/horaire-tc-tr/download?provider=TCAR&dataFormat=gtfs-rt",
    "https://api.mrn.cityway.fr/dataflow/horaire-tc-tr/download?provider=TNI&dataFormat=gtfs-rt",
    "https://api.mrn.cityway.fr/dataflow/horaire-tc-tr/download?provider=TAE&dataFormat=gtfs-rt",
)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _check_pattern(pattern: str) -> str:
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"teor_line_pattern is not a valid regex: {e}") from e
    return pattern


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Feed sources
    static_gtfs_url: str = Field(
        default=DEFAULT_STATIC_GTFS_URL, description="URL of the zipped static GTFS feed"
    )
    trip_updates_urls: str = Field(
        default=",".join(DEFAULT_TRIP_UPDATES_URLS),
        description="Comma-separated GTFS-Realtime TripUpdates feed URLs",
    )
    static_cache_ttl_minutes: int = Field(
        default=720, description="Minutes a parsed static snapshot stays fresh"
    )
    http_timeout_seconds: float = Field(
        default=20.0, description="Total timeout for each outgoing HTTP request"
    )

    # Network heuristics
    timezone: str = Field(
        default="Europe/Paris",
        description="IANA timezone of the transit authority (service dates, weekdays)",
    )
    provider_priority: str = Field(
        default=",".join(DEFAULT_PROVIDER_PRIORITY),
        description="Comma-separated feed providers, preferred first, for search ranking",
    )
    external_only_providers: str = Field(
        default="",
        description="Comma-separated feed providers whose departures come from Cityway",
    )
    teor_line_pattern: str = Field(
        default=DEFAULT_TEOR_LINE_PATTERN,
        description="Regex matching route short names classified as TEOR",
    )

    # Search and provider lookups
    nearby_radius_meters: float = Field(
        default=5000.0, description="Maximum distance for nearby stop search"
    )
    trip_points_cache_ttl_seconds: int = Field(
        default=300, description="TTL of the Cityway trip point lookup cache"
    )

    log_level: str = Field(default="INFO", description="Root logging level")

    # Optional TOML file; its [network] table overrides the network heuristics
    config_file: str | None = Field(
        default=None, description="Path to TOML configuration file for network settings"
    )

    @field_validator("static_cache_ttl_minutes")
    @classmethod
    def validate_static_cache_ttl(cls, v: int) -> int:
        """Validate the static cache TTL is at least five minutes."""
        if v < 5:
            raise ValueError("static_cache_ttl_minutes must be at least 5")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"timezone must be an IANA timezone name, got '{v}'") from e
        return v

    @field_validator("teor_line_pattern")
    @classmethod
    def validate_teor_line_pattern(cls, v: str) -> str:
        """Validate the TEOR pattern is a valid regular expression."""
        return _check_pattern(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is one understood by the logging module."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"log_level must be a logging level name, got '{v}'")
        return level

    def get_trip_updates_urls(self) -> list[str]:
        """Return the configured realtime feed URLs."""
        return _split_csv(self.trip_updates_urls)

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse the TOML file."""
        if not self.config_file:
            raise ValueError("config_file must be set to load network configuration")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            return tomllib.load(f)

    def get_network_profile(self) -> NetworkProfile:
        """Build the network profile, applying the TOML [network] table when configured."""
        provider_priority = _split_csv(self.provider_priority)
        external_only = _split_csv(self.external_only_providers)
        teor_line_pattern = self.teor_line_pattern

        if self.config_file:
            network = self._load_toml_data().get("network", {})
            if not isinstance(network, dict):
                raise ValueError("TOML config 'network' must be a table")
            if "provider_priority" in network:
                provider_priority = [str(p) for p in network["provider_priority"]]
            if "external_only_providers" in network:
                external_only = [str(p) for p in network["external_only_providers"]]
            if "teor_line_pattern" in network:
                teor_line_pattern = _check_pattern(str(network["teor_line_pattern"]))

        return NetworkProfile(
            provider_priority=tuple(provider_priority),
            teor_line_pattern=teor_line_pattern,
            external_only_providers=frozenset(external_only),
            timezone=self.timezone,
        )
