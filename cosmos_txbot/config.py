"""Loading, validating and describing the application configuration."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from datetime import timezone as _timezone
from datetime import tzinfo
from os import PathLike
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import tomli_w

from cosmos_txbot.config_types import Chains, DisplayWarning, Reporter, Subscription
from cosmos_txbot.toml_config import (
    ConfigError,
    TomlChain,
    TomlConfig,
    TomlLogConfig,
    TomlMetricsConfig,
    TomlReporter,
    TomlSubscription,
)


def _zone(name: str) -> tzinfo | None:
    if name in ("", "UTC"):
        return _timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def _zone_name(zone: tzinfo | None) -> str:
    return "UTC" if zone is None else str(zone)


@dataclass
class LogConfig:
    log_level: str = ""
    json_output: bool = False


@dataclass
class MetricsConfig:
    enabled: bool = False
    listen_addr: str = ""


@dataclass
class AppConfig:
    aliases_path: str = ""
    log_config: LogConfig = field(default_factory=LogConfig)
    chains: Chains = field(default_factory=Chains)
    subscriptions: list[Subscription] = field(default_factory=list)
    reporters: list[Reporter] = field(default_factory=list)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    timezone: tzinfo | None = None

    @classmethod
    def from_toml_config(cls, toml_config: TomlConfig) -> AppConfig:
        """Build the application config from a validated file config."""
        return cls(
            aliases_path=toml_config.aliases_path,
            log_config=LogConfig(
                log_level=toml_config.log_config.level,
                json_output=bool(toml_config.log_config.json),
            ),
            metrics=MetricsConfig(
                enabled=bool(toml_config.metrics_config.enabled),
                listen_addr=toml_config.metrics_config.listen_addr,
            ),
            chains=Chains(chain.to_app_config() for chain in toml_config.chains),
            reporters=[reporter.to_app_config() for reporter in toml_config.reporters],
            subscriptions=[item.to_app_config() for item in toml_config.subscriptions],
            timezone=_zone(toml_config.timezone),
        )

    def to_toml_config(self) -> TomlConfig:
        """Turn the application config back into its file form."""
        return TomlConfig(
            aliases_path=self.aliases_path,
            log_config=TomlLogConfig(
                level=self.log_config.log_level,
                json=self.log_config.json_output,
            ),
            metrics_config=TomlMetricsConfig(
                enabled=self.metrics.enabled,
                listen_addr=self.metrics.listen_addr,
            ),
            chains=[TomlChain.from_app_config(chain) for chain in self.chains],
            reporters=[TomlReporter.from_app_config(reporter) for reporter in self.reporters],
            subscriptions=[TomlSubscription.from_app_config(item) for item in self.subscriptions],
            timezone=_zone_name(self.timezone),
        )

    def display_warnings(self) -> list[DisplayWarning]:
        """Collect non-fatal problems: chain settings and unused chains or reporters."""
        warnings = [warning for chain in self.chains for warning in chain.display_warnings()]

        reporters_used = {subscription.reporter for subscription in self.subscriptions}
        chains_used = {
            chain_subscription.chain
            for subscription in self.subscriptions
            for chain_subscription in subscription.chain_subscriptions
        }

        warnings.extend(
            DisplayWarning(keys={"chain": chain.name}, text="Chain is not used in any subscriptions")
            for chain in self.chains
            if chain.name not in chains_used
        )
        warnings.extend(
            DisplayWarning(
                keys={"reporter": reporter.name},
                text="Reporter is not used in any subscriptions",
            )
            for reporter in self.reporters
            if reporter.name not in reporters_used
        )
        return warnings

    def get_config_as_string(self) -> str:
        """Render the config as TOML text."""
        return tomli_w.dumps(self.to_toml_config().to_dict())


def parse_config(text: str) -> AppConfig:
    """Parse and validate TOML config text, raising ConfigError on any problem."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}") from exc
    toml_config = TomlConfig.from_dict(data)
    toml_config.validate()
    return AppConfig.from_toml_config(toml_config)


def get_config(path: str | PathLike[str]) -> AppConfig:
    """Read a config file; OSError propagates when it cannot be read."""
    return parse_config(Path(path).read_text(encoding="utf-8"))