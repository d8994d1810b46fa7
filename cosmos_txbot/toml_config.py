"""Configuration as written in the TOML file: defaults, validation and conversion."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cosmos_txbot.config_types import (
    Chain,
    ChainSubscription,
    DenomInfo,
    DenomInfos,
    Explorer,
    MintscanExplorer,
    PingExplorer,
    Reporter,
    Subscription,
    SupportedExplorer,
    TelegramConfig,
)
from cosmos_txbot.constants import REPORTER_TYPE_TELEGRAM, get_reporter_types
from cosmos_txbot.filters import Filters, QuerySyntaxError, parse_query

DEFAULT_QUERIES = ("tx.height > 1",)
DEFAULT_PING_BASE_URL = "https://ping.pub"
DEFAULT_DENOM_EXPONENT = 6
DEFAULT_REPORTER_TYPE = REPORTER_TYPE_TELEGRAM
DEFAULT_TIMEZONE = "Etc/GMT"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LISTEN_ADDR = ":9580"


class ConfigError(ValueError):
    """Raised when the configuration is malformed or inconsistent."""


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key!r} must be a table")
    return value


def _tables(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
        raise ConfigError(f"{key!r} must be an array of tables")
    return value


def _str(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str):
        raise ConfigError(f"{key!r} must be a string")
    return value


def _str_list(data: Mapping[str, Any], key: str, default: Iterable[str] = ()) -> list[str]:
    value = data.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key!r} must be an array of strings")
    return list(value)


def _int(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key)
    if value is None or value == 0:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key!r} must be an integer")
    return value


def _int_list(data: Mapping[str, Any], key: str) -> list[int]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in value
    ):
        raise ConfigError(f"{key!r} must be an array of integers")
    return list(value)


def _bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"{key!r} must be a boolean")
    return value


def _without_none(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _load_timezone(name: str) -> tzinfo:
    if name in ("", "UTC"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ConfigError(f"unknown time zone {name}") from exc


def _check_unique(names: Iterable[str], what: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ConfigError(f"duplicate {what} name: {name}")
        seen.add(name)


@dataclass
class TomlDenomInfo:
    denom: str = ""
    display_denom: str = ""
    denom_exponent: int = 0
    coingecko_currency: str = ""

    def validate(self) -> None:
        if not self.denom:
            raise ConfigError("denom is not set")
        if not self.display_denom:
            raise ConfigError("display denom is not set")

    def to_app_config(self) -> DenomInfo:
        return DenomInfo(
            denom=self.denom,
            denom_exponent=self.denom_exponent,
            display_denom=self.display_denom,
            coingecko_currency=self.coingecko_currency,
        )

    @classmethod
    def from_app_config(cls, denom: DenomInfo) -> TomlDenomInfo:
        return cls(
            denom=denom.denom,
            display_denom=denom.display_denom,
            denom_exponent=denom.denom_exponent,
            coingecko_currency=denom.coingecko_currency,
        )

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TomlDenomInfo:
        return cls(
            denom=_str(data, "denom"),
            display_denom=_str(data, "display-denom"),
            denom_exponent=_int(data, "denom-exponent", DEFAULT_DENOM_EXPONENT),
            coingecko_currency=_str(data, "coingecko-currency"),
        )

    def _to_dict(self) -> dict[str, Any]:
        return {
            "denom": self.denom,
            "display-denom": self.display_denom,
            "denom-exponent": self.denom_exponent,
            "coingecko-currency": self.coingecko_currency,
        }


@dataclass
class TomlExplorer:
    proposal_link_pattern: str = ""
    wallet_link_pattern: str = ""
    validator_link_pattern: str = ""
    transaction_link_pattern: str = ""
    block_link_pattern: str = ""

    def to_app_config(self) -> Explorer:
        return Explorer(
            proposal_link_pattern=self.proposal_link_pattern,
            wallet_link_pattern=self.wallet_link_pattern,
            validator_link_pattern=self.validator_link_pattern,
            transaction_link_pattern=self.transaction_link_pattern,
            block_link_pattern=self.block_link_pattern,
        )

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TomlExplorer:
        return cls(
            proposal_link_pattern=_str(data, "proposal-link-pattern"),
            wallet_link_pattern=_str(data, "wallet-link-pattern"),
            validator_link_pattern=_str(data, "validator-link-pattern"),
            transaction_link_pattern=_str(data, "transaction-link-pattern"),
            block_link_pattern=_str(data, "block-link-pattern"),
        )

    def _to_dict(self) -> dict[str, Any]:
        return {
            "proposal-link-pattern": self.proposal_link_pattern,
            "wallet-link-pattern": self.wallet_link_pattern,
            "validator-link-pattern": self.validator_link_pattern,
            "transaction-link-pattern": self.transaction_link_pattern,
            "block-link-pattern": self.block_link_pattern,
        }


@dataclass
class TomlChain:
    name: str = ""
    pretty_name: str = ""
    chain_id: str = ""
    tendermint_nodes: list[str] = field(default_factory=list)
    api_nodes: list[str] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    mintscan_prefix: str = ""
    ping_prefix: str = ""
    ping_base_url: str = ""
    explorer: TomlExplorer | None = None
    denoms: list[TomlDenomInfo] = field(default_factory=list)

    def validate(self) -> None:
        if not self.name:
            raise ConfigError("empty chain name")
        if not self.chain_id:
            raise ConfigError("empty chain ID")
        if not self.tendermint_nodes:
            raise ConfigError("no Tendermint nodes provided")
        if not self.api_nodes:
            raise ConfigError("no API nodes provided")
        if not self.queries:
            raise ConfigError("no queries provided")
        for index, query in enumerate(self.queries):
            try:
                parse_query(query)
            except QuerySyntaxError as exc:
                raise ConfigError(f"error in query {index}: {exc}") from exc
        for index, denom in enumerate(self.denoms):
            try:
                denom.validate()
            except ConfigError as exc:
                raise ConfigError(f"error in denom {index}: {exc}") from exc

    def to_app_config(self) -> Chain:
        supported: SupportedExplorer | None = None
        if self.mintscan_prefix:
            supported = MintscanExplorer(prefix=self.mintscan_prefix)
        elif self.ping_prefix:
            supported = PingExplorer(prefix=self.ping_prefix, base_url=self.ping_base_url)

        explorer: Explorer | None = None
        if supported is not None:
            explorer = supported.to_explorer()
        elif self.explorer is not None:
            explorer = self.explorer.to_app_config()

        return Chain(
            name=self.name,
            pretty_name=self.pretty_name,
            chain_id=self.chain_id,
            tendermint_nodes=list(self.tendermint_nodes),
            api_nodes=list(self.api_nodes),
            queries=[parse_query(query) for query in self.queries],
            explorer=explorer,
            supported_explorer=supported,
            denoms=DenomInfos(denom.to_app_config() for denom in self.denoms),
        )

    @classmethod
    def from_app_config(cls, chain: Chain) -> TomlChain:
        result = cls(
            name=chain.name,
            pretty_name=chain.pretty_name,
            chain_id=chain.chain_id,
            tendermint_nodes=list(chain.tendermint_nodes),
            api_nodes=list(chain.api_nodes),
            queries=[str(query) for query in chain.queries],
            denoms=[TomlDenomInfo.from_app_config(denom) for denom in chain.denoms],
        )
        supported = chain.supported_explorer
        if supported is None and chain.explorer is not None:
            explorer = chain.explorer
            result.explorer = TomlExplorer(
                proposal_link_pattern=explorer.proposal_link_pattern,
                wallet_link_pattern=explorer.wallet_link_pattern,
                validator_link_pattern=explorer.validator_link_pattern,
                transaction_link_pattern=explorer.transaction_link_pattern,
                block_link_pattern=explorer.block_link_pattern,
            )
        elif isinstance(supported, MintscanExplorer):
            result.mintscan_prefix = supported.prefix
        elif isinstance(supported, PingExplorer):
            result.ping_prefix = supported.prefix
            result.ping_base_url = supported.base_url
        return result

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TomlChain:
        explorer = data.get("explorer")
        return cls(
            name=_str(data, "name"),
            pretty_name=_str(data, "pretty-name"),
            chain_id=_str(data, "chain-id"),
            tendermint_nodes=_str_list(data, "tendermint-nodes"),
            api_nodes=_str_list(data, "api-nodes"),
            queries=_str_list(data, "queries", DEFAULT_QUERIES),
            mintscan_prefix=_str(data, "mintscan-prefix"),
            ping_prefix=_str(data, "ping-prefix"),
            ping_base_url=_str(data, "ping-base-url", DEFAULT_PING_BASE_URL),
            explorer=None if explorer is None else TomlExplorer._from_dict(_table(data, "explorer")),
            denoms=[TomlDenomInfo._from_dict(item) for item in _tables(data, "denoms")],
        )

    def _to_dict(self) -> dict[str, Any]:
        return _without_none(
            {
                "name": self.name,
                "pretty-name": self.pretty_name,
                "chain-id": self.chain_id,
                "tendermint-nodes": list(self.tendermint_nodes),
                "api-nodes": list(self.api_nodes),
                "queries": list(self.queries),
                "mintscan-prefix": self.mintscan_prefix,
                "ping-prefix": self.ping_prefix,
                "ping-base-url": self.ping_base_url,
                "explorer": None if self.explorer is None else self.explorer._to_dict(),
                "denoms": [denom._to_dict() for denom in self.denoms],
            }
        )


def validate_chains(chains: Iterable[TomlChain]) -> None:
    """Validate every chain and check that chain names are unique."""
    chains = list(chains)
    for index, chain in enumerate(chains):
        try:
            chain.validate()
        except ConfigError as exc:
            raise ConfigError(f"error in chain {index}: {exc}") from exc
    _check_unique((chain.name for chain in chains), "chain")


def has_chain_by_name(chains: Iterable[TomlChain], name: str) -> bool:
    return any(chain.name == name for chain in chains)


@dataclass
class TomlTelegramConfig:
    chat: int = 0
    token: str = ""
    admins: list[int] = field(default_factory=list)


@dataclass
class TomlReporter:
    name: str = ""
    type: str = ""
    telegram_config: TomlTelegramConfig | None = None

    def validate(self) -> None:
        if not self.name:
            raise ConfigError("reporter name not provided")
        reporter_types = get_reporter_types()
        if self.type not in reporter_types:
            raise ConfigError(
                f"expected type to be one of {', '.join(reporter_types)}, but got {self.type}"
            )
        if self.type == REPORTER_TYPE_TELEGRAM and self.telegram_config is None:
            raise ConfigError("missing telegram-config for Telegram reporter")

    def to_app_config(self) -> Reporter:
        telegram = None
        if self.telegram_config is not None:
            telegram = TelegramConfig(
                chat=self.telegram_config.chat,
                token=self.telegram_config.token,
                admins=list(self.telegram_config.admins),
            )
        return Reporter(name=self.name, type=self.type, telegram_config=telegram)

    @classmethod
    def from_app_config(cls, reporter: Reporter) -> TomlReporter:
        telegram = None
        if reporter.telegram_config is not None:
            telegram = TomlTelegramConfig(
                chat=reporter.telegram_config.chat,
                token=reporter.telegram_config.token,
                admins=list(reporter.telegram_config.admins),
            )
        return cls(name=reporter.name, type=reporter.type, telegram_config=telegram)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TomlReporter:
        telegram = None
        if data.get("telegram-config") is not None:
            table = _table(data, "telegram-config")
            telegram = TomlTelegramConfig(
                chat=_int(table, "chat"),
                token=_str(table, "token"),
                admins=_int_list(table, "admins"),
            )
        return cls(
            name=_str(data, "name"),
            type=_str(data, "type", DEFAULT_REPORTER_TYPE),
            telegram_config=telegram,
        )

    def _to_dict(self) -> dict[str, Any]:
        telegram = None
        if self.telegram_config is not None:
            telegram = {
                "chat": self.telegram_config.chat,
                "token": self.telegram_config.token,
                "admins": list(self.telegram_config.admins),
            }
        return _without_none({"name": self.name, "type": self.type, "telegram-config": telegram})


def validate_reporters(reporters: Iterable[TomlReporter]) -> None:
    """Validate every reporter and check that reporter names are unique."""
    reporters = list(reporters)
    for index, reporter in enumerate(reporters):
        try:
            reporter.validate()
        except ConfigError as exc:
            raise ConfigError(f"error in reporter {index}: {exc}") from exc
    _check_unique((reporter.name for reporter in reporters), "reporter")


def has_reporter_by_name(reporters: Iterable[TomlReporter], name: str) -> bool:
    return any(reporter.name == name for reporter in reporters)


@dataclass
class TomlChainSubscription:
    chain: str = ""
    filters: list[str] = field(default_factory=list)
    log_unknown_messages: bool | None = None
    log_unparsed_messages: bool | None = None
    log_failed_transactions: bool | None = None
    log_node_errors: bool | None = None
    filter_internal_messages: bool | None = None

    def validate(self) -> None:
        if not self.chain:
            raise ConfigError("empty chain name")
        for index, text in enumerate(self.filters):
            try:
                parse_query(text)
            except QuerySyntaxError as exc:
                raise ConfigError(f"error in filter {index}: {exc}") from exc

    def to_app_config(self) -> ChainSubscription:
        return ChainSubscription(
            chain=self.chain,
            filters=Filters(parse_query(text) for text in self.filters),
            log_unknown_messages=bool(self.log_unknown_messages),
            log_unparsed_messages=bool(self.log_unparsed_messages),
            log_failed_transactions=bool(self.log_failed_transactions),
            log_node_errors=bool(self.log_node_errors),
            filter_internal_messages=bool(self.filter_internal_messages),
        )

    @classmethod
    def from_app_config(cls, subscription: ChainSubscription) -> TomlChainSubscription:
        return cls(
            chain=subscription.chain,
            filters=[str(query) for query in subscription.filters],
            log_unknown_messages=subscription.log_unknown_messages,
            log_unparsed_messages=subscription.log_unparsed_messages,
            log_failed_transactions=subscription.log_failed_transactions,
            log_node_errors=subscription.log_node_errors,
            filter_internal_messages=subscription.filter_internal_messages,
        )

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TomlChainSubscription:
        return cls(
            chain=_str(data, "name"),
            filters=_str_list(data, "filters"),
            log_unknown_messages=_bool(data, "log-unknown-messages", False),
            log_unparsed_messages=_bool(data, "log-unparsed-messages", True),
            log_failed_transactions=_bool(data, "log-failed-transactions", True),
            log_node_errors=_bool(data, "log-node-errors", True),
            filter_internal_messages=_bool(data, "filter-internal-messages", True),
        )

    def _to_dict(self) -> dict[str, Any]:
        return _without_none(
            {
                "name": self.chain,
                "filters": list(self.filters),
                "log-unknown-messages": self.log_unknown_messages,
                "log-unparsed-messages": self.log_unparsed_messages,
                "log-failed-transactions": self.log_failed_transactions,
                "log-node-errors": self.log_node_errors,
                "filter-internal-messages": self.filter_internal_messages,
            }
        )


@dataclass
class TomlSubscription:
    name: str = ""
    reporter: str = ""
    chain_subscriptions: list[TomlChainSubscription] = field(default_factory=list)

    def validate(self) -> None:
        if not self.name:
            raise ConfigError("empty subscription name")
        if not self.reporter:
            raise ConfigError("empty reporter name")
        for index, chain_subscription in enumerate(self.chain_subscriptions):
            try:
                chain_subscription.validate()
            except ConfigError as exc:
                raise ConfigError(f"error in subscription {index}: {exc}") from exc

    def to_app_config(self) -> Subscription:
        return Subscription(
            name=self.name,
            reporter=self.reporter,
            chain_subscriptions=[item.to_app_config() for item in self.chain_subscriptions],
        )

    @classmethod
    def from_app_config(cls, subscription: Subscription) -> TomlSubscription:
        return cls(
            name=subscription.name,
            reporter=subscription.reporter,
            chain_subscriptions=[
                TomlChainSubscription.from_app_config(item)
                for item in subscription.chain_subscriptions
            ],
        )

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TomlSubscription:
        return cls(
            name=_str(data, "name"),
            reporter=_str(data, "reporter"),
            chain_subscriptions=[
                TomlChainSubscription._from_dict(item) for item in _tables(data, "chains")
            ],
        )

    def _to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "reporter": self.reporter,
            "chains": [item._to_dict() for item in self.chain_subscriptions],
        }


def validate_subscriptions(subscriptions: Iterable[TomlSubscription]) -> None:
    """Validate every subscription and check that subscription names are unique."""
    subscriptions = list(subscriptions)
    for index, subscription in enumerate(subscriptions):
        try:
            subscription.validate()
        except ConfigError as exc:
            raise ConfigError(f"error in subscription {index}: {exc}") from exc
    _check_unique((subscription.name for subscription in subscriptions), "subscription")


@dataclass
class TomlLogConfig:
    level: str = ""
    json: bool | None = None


@dataclass
class TomlMetricsConfig:
    enabled: bool | None = None
    listen_addr: str = ""


@dataclass
class TomlConfig:
    aliases_path: str = ""
    log_config: TomlLogConfig = field(default_factory=TomlLogConfig)
    metrics_config: TomlMetricsConfig = field(default_factory=TomlMetricsConfig)
    chains: list[TomlChain] = field(default_factory=list)
    subscriptions: list[TomlSubscription] = field(default_factory=list)
    timezone: str = ""
    reporters: list[TomlReporter] = field(default_factory=list)

    def validate(self) -> None:
        if not self.chains:
            raise ConfigError("no chains provided")
        try:
            _load_timezone(self.timezone)
        except ConfigError as exc:
            raise ConfigError(f"error parsing timezone: {exc}") from exc
        try:
            validate_chains(self.chains)
        except ConfigError as exc:
            raise ConfigError(f"error in chains: {exc}") from exc
        try:
            validate_reporters(self.reporters)
        except ConfigError as exc:
            raise ConfigError(f"error in reporters: {exc}") from exc
        try:
            validate_subscriptions(self.subscriptions)
        except ConfigError as exc:
            raise ConfigError(f"error in subscriptions: {exc}") from exc

        for index, subscription in enumerate(self.subscriptions):
            for chain_index, chain_subscription in enumerate(subscription.chain_subscriptions):
                if not has_chain_by_name(self.chains, chain_subscription.chain):
                    raise ConfigError(
                        f"error in subscription {index}: error in chain {chain_index}: "
                        f"no such chain '{chain_subscription.chain}'"
                    )
            if not has_reporter_by_name(self.reporters, subscription.reporter):
                raise ConfigError(
                    f"error in subscription {index}: no such reporter '{subscription.reporter}'"
                )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TomlConfig:
        """Build a config from decoded TOML, filling in defaults for missing values."""
        log = _table(data, "log")
        metrics = _table(data, "metrics")
        return cls(
            aliases_path=_str(data, "aliases"),
            log_config=TomlLogConfig(
                level=_str(log, "level", DEFAULT_LOG_LEVEL),
                json=_bool(log, "json", False),
            ),
            metrics_config=TomlMetricsConfig(
                enabled=_bool(metrics, "enabled", True),
                listen_addr=_str(metrics, "listen-addr", DEFAULT_LISTEN_ADDR),
            ),
            chains=[TomlChain._from_dict(item) for item in _tables(data, "chains")],
            subscriptions=[
                TomlSubscription._from_dict(item) for item in _tables(data, "subscriptions")
            ],
            timezone=_str(data, "timezone", DEFAULT_TIMEZONE),
            reporters=[TomlReporter._from_dict(item) for item in _tables(data, "reporters")],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a plain mapping suitable for writing as TOML."""
        return {
            "aliases": self.aliases_path,
            "log": _without_none({"level": self.log_config.level, "json": self.log_config.json}),
            "metrics": _without_none(
                {
                    "enabled": self.metrics_config.enabled,
                    "listen-addr": self.metrics_config.listen_addr,
                }
            ),
            "chains": [chain._to_dict() for chain in self.chains],
            "subscriptions": [subscription._to_dict() for subscription in self.subscriptions],
            "timezone": self.timezone,
            "reporters": [reporter._to_dict() for reporter in self.reporters],
        }