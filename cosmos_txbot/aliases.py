"""Human-readable names for wallets, kept per subscription and chain in a TOML file."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from cosmos_txbot.config import AppConfig
from cosmos_txbot.config_types import Chain, Chains, Link


class UnknownChainError(LookupError):
    """Raised when an alias refers to a chain that is not configured."""


@dataclass
class ChainAliases:
    chain: Chain | None = None
    aliases: dict[str, str] = field(default_factory=dict)


@dataclass
class ChainAliasesLinks:
    chain: Chain | None = None
    links: dict[str, Link] = field(default_factory=dict)


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be a table")
    return value


@dataclass
class AllAliases:
    """Aliases keyed by subscription, then chain name, then wallet address."""

    subscriptions: dict[str, dict[str, ChainAliases]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.subscriptions)

    @classmethod
    def from_toml(cls, data: Mapping[str, Any], chains: Iterable[Chain]) -> AllAliases:
        """Build aliases from decoded TOML; every chain must be among ``chains``."""
        known = Chains(chains)
        result = cls()
        for subscription, subscription_table in data.items():
            chain_map: dict[str, ChainAliases] = {}
            for chain_name, wallets in _as_mapping(subscription_table, subscription).items():
                chain = known.find_by_name(chain_name)
                if chain is None:
                    raise UnknownChainError(f"could not find chain {chain_name!r} for an alias")
                wallets = _as_mapping(wallets, f"{subscription}.{chain_name}")
                if not all(isinstance(alias, str) for alias in wallets.values()):
                    raise ValueError(f"aliases of {subscription}.{chain_name} must be strings")
                chain_map[chain_name] = ChainAliases(chain=chain, aliases=dict(wallets))
            result.subscriptions[subscription] = chain_map
        return result

    def to_toml(self) -> dict[str, dict[str, dict[str, str]]]:
        """Return the nested plain mapping written to the aliases file."""
        return {
            subscription: {
                chain_name: dict(chain_aliases.aliases)
                for chain_name, chain_aliases in chain_map.items()
            }
            for subscription, chain_map in self.subscriptions.items()
        }

    def set(self, subscription: str, chain: Chain, wallet: str, alias: str) -> None:
        chain_map = self.subscriptions.setdefault(subscription, {})
        chain_aliases = chain_map.setdefault(chain.name, ChainAliases(chain=chain))
        chain_aliases.aliases[wallet] = alias

    def get(self, subscription: str, chain: str, address: str) -> str | None:
        """Return the alias of an address, or None when there is none."""
        chain_aliases = self.subscriptions.get(subscription, {}).get(chain)
        if chain_aliases is None:
            return None
        return chain_aliases.aliases.get(address)

    def get_aliases_links(self, subscription: str) -> list[ChainAliasesLinks]:
        """Return, per chain, links to each aliased wallet titled with its alias."""
        result = []
        for chain_aliases in self.subscriptions.get(subscription, {}).values():
            links = {}
            for wallet, alias in chain_aliases.aliases.items():
                chain = chain_aliases.chain
                link = chain.get_wallet_link(wallet) if chain is not None else Link(value=wallet)
                link.title = alias
                links[wallet] = link
            result.append(ChainAliasesLinks(chain=chain_aliases.chain, links=links))
        return result


class AliasManager:
    """Keeps aliases in memory and in the file named by the config."""

    def __init__(self, config: AppConfig, logger: logging.Logger | None = None) -> None:
        self.path = config.aliases_path
        self.chains = Chains(config.chains)
        self.aliases = AllAliases()
        self.logger = logger or logging.getLogger(__name__)

    def enabled(self) -> bool:
        return bool(self.path)

    def load(self) -> None:
        """Read the aliases file; read and decode errors are logged, not raised."""
        if not self.enabled():
            self.logger.warning("Aliases path not set, not loading aliases")
            return

        try:
            text = Path(self.path).read_text(encoding="utf-8")
        except OSError as exc:
            self.logger.error("Could not load aliases: %s", exc)
            return

        try:
            aliases = AllAliases.from_toml(tomllib.loads(text), self.chains)
        except ValueError as exc:
            self.logger.error("Could not decode aliases: %s", exc)
            return

        self.aliases = aliases
        self.logger.info("Aliases loaded")

    def save(self) -> None:
        """Write the aliases file; OSError is logged and raised."""
        if not self.enabled():
            self.logger.warning("Aliases path not set, not saving aliases")
            return

        try:
            with Path(self.path).open("wb") as handle:
                tomli_w.dump(self.aliases.to_toml(), handle)
        except OSError as exc:
            self.logger.error("Could not save aliases: %s", exc)
            raise

    def get(self, subscription: str, chain: str, address: str) -> str | None:
        return self.aliases.get(subscription, chain, address)

    def set(self, subscription: str, chain_name: str, address: str, alias: str) -> None:
        """Store an alias and save the file; an unknown chain raises UnknownChainError."""
        if not self.enabled():
            self.logger.warning("Aliases path not set, cannot set alias")
            return

        chain = self.chains.find_by_name(chain_name)
        if chain is None:
            raise UnknownChainError(f"could not find chain {chain_name!r} when setting an alias")

        self.aliases.set(subscription, chain, address, alias)
        self.save()

    def get_aliases_links(self, subscription: str) -> list[ChainAliasesLinks]:
        return self.aliases.get_aliases_links(subscription)