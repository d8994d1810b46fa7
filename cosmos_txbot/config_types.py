"""Application-level configuration objects: chains, explorers, reporters, subscriptions."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from cosmos_txbot.filters import Filters, Query

_PLACEHOLDER = re.compile(r"%%|%s")


def _apply_pattern(pattern: str, value: str) -> str:
    """Substitute the first ``%s`` in a link pattern; ``%%`` stands for ``%``."""
    used = False

    def replace(match: re.Match[str]) -> str:
        nonlocal used
        if match.group() == "%%":
            return "%"
        if used:
            return match.group()
        used = True
        return value

    return _PLACEHOLDER.sub(replace, pattern)


@dataclass
class Link:
    href: str = ""
    title: str = ""
    value: str = ""


@dataclass
class DisplayWarning:
    keys: dict[str, str] = field(default_factory=dict)
    text: str = ""

    def log(self, logger: logging.Logger) -> None:
        """Emit the warning with its keys as ``key=value`` pairs."""
        details = " ".join(f"{key}={value}" for key, value in self.keys.items())
        logger.warning("%s %s", self.text, details)


@dataclass
class DenomInfo:
    denom: str = ""
    denom_exponent: int = 0
    display_denom: str = ""
    coingecko_currency: str = ""

    def display_warnings(self, chain: Chain) -> list[DisplayWarning]:
        if self.coingecko_currency:
            return []
        return [
            DisplayWarning(
                keys={"chain": chain.name},
                text="No denoms set, prices in USD won't be displayed.",
            )
        ]


class DenomInfos(list[DenomInfo]):
    def find(self, denom: str) -> DenomInfo | None:
        return next((info for info in self if info.denom == denom), None)


@dataclass
class Explorer:
    proposal_link_pattern: str = ""
    wallet_link_pattern: str = ""
    validator_link_pattern: str = ""
    transaction_link_pattern: str = ""
    block_link_pattern: str = ""

    def get_wallet_link(self, address: str) -> str:
        return _apply_pattern(self.wallet_link_pattern, address)

    def display_warnings(self, chain: Chain) -> list[DisplayWarning]:
        checks = [
            (self.proposal_link_pattern, "Proposal link pattern not set, proposals links won't be generated."),
            (self.wallet_link_pattern, "Wallet link pattern not set, wallets links won't be generated."),
            (self.validator_link_pattern, "Validator link pattern not set, validators links won't be generated."),
            (self.transaction_link_pattern, "Transaction link pattern not set, transactions links won't be generated."),
            (self.block_link_pattern, "Block link pattern not set, blocks links won't be generated."),
        ]
        return [
            DisplayWarning(keys={"chain": chain.name}, text=text)
            for pattern, text in checks
            if not pattern
        ]


class SupportedExplorer(ABC):
    """A well-known explorer whose link patterns are derived from a prefix."""

    @abstractmethod
    def to_explorer(self) -> Explorer:
        """Build the explorer link patterns."""


@dataclass
class MintscanExplorer(SupportedExplorer):
    prefix: str = ""

    def to_explorer(self) -> Explorer:
        base = f"https://mintscan.io/{self.prefix}"
        return Explorer(
            proposal_link_pattern=f"{base}/proposals/%s",
            wallet_link_pattern=f"{base}/account/%s",
            validator_link_pattern=f"{base}/validators/%s",
            transaction_link_pattern=f"{base}/tx/%s",
            block_link_pattern=f"{base}/blocks/%s",
        )


@dataclass
class PingExplorer(SupportedExplorer):
    prefix: str = ""
    base_url: str = ""

    def to_explorer(self) -> Explorer:
        base = f"{self.base_url}/{self.prefix}"
        return Explorer(
            proposal_link_pattern=f"{base}/gov/%s",
            wallet_link_pattern=f"{base}/account/%s",
            validator_link_pattern=f"{base}/staking/%s",
            transaction_link_pattern=f"{base}/tx/%s",
            block_link_pattern=f"{base}/blocks/%s",
        )


@dataclass
class Chain:
    name: str = ""
    pretty_name: str = ""
    chain_id: str = ""
    tendermint_nodes: list[str] = field(default_factory=list)
    api_nodes: list[str] = field(default_factory=list)
    queries: list[Query] = field(default_factory=list)
    explorer: Explorer | None = None
    supported_explorer: SupportedExplorer | None = None
    denoms: DenomInfos = field(default_factory=DenomInfos)

    def get_name(self) -> str:
        return self.pretty_name or self.name

    def _link(self, pattern_of, value: str) -> Link:
        if self.explorer is None:
            return Link(value=value)
        return Link(href=_apply_pattern(pattern_of(self.explorer), value), value=value)

    def get_wallet_link(self, address: str) -> Link:
        if self.explorer is None:
            return Link(value=address)
        return Link(href=self.explorer.get_wallet_link(address), value=address)

    def get_validator_link(self, address: str) -> Link:
        return self._link(lambda e: e.validator_link_pattern, address)

    def get_proposal_link(self, proposal_id: str) -> Link:
        return self._link(lambda e: e.proposal_link_pattern, proposal_id)

    def get_transaction_link(self, tx_hash: str) -> Link:
        return self._link(lambda e: e.transaction_link_pattern, tx_hash)

    def get_block_link(self, height: int) -> Link:
        return self._link(lambda e: e.block_link_pattern, str(height))

    def display_warnings(self) -> list[DisplayWarning]:
        warnings = [w for denom in self.denoms for w in denom.display_warnings(self)]

        if not self.chain_id:
            warnings.append(
                DisplayWarning(
                    keys={"chain": self.name},
                    text="chain-id is not set, multichain denom matching won't work.",
                )
            )

        if self.explorer is None:
            warnings.append(
                DisplayWarning(
                    keys={"chain": self.name},
                    text="Explorer config not set, links won't be generated.",
                )
            )
        else:
            warnings.extend(self.explorer.display_warnings(self))

        return warnings


class Chains(list[Chain]):
    def find_by_name(self, name: str) -> Chain | None:
        return next((chain for chain in self if chain.name == name), None)

    def find_by_chain_id(self, chain_id: str) -> Chain | None:
        return next((chain for chain in self if chain.chain_id == chain_id), None)

    def has_chain(self, name: str) -> bool:
        return any(chain.name == name for chain in self)


@dataclass
class TelegramConfig:
    chat: int = 0
    token: str = ""
    admins: list[int] = field(default_factory=list)


@dataclass
class Reporter:
    name: str = ""
    type: str = ""
    telegram_config: TelegramConfig | None = None


@dataclass
class ChainSubscription:
    chain: str = ""
    filters: Filters = field(default_factory=Filters)
    log_unknown_messages: bool = False
    log_unparsed_messages: bool = False
    log_failed_transactions: bool = False
    log_node_errors: bool = False
    filter_internal_messages: bool = False


@dataclass
class Subscription:
    name: str = ""
    reporter: str = ""
    chain_subscriptions: list[ChainSubscription] = field(default_factory=list)