import logging

import pytest

from cosmos_txbot.config_types import (
    Chain,
    Chains,
    DenomInfo,
    DenomInfos,
    DisplayWarning,
    Explorer,
    MintscanExplorer,
    PingExplorer,
)


def full_explorer():
    return Explorer(
        transaction_link_pattern="test/%s",
        block_link_pattern="test/%s",
        wallet_link_pattern="test/%s",
        validator_link_pattern="test/%s",
        proposal_link_pattern="test/%s",
    )


def test_chain_get_pretty_name():
    assert Chain(name="name").get_name() == "name"
    assert Chain(name="name", pretty_name="Name").get_name() == "Name"


def test_chains_find_by_name():
    chains = Chains([Chain(name="name")])
    assert chains.find_by_name("name").name == "name"
    assert chains.find_by_name("name-2") is None


def test_chains_has_by_name():
    chains = Chains([Chain(name="name")])
    assert chains.has_chain("name") is True
    assert chains.has_chain("name-2") is False


def test_chains_find_by_chain_id():
    chains = Chains([Chain(name="name", chain_id="chain-id")])
    assert chains.find_by_chain_id("chain-id").name == "name"
    assert chains.find_by_chain_id("chain-id-2") is None


@pytest.mark.parametrize(
    ("method", "pattern_field", "argument", "value"),
    [
        ("get_wallet_link", "wallet_link_pattern", "wallet", "wallet"),
        ("get_validator_link", "validator_link_pattern", "validator", "validator"),
        ("get_proposal_link", "proposal_link_pattern", "proposal", "proposal"),
        ("get_transaction_link", "transaction_link_pattern", "transaction", "transaction"),
        ("get_block_link", "block_link_pattern", 1337, "1337"),
    ],
)
def test_chain_links(method, pattern_field, argument, value):
    chain1 = Chain(name="name", chain_id="chain-id")
    link1 = getattr(chain1, method)(argument)
    assert link1.value == value
    assert link1.href == ""
    assert link1.title == ""

    chain2 = Chain(
        name="name", chain_id="chain-id", explorer=Explorer(**{pattern_field: "test/%s"})
    )
    link2 = getattr(chain2, method)(argument)
    assert link2.value == value
    assert link2.href == f"test/{value}"
    assert link2.title == ""


def test_chain_display_warnings_invalid_denom():
    chain = Chain(
        name="name",
        chain_id="chain-id",
        explorer=full_explorer(),
        denoms=DenomInfos([DenomInfo(denom="test", denom_exponent=0, display_denom="test")]),
    )
    assert len(chain.display_warnings()) == 1


def test_chain_display_warnings_empty_chain_id():
    chain = Chain(
        name="name",
        explorer=full_explorer(),
        denoms=DenomInfos(
            [DenomInfo(denom="test", display_denom="test", coingecko_currency="test")]
        ),
    )
    warnings = chain.display_warnings()
    assert len(warnings) == 1
    assert warnings[0].keys == {"chain": "name"}


def test_chain_display_warnings_no_explorer():
    chain = Chain(
        name="name",
        chain_id="chain-id",
        denoms=DenomInfos(
            [DenomInfo(denom="test", display_denom="test", coingecko_currency="test")]
        ),
    )
    assert len(chain.display_warnings()) == 1


def test_chain_display_warnings_empty():
    chain = Chain(
        name="name",
        chain_id="chain-id",
        explorer=full_explorer(),
        denoms=DenomInfos(
            [DenomInfo(denom="test", display_denom="test", coingecko_currency="test")]
        ),
    )
    assert chain.display_warnings() == []


def test_denoms_find():
    denoms = DenomInfos([DenomInfo(denom="denom")])
    assert denoms.find("denom").denom == "denom"
    assert denoms.find("denom-2") is None


def test_display_warning_log(caplog):
    warning = DisplayWarning(keys={"chain": "chain"}, text="Something is off")
    logger = logging.getLogger("test_display_warning")
    with caplog.at_level(logging.WARNING, logger="test_display_warning"):
        warning.log(logger)
    assert len(caplog.records) == 1
    message = caplog.records[0].getMessage()
    assert "Something is off" in message
    assert "chain=chain" in message


def test_mintscan_explorer_to_explorer():
    explorer = MintscanExplorer(prefix="chain").to_explorer()
    assert explorer.block_link_pattern == "https://mintscan.io/chain/blocks/%s"
    assert explorer.transaction_link_pattern == "https://mintscan.io/chain/tx/%s"
    assert explorer.validator_link_pattern == "https://mintscan.io/chain/validators/%s"
    assert explorer.wallet_link_pattern == "https://mintscan.io/chain/account/%s"
    assert explorer.proposal_link_pattern == "https://mintscan.io/chain/proposals/%s"


def test_ping_explorer_to_explorer():
    explorer = PingExplorer(prefix="chain", base_url="https://example.com").to_explorer()
    assert explorer.block_link_pattern == "https://example.com/chain/blocks/%s"
    assert explorer.transaction_link_pattern == "https://example.com/chain/tx/%s"
    assert explorer.validator_link_pattern == "https://example.com/chain/staking/%s"
    assert explorer.wallet_link_pattern == "https://example.com/chain/account/%s"
    assert explorer.proposal_link_pattern == "https://example.com/chain/gov/%s"


@pytest.mark.parametrize(
    "missing",
    [
        "transaction_link_pattern",
        "block_link_pattern",
        "validator_link_pattern",
        "wallet_link_pattern",
        "proposal_link_pattern",
    ],
)
def test_explorer_display_warnings_missing_pattern(missing):
    explorer = full_explorer()
    setattr(explorer, missing, "")
    warnings = explorer.display_warnings(Chain(name="chain"))
    assert len(warnings) == 1
    assert warnings[0].keys == {"chain": "chain"}


def test_explorer_display_warnings_valid():
    assert full_explorer().display_warnings(Chain(name="chain")) == []


def test_explorer_wallet_link():
    explorer = Explorer(wallet_link_pattern="test/%s")
    assert explorer.get_wallet_link("wallet") == "test/wallet"