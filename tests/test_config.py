import pytest

from cosmos_txbot.config import AppConfig, get_config, parse_config
from cosmos_txbot.config_types import Chain, Chains, Reporter
from cosmos_txbot.toml_config import ConfigError

VALID = """
timezone = "UTC"

[log]
level = "debug"

[[chains]]
name = "chain"
pretty-name = "Chain"
chain-id = "chain-id"
tendermint-nodes = ["http://localhost:26657"]
api-nodes = ["http://localhost:1317"]
queries = ["tx.height > 1"]
mintscan-prefix = "chain"

[[chains.denoms]]
denom = "uatom"
display-denom = "atom"
coingecko-currency = "cosmos"

[[reporters]]
name = "telegram-reporter"
type = "telegram"

[reporters.telegram-config]
chat = 1
token = "token"
admins = [123]

[[subscriptions]]
name = "subscription"
reporter = "telegram-reporter"

[[subscriptions.chains]]
name = "chain"
filters = ["message.action = '/cosmos.bank.v1beta1.MsgSend'"]
"""

EXTRA_CHAIN = """
[[chains]]
name = "chain2"
chain-id = "chain-id-2"
tendermint-nodes = ["http://localhost:26657"]
api-nodes = ["http://localhost:1317"]
mintscan-prefix = "chain2"

[[chains.denoms]]
denom = "uatom"
display-denom = "atom"
coingecko-currency = "cosmos"
"""

EXTRA_REPORTER = """
[[reporters]]
name = "unused-reporter"
type = "telegram"

[reporters.telegram-config]
chat = 2
token = "token"
admins = [456]
"""


def test_get_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_config(tmp_path / "config.toml")


def test_invalid_timezone():
    with pytest.raises(ConfigError, match="timezone"):
        parse_config(VALID.replace('timezone = "UTC"', 'timezone = "invalid"'))


def test_invalid_toml():
    with pytest.raises(ConfigError):
        parse_config("[[[ not toml")


def test_no_chains():
    with pytest.raises(ConfigError, match="no chains provided"):
        parse_config('timezone = "UTC"\n')


def test_valid_config_values(tmp_path):
    path = tmp_path / "valid.toml"
    path.write_text(VALID, encoding="utf-8")
    config = get_config(path)

    assert config.log_config.log_level == "debug"
    assert config.log_config.json_output is False
    assert config.metrics.enabled is True
    assert config.metrics.listen_addr == ":9580"
    assert config.chains[0].name == "chain"
    assert config.chains[0].explorer.validator_link_pattern == "https://mintscan.io/chain/validators/%s"
    assert config.chains[0].denoms[0].denom_exponent == 6
    assert config.reporters[0].telegram_config.chat == 1
    chain_subscription = config.subscriptions[0].chain_subscriptions[0]
    assert chain_subscription.log_unparsed_messages is True
    assert chain_subscription.log_unknown_messages is False
    assert str(chain_subscription.filters) == "message.action = '/cosmos.bank.v1beta1.MsgSend'"


def test_display_warnings_valid():
    assert parse_config(VALID).display_warnings() == []


def test_round_trip_through_toml_config():
    config = parse_config(VALID)
    again = AppConfig.from_toml_config(config.to_toml_config())

    assert again.log_config == config.log_config
    assert again.aliases_path == config.aliases_path
    assert again.metrics == config.metrics
    assert again.timezone == config.timezone
    assert again.chains == config.chains
    assert again.subscriptions == config.subscriptions
    assert again.reporters == config.reporters


def test_config_as_string_parses_back():
    config = parse_config(VALID)
    text = config.get_config_as_string()
    assert "telegram-reporter" in text
    assert parse_config(text) == config


def test_warnings_unused_reporter():
    warnings = parse_config(VALID + EXTRA_REPORTER).display_warnings()
    assert len(warnings) == 1
    assert warnings[0].keys == {"reporter": "unused-reporter"}


def test_warnings_unused_chain():
    warnings = parse_config(VALID + EXTRA_CHAIN).display_warnings()
    assert len(warnings) == 1
    assert warnings[0].keys == {"chain": "chain2"}
    assert warnings[0].text == "Chain is not used in any subscriptions"


def test_warnings_bare_chain_and_reporter():
    config = AppConfig(chains=Chains([Chain(name="chain")]), reporters=[Reporter(name="r")])
    texts = [warning.text for warning in config.display_warnings()]
    assert texts == [
        "chain-id is not set, multichain denom matching won't work.",
        "Explorer config not set, links won't be generated.",
        "Chain is not used in any subscriptions",
        "Reporter is not used in any subscriptions",
    ]