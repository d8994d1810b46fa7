# cosmos-txbot

Building blocks for a bot that watches Cosmos SDK chains and sends a
notification for each new transaction. The package holds the parts that need
no network connection:

- `cosmos_txbot.config` – reading, validating and re-rendering the TOML
  configuration (chains, reporters, subscriptions, logging and metrics
  settings, time zone);
- `cosmos_txbot.toml_config` – the file form of the configuration, with its
  defaults and validation rules;
- `cosmos_txbot.config_types` – chains, explorers, denoms, reporters and
  subscriptions as the application uses them, including explorer link
  generation with Mintscan and Ping.pub presets;
- `cosmos_txbot.filters` – event queries in the Tendermint query language;
- `cosmos_txbot.aliases` – per-subscription wallet aliases kept in a TOML file;
- `cosmos_txbot.cache` – a small in-memory cache whose entries expire;
- `cosmos_txbot.constants` – reporter types, filter reasons and reporter
  commands.

## Installation

```
pip install cosmos-txbot
```

## Configuration file

```toml
timezone = "Etc/GMT"
aliases = "aliases.toml"

[log]
level = "info"
json = false

[metrics]
enabled = true
listen-addr = ":9580"

[[chains]]
name = "cosmos"
pretty-name = "Cosmos Hub"
chain-id = "cosmoshub-4"
tendermint-nodes = ["http://localhost:26657"]
api-nodes = ["http://localhost:1317"]
queries = ["tx.height > 1"]
mintscan-prefix = "cosmos"

[[chains.denoms]]
denom = "uatom"
display-denom = "atom"
denom-exponent = 6
coingecko-currency = "cosmos"

[[reporters]]
name = "telegram"
type = "telegram"
telegram-config = { token = "token", chat = 1, admins = [1] }

[[subscriptions]]
name = "main"
reporter = "telegram"

[[subscriptions.chains]]
name = "cosmos"
filters = ["message.action = '/cosmos.bank.v1beta1.MsgSend'"]
```

Defaults for missing values: `timezone = "Etc/GMT"`, log `level = "info"`,
`json = false`, metrics `enabled = true`, `listen-addr = ":9580"`, chain
`queries = ["tx.height > 1"]`, `ping-base-url = "https://ping.pub"`,
`denom-exponent = 6`, reporter `type = "telegram"`. In a subscription's chain
entry `log-unknown-messages` defaults to `false`, while
`log-unparsed-messages`, `log-failed-transactions`, `log-node-errors` and
`filter-internal-messages` default to `true`.

Instead of `mintscan-prefix`, a chain may set `ping-prefix` (with an optional
`ping-base-url`), or a full `[chains.explorer]` table with
`wallet-link-pattern`, `validator-link-pattern`, `proposal-link-pattern`,
`transaction-link-pattern` and `block-link-pattern`, each holding one `%s`.
`mintscan-prefix` wins over `ping-prefix`, and either wins over an explorer
table.

Validation raises `cosmos_txbot.toml_config.ConfigError` when there are no
chains, the time zone is unknown, a chain, denom, reporter or subscription
is incomplete, a query or filter does not parse, names are duplicated, or a
subscription refers to a chain or reporter that is not defined. The only
supported reporter type is `telegram`, and it needs a `telegram-config`.

## Usage

```python
from cosmos_txbot.config import get_config, parse_config

config = get_config("config.toml")   # ConfigError if invalid, OSError if unreadable
for warning in config.display_warnings():
    print(warning.keys, warning.text)

chain = config.chains.find_by_name("cosmos")
print(chain.get_name())                          # "Cosmos Hub"
print(chain.get_wallet_link("cosmos1abc").href)  # "https://mintscan.io/cosmos/account/cosmos1abc"
print(chain.get_block_link(1337).value)          # "1337"

print(config.get_config_as_string())             # the config rendered back as TOML
```

`display_warnings()` reports denoms without `coingecko-currency`, chains
without a `chain-id` or explorer, explorer link patterns left empty, and
chains or reporters that no subscription uses. Each `DisplayWarning` can be
written to a `logging.Logger` with `warning.log(logger)`.

### Filters

```python
from cosmos_txbot.filters import Filters, parse_query

filters = Filters([parse_query("transfer.amount > 100")])
filters.matches({"transfer.amount": ["150"]})   # True
Filters().matches({})                           # True: no filters match everything
```

A query is one or more conditions joined by `AND`. A condition is
`tag = 'string'`, `tag <op> number` with `=`, `<`, `<=`, `>` or `>=`,
`tag <op> DATE 2024-01-31`, `tag <op> TIME 2024-01-31T10:00:00Z`,
`tag CONTAINS 'text'` or `tag EXISTS`. `parse_query` raises
`QuerySyntaxError` on malformed text; matching raises `QueryMatchError` when
an event value cannot be read as the number, date or time it is compared
with. Events may be given as a mapping of tag to value(s) or as
`(tag, value)` pairs. `Filters` matches when any of its queries matches.

### Aliases

```python
import logging
from cosmos_txbot.aliases import AliasManager

manager = AliasManager(config, logging.getLogger("aliases"))
manager.load()                                         # reads config.aliases_path
manager.set("main", "cosmos", "cosmos1abc", "treasury")  # saves the file
manager.get("main", "cosmos", "cosmos1abc")            # "treasury"
manager.get_aliases_links("main")                      # wallet links titled with their alias
```

When `aliases` is not set in the config, loading, saving and setting are
skipped with a warning. Read and decode errors in `load()` are logged and
leave the aliases as they were; `save()` logs and re-raises `OSError`.
Setting an alias for a chain that is not configured raises
`UnknownChainError`. The file is a table per subscription, a table per chain
in it, and `wallet = "alias"` entries.

### Cache

```python
from cosmos_txbot.cache import Cache

cache = Cache()              # entries live for ten minutes
cache.set("key", "value")
cache.get("key")             # "value"; None when missing or expired
"key" in cache               # True while the entry is fresh
```

## What this package does not do

There is no command-line program and no running service here. The package
does not connect to chain nodes, decode transactions, send messages to
Telegram or serve metrics; it provides the configuration, filtering, link
and alias handling such a service is built on.

## Development

```
pip install -e ".[test]"
pytest
```