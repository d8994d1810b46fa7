import pytest

from cosmos_txbot.filters import (
    Filters,
    QueryMatchError,
    QuerySyntaxError,
    parse_query,
)


def test_filters_string():
    filters = Filters(
        [parse_query("event1.key1 = 'value1'"), parse_query("event2.key2 = 'value2'")]
    )
    assert str(filters) == "event1.key1 = 'value1', event2.key2 = 'value2'"


def test_filters_matches_empty():
    assert Filters().matches({"": [""]}) is True


def test_filters_matches():
    filters = Filters([parse_query("event.key = 'value'")])
    assert filters.matches({"event.key": ["value"]}) is True


def test_filters_not_matches():
    filters = Filters([parse_query("event.key = 'value'")])
    assert filters.matches({"event.key": ["value2"]}) is False


def test_filters_error():
    filters = Filters([parse_query("event.key > 100")])
    with pytest.raises(QueryMatchError):
        filters.matches({"event.key": ["value"]})


def test_filters_accept_pairs():
    filters = Filters([parse_query("event.key = 'value'")])
    assert filters.matches([("event.key", "other"), ("event.key", "value")]) is True


def test_any_filter_is_enough():
    filters = Filters([parse_query("a.b = 'x'"), parse_query("c.d = 'y'")])
    assert filters.matches({"c.d": ["y"]}) is True
    assert filters.matches({"e.f": ["y"]}) is False


@pytest.mark.parametrize("text", ["query", "invalid", "", "event.key =", "event.key < 'x'"])
def test_parse_errors(text):
    with pytest.raises(QuerySyntaxError):
        parse_query(text)


def test_query_string_is_source_text():
    assert str(parse_query("event.key = 'value'")) == "event.key = 'value'"


def test_numeric_comparison():
    query = parse_query("tx.height > 1")
    assert query.matches({"tx.height": ["5"]}) is True
    assert query.matches({"tx.height": ["1"]}) is False


def test_and_conditions():
    query = parse_query("a.b = 'x' AND c.d EXISTS")
    assert query.matches({"a.b": ["x"], "c.d": ["anything"]}) is True
    assert query.matches({"a.b": ["x"]}) is False


def test_contains():
    query = parse_query("message.action CONTAINS 'Send'")
    assert query.matches({"message.action": ["/cosmos.bank.v1beta1.MsgSend"]}) is True
    assert query.matches({"message.action": ["vote"]}) is False


def test_missing_tag_does_not_match():
    assert parse_query("event.key = 'value'").matches({}) is False