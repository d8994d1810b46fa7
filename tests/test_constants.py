import pytest

from cosmos_txbot.constants import (
    REPORTER_TYPE_TELEGRAM,
    EventFilterReason,
    ReporterQuery,
    get_reporter_types,
)


def test_reporter_types_contains_telegram_only():
    assert get_reporter_types() == ["telegram"]


def test_reporter_types_returns_fresh_list():
    first = get_reporter_types()
    first.append("other")
    assert get_reporter_types() == [REPORTER_TYPE_TELEGRAM]


@pytest.mark.parametrize("reason", list(EventFilterReason))
def test_event_filter_reason_round_trip(reason):
    assert EventFilterReason(reason.value) is reason


@pytest.mark.parametrize("query", list(ReporterQuery))
def test_reporter_query_round_trip(query):
    assert ReporterQuery(query.value) is query


def test_known_values():
    assert EventFilterReason("tx_error_not_logged") is EventFilterReason.TX_ERROR_NOT_LOGGED
    assert ReporterQuery("set_alias") is ReporterQuery.SET_ALIAS


def test_unknown_query_rejected():
    with pytest.raises(ValueError):
        ReporterQuery("nonexistent")