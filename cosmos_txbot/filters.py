"""Event queries (``tag op operand [AND ...]``) and lists of them."""

from __future__ import annotations

import operator
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Union

Events = Union[Mapping[str, Any], Iterable[tuple[str, str]]]


class QuerySyntaxError(ValueError):
    """Raised when a query string cannot be parsed."""


class QueryMatchError(ValueError):
    """Raised when an event value cannot be compared with a query operand."""


_LEXER = re.compile(
    r"\s*(?:(?P<string>'[^']*')|(?P<time>TIME\s+\S+)|(?P<date>DATE\s+\S+)"
    r"|(?P<op><=|>=|<|>|=)|(?P<word>[A-Za-z_][\w.\-/]*)|(?P<number>-?\d+(?:\.\d+)?)"
    r"|(?P<bad>\S))"
)
_KEYWORDS = {"AND", "CONTAINS", "EXISTS", "DATE", "TIME"}
_COMPARE = {"=": operator.eq, "<": operator.lt, "<=": operator.le, ">": operator.gt, ">=": operator.ge}


def _to_time(text: str) -> datetime:
    moment = datetime.fromisoformat(text)
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _to_date(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


@dataclass(frozen=True)
class _Condition:
    tag: str
    op: str
    operand: Any = None

    def holds_for(self, value: str) -> bool:
        if self.op == "EXISTS":
            return True
        if self.op == "CONTAINS":
            return self.operand in value
        if isinstance(self.operand, str):
            return value == self.operand
        if isinstance(self.operand, float):
            convert, kind = float, "a number"
        elif isinstance(self.operand, datetime):
            convert, kind = _to_time, "a time"
        else:
            convert, kind = _to_date, "a date"
        try:
            parsed = convert(value)
        except ValueError as exc:
            raise QueryMatchError(f"cannot parse {value!r} of {self.tag!r} as {kind}") from exc
        return _COMPARE[self.op](parsed, self.operand)


def _operand(kind: str, raw: str) -> Any:
    if kind == "string":
        return raw[1:-1]
    if kind == "number":
        return float(raw)
    literal = raw.split(None, 1)[1]
    try:
        return _to_time(literal) if kind == "time" else datetime.strptime(literal, "%Y-%m-%d").date()
    except ValueError as exc:
        raise QuerySyntaxError(f"invalid {kind} literal: {literal!r}") from exc


def _parse_conditions(text: str) -> tuple[_Condition, ...]:
    lexemes = iter(
        (match.lastgroup, match.group(match.lastgroup))
        for match in _LEXER.finditer(text)
        if match.lastgroup
    )

    def take(what: str) -> tuple[str, str]:
        lexeme = next(lexemes, None)
        if lexeme is None:
            raise QuerySyntaxError(f"unexpected end of query, expected {what}")
        if lexeme[0] == "bad":
            raise QuerySyntaxError(f"unexpected character {lexeme[1]!r}")
        return lexeme

    conditions: list[_Condition] = []
    while True:
        kind, tag = take("a tag")
        if kind != "word" or tag in _KEYWORDS:
            raise QuerySyntaxError(f"expected a tag, got {tag!r}")
        kind, op = take("an operator")
        if (kind, op) == ("word", "EXISTS"):
            conditions.append(_Condition(tag, op))
        elif (kind, op) == ("word", "CONTAINS"):
            kind, raw = take("a string")
            if kind != "string":
                raise QuerySyntaxError(f"CONTAINS needs a string, got {raw!r}")
            conditions.append(_Condition(tag, op, raw[1:-1]))
        elif kind == "op":
            kind, raw = take("an operand")
            if kind not in {"string", "number", "date", "time"}:
                raise QuerySyntaxError(f"expected an operand, got {raw!r}")
            if kind == "string" and op != "=":
                raise QuerySyntaxError(f"operator {op} cannot compare strings")
            conditions.append(_Condition(tag, op, _operand(kind, raw)))
        else:
            raise QuerySyntaxError(f"expected an operator, got {op!r}")

        following = next(lexemes, None)
        if following is None:
            return tuple(conditions)
        if following[0] == "bad":
            raise QuerySyntaxError(f"unexpected character {following[1]!r}")
        if following != ("word", "AND"):
            raise QuerySyntaxError(f"expected AND, got {following[1]!r}")


def _group(events: Events) -> dict[str, list[str]]:
    if isinstance(events, Mapping):
        return {key: [value] if isinstance(value, str) else list(value) for key, value in events.items()}
    grouped: dict[str, list[str]] = {}
    for key, value in events:
        grouped.setdefault(key, []).append(value)
    return grouped


@dataclass(frozen=True)
class Query:
    """A parsed query; its string form is the text it was parsed from."""

    text: str
    conditions: tuple[_Condition, ...]

    def __str__(self) -> str:
        return self.text

    def matches(self, events: Events) -> bool:
        """Tell whether every condition holds for the given event attributes."""
        grouped = _group(events)
        return all(
            any(condition.holds_for(value) for value in grouped.get(condition.tag, ()))
            for condition in self.conditions
        )


def parse_query(text: str) -> Query:
    """Parse a query string, raising QuerySyntaxError when it is malformed."""
    if not text.strip():
        raise QuerySyntaxError("empty query")
    return Query(text=text, conditions=_parse_conditions(text))


class Filters(list[Query]):
    """A list of queries of which any one must match."""

    def __str__(self) -> str:
        return ", ".join(map(str, self))

    def matches(self, events: Events) -> bool:
        """An empty list matches everything; otherwise any query must match."""
        if not self:
            return True
        grouped = _group(events)
        return any(query.matches(grouped) for query in self)