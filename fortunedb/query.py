"""
Query processing module
Metric predicates, constraint expressions and source matchers
"""

import numbers
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import numpy as np

from .core import Entry, Metric, NoMatchingEntry, QuerySyntaxError


def _check_bound(value, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise TypeError(
            f"Predicate {name} must be an integer, got {type(value).__name__}"
        )
    return int(value)


@dataclass(frozen=True)
class Predicate:
    """Inclusive integer range; None leaves that side unbounded"""
    low: Optional[int] = None
    high: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'low', _check_bound(self.low, 'low'))
        object.__setattr__(self, 'high', _check_bound(self.high, 'high'))

    @classmethod
    def coerce(cls, value) -> 'Predicate':
        """A bare integer means equality"""
        if isinstance(value, cls):
            return value
        return equals(value)

    def is_empty(self) -> bool:
        return (self.low is not None and self.high is not None
                and self.low > self.high)

    def matches(self, value: int) -> bool:
        if self.low is not None and value < self.low:
            return False
        if self.high is not None and value > self.high:
            return False
        return True


def equals(value: int) -> Predicate:
    return Predicate(value, value)


def at_most(value: int) -> Predicate:
    return Predicate(high=value)


def at_least(value: int) -> Predicate:
    return Predicate(low=value)


def less_than(value: int) -> Predicate:
    return Predicate(high=_check_bound(value, 'high') - 1)


def greater_than(value: int) -> Predicate:
    return Predicate(low=_check_bound(value, 'low') + 1)


def between(low: int, high: int) -> Predicate:
    return Predicate(low, high)


# Source matchers: decide which named blobs a draw may come from

SourceMatcher = Callable[[Optional[str]], bool]


def match_all(source: Optional[str]) -> bool:
    return True


def prefix_matcher(prefixes: str) -> SourceMatcher:
    """Match sources starting with any of the ';'-separated prefixes"""
    options = tuple(p for p in prefixes.split(';') if p)

    def matcher(source: Optional[str]) -> bool:
        return source is not None and source.startswith(options)

    return matcher


def regex_matcher(pattern: str) -> SourceMatcher:
    """Match sources containing the regular expression"""
    compiled = re.compile(pattern)

    def matcher(source: Optional[str]) -> bool:
        return source is not None and compiled.search(source) is not None

    return matcher


class ConstraintParser:
    """
    Recursive descent parser for metric constraints

    EXPR   := CLAUSE (AND CLAUSE)*
    CLAUSE := METRIC OP INT | METRIC BETWEEN INT AND INT
    OP     := == | = | <= | >= | < | >

    Example: "height <= 4 AND width between 10 and 60"
    """

    OPERATORS = {
        '==': equals,
        '=': equals,
        '<=': at_most,
        '>=': at_least,
        '<': less_than,
        '>': greater_than,
    }

    TOKEN_RE = re.compile(
        r'\s*(?:(?P<int>-?\d+)|(?P<op><=|>=|==|=|<|>)|(?P<word>[A-Za-z_]+)|(?P<bad>\S))'
    )

    def __init__(self):
        self.tokens = []
        self.pos = 0

    def parse(self, expression: str) -> List[Tuple[Metric, Predicate]]:
        """Parse an expression into (metric, predicate) clauses"""
        self.tokens = self._tokenize(expression)
        self.pos = 0

        if not self.tokens:
            raise QuerySyntaxError("Empty constraint expression")

        clauses = [self._parse_clause()]
        while self._current_token() == ('KEYWORD', 'AND'):
            self._consume('KEYWORD')
            clauses.append(self._parse_clause())

        if self.pos < len(self.tokens):
            raise QuerySyntaxError(
                f"Unexpected token: {self.tokens[self.pos][1]!r}"
            )
        return clauses

    def _tokenize(self, expression: str) -> List[Tuple[str, str]]:
        tokens = []
        for match in self.TOKEN_RE.finditer(expression.rstrip()):
            if match.group('int') is not None:
                tokens.append(('INT', match.group('int')))
            elif match.group('op') is not None:
                tokens.append(('OP', match.group('op')))
            elif match.group('word') is not None:
                word = match.group('word').upper()
                if word in ('AND', 'BETWEEN'):
                    tokens.append(('KEYWORD', word))
                else:
                    tokens.append(('METRIC', word.lower()))
            else:
                raise QuerySyntaxError(
                    f"Unexpected character {match.group('bad')!r} "
                    f"at position {match.start('bad')}"
                )
        return tokens

    def _current_token(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _consume(self, expected_type: str) -> Tuple[str, str]:
        token = self._current_token()
        if token is None:
            raise QuerySyntaxError("Unexpected end of expression")
        if token[0] != expected_type:
            raise QuerySyntaxError(
                f"Expected {expected_type}, got {token[0]} {token[1]!r}"
            )
        self.pos += 1
        return token

    def _parse_clause(self) -> Tuple[Metric, Predicate]:
        _, name = self._consume('METRIC')
        try:
            metric = Metric.coerce(name)
        except ValueError as e:
            raise QuerySyntaxError(str(e)) from e

        if self._current_token() == ('KEYWORD', 'BETWEEN'):
            self._consume('KEYWORD')
            low = int(self._consume('INT')[1])
            if self._current_token() != ('KEYWORD', 'AND'):
                raise QuerySyntaxError("Expected AND after BETWEEN lower bound")
            self._consume('KEYWORD')
            high = int(self._consume('INT')[1])
            return metric, between(low, high)

        _, op = self._consume('OP')
        value = int(self._consume('INT')[1])
        return metric, self.OPERATORS[op](value)


class QueryProcessor:
    """
    Evaluates constraint expressions against a FortuneDB.
    Results follow the first clause's ordering, filtered by the others.
    """

    def __init__(self, store: 'FortuneDB'):
        self.store = store

    def positions(self, expression: str) -> List[int]:
        # Parser holds per-parse state, so each call gets its own
        clauses = ConstraintParser().parse(expression)

        (metric, predicate), rest = clauses[0], clauses[1:]
        selected = np.asarray(
            self.store.positions_by_metric(metric, predicate), dtype=np.int64
        )
        for metric, predicate in rest:
            if not len(selected):
                break
            allowed = self.store.positions_by_metric(metric, predicate)
            selected = selected[np.isin(selected, allowed)]

        return [int(p) for p in selected]

    def query(self, expression: str) -> List[Entry]:
        return [self.store.get(p) for p in self.positions(expression)]

    def count(self, expression: str) -> int:
        return len(self.positions(expression))

    def random(self, expression: str) -> Entry:
        """Uniform draw among entries satisfying the expression"""
        positions = self.positions(expression)
        if not positions:
            raise NoMatchingEntry(f"No fortune satisfies {expression!r}")
        return self.store.get(positions[self.store.draw(len(positions))])
