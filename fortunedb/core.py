"""
Core types and enums for FortuneDB
Handles the entry record, metric names, parsing policies and errors
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


DEFAULT_DELIMITER = "%%"


class Metric(Enum):
    """Derived metric a secondary ordering is built over"""
    LENGTH = 'length'
    WIDTH = 'width'
    HEIGHT = 'height'

    @classmethod
    def coerce(cls, value) -> 'Metric':
        """Accept a Metric or its (case-insensitive) name"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(
            f"Unknown metric: {value!r}. "
            f"Expected one of {[m.value for m in cls]}"
        )


class EmptySegments(Enum):
    """What to do with the segment between two consecutive delimiters"""
    KEEP = 1
    SKIP = 2


class TrimPolicy(Enum):
    """Trailing structure removed from each segment"""
    TRAILING_NEWLINE = 1
    NONE = 2


class FortuneDBError(Exception):
    """Base class for all FortuneDB errors"""


class ParseError(FortuneDBError, ValueError):
    """Input blob is empty, undecodable or holds no entries"""


class IndexOutOfRange(FortuneDBError, IndexError):
    """Ordinal outside [0, size())"""


class EmptyCorpus(FortuneDBError, LookupError):
    """Random draw or query requested on a zero-entry store"""


class NoMatchingEntry(FortuneDBError, LookupError):
    """A filtered random draw found nothing to choose from"""


class QuerySyntaxError(FortuneDBError, ValueError):
    """Malformed constraint expression"""


class ConfigError(FortuneDBError, ValueError):
    """Invalid configuration value or key"""


@dataclass(frozen=True)
class Entry:
    """
    One parsed fortune with its derived metrics.

    ``source`` names the blob the entry came from and ``offset`` is the
    character position of the entry inside that blob. Both are only
    used for diagnostics.
    """
    text: str
    length: int
    width: int
    height: int
    source: Optional[str] = None
    offset: int = 0

    def metric(self, metric: Metric) -> int:
        """Value of the given derived metric"""
        return getattr(self, Metric.coerce(metric).value)

    def __str__(self) -> str:
        return self.text
