"""
FortuneDB: an in-memory indexed store of fortunes
Parses a delimited corpus and serves ordinal, random and metric queries
"""

from .core import (
    Entry, Metric, EmptySegments, TrimPolicy, DEFAULT_DELIMITER,
    FortuneDBError, ParseError, IndexOutOfRange, EmptyCorpus,
    NoMatchingEntry, QuerySyntaxError, ConfigError
)
from .parser import CorpusParser
from .index import MetricIndex
from .query import (
    Predicate, equals, at_most, at_least, less_than, greater_than, between,
    match_all, prefix_matcher, regex_matcher,
    ConstraintParser, QueryProcessor
)
from .store import FortuneDB
from .config import FortuneConfig
from .builder import CorpusBuilder, SampleQueryGenerator
from .metrics import MetricsCollector, Reporter

__version__ = "1.0.0"
__all__ = [
    "Entry",
    "Metric",
    "EmptySegments",
    "TrimPolicy",
    "DEFAULT_DELIMITER",
    "FortuneDBError",
    "ParseError",
    "IndexOutOfRange",
    "EmptyCorpus",
    "NoMatchingEntry",
    "QuerySyntaxError",
    "ConfigError",
    "CorpusParser",
    "MetricIndex",
    "Predicate",
    "equals",
    "at_most",
    "at_least",
    "less_than",
    "greater_than",
    "between",
    "match_all",
    "prefix_matcher",
    "regex_matcher",
    "ConstraintParser",
    "QueryProcessor",
    "FortuneDB",
    "FortuneConfig",
    "CorpusBuilder",
    "SampleQueryGenerator",
    "MetricsCollector",
    "Reporter",
]
