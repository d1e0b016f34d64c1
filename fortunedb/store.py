"""
Indexed fortune store
Owns the parsed corpus and serves ordinal, random and metric queries
"""

import logging
import numbers
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import numpy as np

from .core import (
    EmptyCorpus, Entry, IndexOutOfRange, Metric, NoMatchingEntry
)
from .index import MetricIndex
from .parser import CorpusParser
from .query import Predicate, SourceMatcher


logger = logging.getLogger(__name__)


class FortuneDB:
    """
    Immutable, in-memory fortune corpus.

    Entries are kept in insertion order in one tuple. Three MetricIndex
    objects (length, width, height) order positions into that tuple.

    Random draws use a single numpy Generator created at construction
    from ``seed`` and shared by every caller of this store; it is not
    reseeded per call. numpy bit generators serialise access with their
    own lock, so concurrent draws are safe.
    """

    def __init__(self, entries: Iterable[Entry] = (), seed=None):
        entries = tuple(entries)
        for entry in entries:
            if not isinstance(entry, Entry):
                raise TypeError(
                    f"FortuneDB holds Entry objects, got {type(entry).__name__}"
                )

        self._entries: Tuple[Entry, ...] = entries
        self._indices: Dict[Metric, MetricIndex] = {
            metric: MetricIndex(metric, [e.metric(metric) for e in entries])
            for metric in Metric
        }
        self._rng = np.random.default_rng(seed)

        logger.debug("Indexed %d fortunes over %s",
                     len(entries), [m.value for m in Metric])

    @classmethod
    def from_text(cls, raw_text, parser: Optional[CorpusParser] = None,
                  source: Optional[str] = None, seed=None) -> 'FortuneDB':
        """Parse one blob and index it; nothing is built if parsing fails"""
        parser = parser or CorpusParser()
        return cls(parser.parse(raw_text, source=source), seed=seed)

    @classmethod
    def from_sources(cls, sources: Mapping[str, object],
                     parser: Optional[CorpusParser] = None,
                     seed=None) -> 'FortuneDB':
        """
        Parse several named blobs, concatenated in mapping order.
        Any blob failing to parse fails the whole construction.
        """
        parser = parser or CorpusParser()
        entries: List[Entry] = []
        for name, raw_text in sources.items():
            parsed = parser.parse(raw_text, source=name)
            logger.debug("Parsed %d fortunes from '%s'", len(parsed), name)
            entries.extend(parsed)
        return cls(entries, seed=seed)

    # ------------------------------------------------------------------
    # Ordinal access
    # ------------------------------------------------------------------

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def get(self, i: int) -> Entry:
        """Entry at ordinal position i; negative positions are not wrapped"""
        if isinstance(i, bool) or not isinstance(i, numbers.Integral):
            raise TypeError(
                f"Fortune index must be an integer, got {type(i).__name__}"
            )
        if i < 0 or i >= len(self._entries):
            raise IndexOutOfRange(
                f"Fortune index {i} out of range [0, {len(self._entries)})"
            )
        return self._entries[i]

    __getitem__ = get

    def sources(self) -> List[str]:
        """Distinct source names in first-seen order"""
        seen = dict.fromkeys(
            e.source for e in self._entries if e.source is not None
        )
        return list(seen)

    # ------------------------------------------------------------------
    # Random selection
    # ------------------------------------------------------------------

    def draw(self, n: int) -> int:
        """Uniform integer in [0, n) from the store's generator"""
        return int(self._rng.integers(n))

    def random(self) -> Entry:
        """Uniformly random entry, empty entries included"""
        if not self._entries:
            raise EmptyCorpus("Cannot draw a fortune from an empty corpus")
        return self._entries[self.draw(len(self._entries))]

    def random_by_metric(self, metric, predicate) -> Entry:
        """Uniformly random entry among those satisfying the predicate"""
        positions = self.positions_by_metric(metric, predicate)
        if not positions:
            raise NoMatchingEntry(
                f"No fortune has {Metric.coerce(metric).value} "
                f"matching {Predicate.coerce(predicate)}"
            )
        return self._entries[positions[self.draw(len(positions))]]

    def _matching_positions(self, matcher: SourceMatcher) -> List[int]:
        return [i for i, e in enumerate(self._entries) if matcher(e.source)]

    def count_matching(self, matcher: SourceMatcher) -> int:
        return len(self._matching_positions(matcher))

    def random_matching(self, matcher: SourceMatcher) -> Entry:
        """Uniformly random entry among those whose source matches"""
        if not self._entries:
            raise EmptyCorpus("Cannot draw a fortune from an empty corpus")
        positions = self._matching_positions(matcher)
        if not positions:
            raise NoMatchingEntry("No matching fortune sources found")
        index = positions[self.draw(len(positions))]
        logger.debug("Selected fortune index %d (%d matching)",
                     index, len(positions))
        return self._entries[index]

    # ------------------------------------------------------------------
    # Metric queries
    # ------------------------------------------------------------------

    def index_for(self, metric) -> MetricIndex:
        return self._indices[Metric.coerce(metric)]

    def positions_by_metric(self, metric, predicate) -> List[int]:
        """Positions satisfying the predicate, ascending by metric then position"""
        index = self.index_for(metric)
        predicate = Predicate.coerce(predicate)
        if not self._entries:
            raise EmptyCorpus("Cannot query an empty corpus")
        if predicate.is_empty():
            return []
        return index.select(predicate.low, predicate.high).tolist()

    def count_by_metric(self, metric, predicate) -> int:
        index = self.index_for(metric)
        predicate = Predicate.coerce(predicate)
        if not self._entries:
            raise EmptyCorpus("Cannot query an empty corpus")
        if predicate.is_empty():
            return 0
        return index.count(predicate.low, predicate.high)

    def query_by_metric(self, metric, predicate) -> List[Entry]:
        """
        Entries whose metric satisfies the predicate.

        Args:
            metric: Metric or its name ('length', 'width', 'height')
            predicate: Predicate, or an int meaning equality

        Returns entries in ascending metric order, ties in insertion order.
        """
        return [self._entries[p]
                for p in self.positions_by_metric(metric, predicate)]
