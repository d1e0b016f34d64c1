"""
Corpus builder and query generator module
Builds a FortuneDB from configuration and generates sample constraint queries
"""

import logging
import time
from typing import List, Mapping, Optional, Union
import numpy as np

from .config import FortuneConfig
from .core import Entry, Metric
from .query import QueryProcessor
from .store import FortuneDB


logger = logging.getLogger(__name__)


class CorpusBuilder:
    """
    Main interface for building a store with a given configuration
    """

    def __init__(self, config: Union[FortuneConfig, str, None] = None):
        """
        config is a FortuneConfig, a version string (FortuneDB-v1.et)
        or None for the defaults
        """
        if isinstance(config, str):
            config = FortuneConfig.from_version(config)
        self.config = config or FortuneConfig()
        self.store: Optional[FortuneDB] = None

    def build(self, sources: Union[Mapping[str, object], str, bytes]) -> FortuneDB:
        """
        Build the store from one blob or from a mapping of name -> blob.
        The previous store, if any, is kept when the build fails.
        """
        logger.info(
            "Building fortune store (delimiter=%r, trim=%s, empty_segments=%s)",
            self.config.delimiter, self.config.trim.name,
            self.config.empty_segments.name,
        )
        start_time = time.perf_counter()
        parser = self.config.make_parser()

        if isinstance(sources, (str, bytes, bytearray)):
            store = FortuneDB.from_text(sources, parser=parser,
                                        seed=self.config.seed)
        else:
            store = FortuneDB.from_sources(sources, parser=parser,
                                           seed=self.config.seed)

        total_size = sum(entry.length for entry in store)
        logger.info("Indexed %d fortunes in %.3fs", len(store),
                    time.perf_counter() - start_time)
        logger.info("Total fortune size: %d", total_size)

        self.store = store
        return store

    def _require_store(self) -> FortuneDB:
        if self.store is None:
            raise ValueError("Fortune store not built")
        return self.store

    def get_query_processor(self) -> QueryProcessor:
        """Get query processor for the built store"""
        return QueryProcessor(self._require_store())

    def random_fortune(self) -> Entry:
        """Random fortune drawn from the sources the config selects"""
        return self._require_store().random_matching(self.config.matcher())


class SampleQueryGenerator:
    """Generate valid constraint expressions for benchmarking"""

    @staticmethod
    def generate_queries(store: FortuneDB, num_queries: int = 50,
                         seed=None) -> List[str]:
        """
        Generate constraint expressions whose bounds come from the
        corpus' own percentiles, so most of them select something.
        """
        if not len(store):
            return []

        rng = np.random.default_rng(seed)
        values = {
            metric: np.array([entry.metric(metric) for entry in store])
            for metric in Metric
        }
        metrics = list(Metric)

        def bound(metric: Metric) -> int:
            return int(np.percentile(values[metric], rng.uniform(10, 90)))

        queries = []
        for i in range(num_queries):
            query_type = i % 5
            metric = metrics[int(rng.integers(len(metrics)))]
            other = metrics[(metrics.index(metric) + 1) % len(metrics)]

            if query_type == 0:
                # Pattern: metric == n
                queries.append(f"{metric.value} == {bound(metric)}")

            elif query_type == 1:
                # Pattern: metric <= n
                queries.append(f"{metric.value} <= {bound(metric)}")

            elif query_type == 2:
                # Pattern: metric >= n
                queries.append(f"{metric.value} >= {bound(metric)}")

            elif query_type == 3:
                # Pattern: metric BETWEEN lo AND hi
                lo, hi = sorted((bound(metric), bound(metric)))
                queries.append(f"{metric.value} BETWEEN {lo} AND {hi}")

            else:
                # Pattern: metric <= n AND other <= m
                queries.append(
                    f"{metric.value} <= {bound(metric)} "
                    f"AND {other.value} <= {bound(other)}"
                )

        return queries
