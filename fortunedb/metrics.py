"""
Metrics collection and reporting module
Corpus statistics, index memory, query latency and selectivity
"""

import time
import psutil
import numpy as np
from typing import Dict, List

from .core import EmptyCorpus, Metric
from .query import ConstraintParser, QueryProcessor
from .store import FortuneDB


class MetricsCollector:
    """Collect and analyze corpus and system metrics"""

    @staticmethod
    def corpus_statistics(store: FortuneDB) -> Dict:
        """
        Summary of the corpus' derived metrics.
        Per metric: mean, median, p95, min, max. Empty corpus gives zeros.
        """
        stats = {
            'entries': len(store),
            'empty_entries': sum(1 for entry in store if not entry.text),
            'total_length': sum(entry.length for entry in store),
            'sources': len(store.sources()),
        }

        for metric in Metric:
            values = np.array([entry.metric(metric) for entry in store])
            if not len(values):
                stats[metric.value] = {
                    'mean': 0.0, 'median': 0.0, 'p95': 0.0, 'min': 0, 'max': 0
                }
                continue
            index = store.index_for(metric)
            stats[metric.value] = {
                'mean': float(np.mean(values)),
                'median': float(np.median(values)),
                'p95': float(np.percentile(values, 95)),
                'min': index.min(),
                'max': index.max(),
            }

        return stats


    @staticmethod
    def measure_memory(store: FortuneDB) -> Dict:
        """
        Memory held by the store next to the process RSS (MB).
        Index sizes are the numpy buffers (positions + values) of each
        metric ordering, in bytes.
        """
        index_bytes = {}
        for metric in Metric:
            index = store.index_for(metric)
            index_bytes[metric.value] = int(index.positions.nbytes
                                            + index.values.nbytes)
        total = sum(index_bytes.values())

        return {
            'process_mb': psutil.Process().memory_info().rss / 1024 / 1024,
            'text_bytes': sum(len(entry.text.encode('utf-8')) for entry in store),
            'index_bytes': index_bytes,
            'index_total_bytes': total,
            'index_bytes_per_entry': total / len(store) if len(store) else 0.0,
        }

    @staticmethod
    def clause_selectivity(store: FortuneDB, queries: List[str]) -> Dict:
        """
        Fraction of the corpus each constraint clause selects on its own,
        grouped by metric. Metrics no query constrains are left out.
        """
        if not len(store):
            raise EmptyCorpus("Cannot measure selectivity on an empty corpus")

        fractions: Dict[str, List[float]] = {}
        for query in queries:
            for metric, predicate in ConstraintParser().parse(query):
                hits = store.count_by_metric(metric, predicate)
                fractions.setdefault(metric.value, []).append(hits / len(store))

        return {
            name: {
                'clauses': len(values),
                'mean': float(np.mean(values)),
                'min': float(np.min(values)),
                'max': float(np.max(values)),
            }
            for name, values in fractions.items()
        }

    @staticmethod
    def measure_query_latency(query_processor: QueryProcessor,
                              queries: List[str],
                              repetitions: int = 1) -> Dict:
        """
        Time each constraint query over several repetitions.

        Returns:
            'latency': mean, median, p95, p99, min, max, std over every
                run, in milliseconds
            'per_query': one record per query with its mean time, match
                count and selectivity (matches / corpus size)
            'selectivity': clause_selectivity() of the same queries
        """
        if not queries:
            raise ValueError("No queries to measure")

        store = query_processor.store
        timings = [[] for _ in queries]
        matches = [0] * len(queries)

        for _ in range(max(1, repetitions)):
            for k, query in enumerate(queries):
                start_time = time.perf_counter()
                matches[k] = len(query_processor.positions(query))
                timings[k].append((time.perf_counter() - start_time) * 1000)

        runs = np.concatenate([np.asarray(t) for t in timings])
        latency = {
            'mean': float(np.mean(runs)),
            'median': float(np.median(runs)),
            'p95': float(np.percentile(runs, 95)),
            'p99': float(np.percentile(runs, 99)),
            'min': float(np.min(runs)),
            'max': float(np.max(runs)),
            'std': float(np.std(runs)),
        }

        per_query = [
            {
                'query': query,
                'ms': float(np.mean(timings[k])),
                'matches': matches[k],
                'selectivity': matches[k] / len(store),
            }
            for k, query in enumerate(queries)
        ]

        return {
            'latency': latency,
            'per_query': per_query,
            'selectivity': MetricsCollector.clause_selectivity(store, queries),
        }

    @staticmethod
    def measure_throughput(query_processor: QueryProcessor,
                           queries: List[str],
                           repetitions: int = 1) -> float:
        """Constraint queries answered per second over all repetitions"""
        if not queries:
            return 0.0

        query_count = 0
        start_time = time.perf_counter()
        for _ in range(repetitions):
            for query in queries:
                query_processor.positions(query)
                query_count += 1
        elapsed = time.perf_counter() - start_time

        return query_count / elapsed if elapsed > 0 else 0.0


class Reporter:
    """Generate text reports"""

    @staticmethod
    def print_corpus_report(name: str, stats: Dict):
        """Print formatted corpus statistics"""
        print(f"\n{'='*70}")
        print(f"Corpus Report: {name}")
        print(f"{'='*70}")
        print(f"  Fortunes:       {stats['entries']}")
        print(f"  Empty fortunes: {stats['empty_entries']}")
        print(f"  Sources:        {stats['sources']}")
        print(f"  Total size:     {stats['total_length']} characters")

        print(f"\n{'Metric':<10} {'Mean':<10} {'Median':<10} {'P95':<10} {'Min':<8} {'Max':<8}")
        print(f"{'-'*60}")
        for metric in Metric:
            m = stats[metric.value]
            print(f"{metric.value:<10} {m['mean']:<10.2f} {m['median']:<10.2f} "
                  f"{m['p95']:<10.2f} {m['min']:<8} {m['max']:<8}")
        print(f"{'='*70}\n")

    @staticmethod
    def print_metrics_report(name: str, metrics: Dict, slowest: int = 3):
        """
        Print query latency, per-metric selectivity, throughput and index
        memory, whichever of them ``metrics`` holds
        """
        print(f"\n{'='*70}")
        print(f"Query Report: {name}")
        print(f"{'='*70}")

        if 'latency' in metrics:
            latency = metrics['latency']
            print("\nConstraint query latency (ms):")
            print(f"  Mean {latency['mean']:.4f}  Median {latency['median']:.4f}  "
                  f"P95 {latency['p95']:.4f}  P99 {latency['p99']:.4f}")

        if metrics.get('selectivity'):
            print(f"\n{'Metric':<10} {'Clauses':<9} {'Mean sel.':<11} {'Min':<8} {'Max':<8}")
            print(f"{'-'*50}")
            for metric in Metric:
                s = metrics['selectivity'].get(metric.value)
                if s is None:
                    continue
                print(f"{metric.value:<10} {s['clauses']:<9} {s['mean']:<11.1%} "
                      f"{s['min']:<8.1%} {s['max']:<8.1%}")

        if metrics.get('per_query'):
            ranked = sorted(metrics['per_query'], key=lambda r: r['ms'], reverse=True)
            print("\nSlowest queries:")
            for record in ranked[:slowest]:
                print(f"  {record['ms']:.4f} ms  {record['matches']:>6} hits "
                      f"({record['selectivity']:.1%})  {record['query']}")

        if 'throughput' in metrics:
            print(f"\nThroughput: {metrics['throughput']:.2f} queries/second")

        if 'memory' in metrics:
            memory = metrics['memory']
            print(f"\nProcess memory: {memory['process_mb']:.2f} MB")
            print(f"Fortune text:   {memory['text_bytes']} bytes")
            indexes = ", ".join(f"{k} {v}" for k, v in memory['index_bytes'].items())
            print(f"Metric indexes: {memory['index_total_bytes']} bytes ({indexes})")

        print(f"{'='*70}\n")
