"""
Secondary ordering implementation
One sorted view per derived metric, holding positions into the corpus
"""

from typing import Optional, Sequence
import numpy as np

from .core import Metric


class MetricIndex:
    """
    Entries of a corpus sorted by one metric.

    Only positions are stored, never entries. ``values[k]`` is the metric
    value of the entry at ``positions[k]``; the pairs are sorted by
    (value, position) so equal values keep insertion order.
    """

    def __init__(self, metric: Metric, values: Sequence[int]):
        self.metric = metric
        raw = np.asarray(values, dtype=np.int64)
        # Stable sort keeps insertion order within equal values
        self.positions = np.argsort(raw, kind='stable')
        self.values = raw[self.positions]
        self.positions.flags.writeable = False
        self.values.flags.writeable = False

    def __len__(self) -> int:
        return len(self.positions)

    def _bounds(self, low: Optional[int], high: Optional[int]):
        """Slice [left, right) of the sorted arrays covering low..high inclusive"""
        left = 0 if low is None else int(
            np.searchsorted(self.values, low, side='left')
        )
        right = len(self.values) if high is None else int(
            np.searchsorted(self.values, high, side='right')
        )
        return left, max(left, right)

    def select(self, low: Optional[int] = None,
               high: Optional[int] = None) -> np.ndarray:
        """Positions with low <= value <= high, ascending by value"""
        left, right = self._bounds(low, high)
        return self.positions[left:right]

    def count(self, low: Optional[int] = None,
              high: Optional[int] = None) -> int:
        left, right = self._bounds(low, high)
        return right - left

    def min(self) -> Optional[int]:
        return int(self.values[0]) if len(self.values) else None

    def max(self) -> Optional[int]:
        return int(self.values[-1]) if len(self.values) else None
