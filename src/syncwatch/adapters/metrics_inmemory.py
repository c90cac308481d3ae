"""In-memory implementation of MetricsPort.

Keeps every counter sample in emission order. Suitable for tests and for the
`/metrics` endpoint of a single-process deployment; replace with a real
metrics backend for anything long-lived.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from syncwatch.core.models.metrics import CounterSample

TagKey = Tuple[Tuple[str, str], ...]


class InMemoryMetricsAdapter:
    def __init__(self) -> None:
        self._samples: List[CounterSample] = []

    def counter(self, name: str, value: int, tags: Optional[Dict[str, str]] = None) -> None:
        self._samples.append(CounterSample(name=name, value=value, tags=dict(tags or {})))

    @property
    def samples(self) -> List[CounterSample]:
        return list(self._samples)

    def totals(self) -> Dict[Tuple[str, TagKey], int]:
        """Sum of all samples per (name, tags)."""
        totals: Dict[Tuple[str, TagKey], int] = {}
        for sample in self._samples:
            key = (sample.name, tuple(sorted(sample.tags.items())))
            totals[key] = totals.get(key, 0) + sample.value
        return totals
