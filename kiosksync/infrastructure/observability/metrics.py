"""In-process metrics for sync passes.

Counters and histograms live in a module-level registry. They are cheap
enough to update on every pass and can be dumped as a dictionary or in the
Prometheus text format.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Mapping

LabelKey = tuple[tuple[str, str], ...]


def _label_key(labels: Mapping[str, str] | None) -> LabelKey:
    if not labels:
        return ()
    return tuple(sorted((k, str(v)) for k, v in labels.items()))


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _label_text(key: LabelKey, quoted: bool = False) -> str:
    if quoted:
        return ",".join(f'{k}="{_escape_label_value(v)}"' for k, v in key)
    return ",".join(f"{k}={v}" for k, v in key) if key else "default"


@dataclass
class Counter:
    """Monotonic counter keyed by label set."""

    name: str
    help_text: str = ""
    _values: dict[LabelKey, float] = field(default_factory=lambda: defaultdict(float))
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def inc(self, value: float = 1.0, labels: Mapping[str, str] | None = None) -> None:
        with self._lock:
            self._values[_label_key(labels)] += value

    def get(self, labels: Mapping[str, str] | None = None) -> float:
        with self._lock:
            return self._values.get(_label_key(labels), 0.0)

    def items(self) -> list[tuple[LabelKey, float]]:
        with self._lock:
            return list(self._values.items())


@dataclass
class Histogram:
    """Keeps count and sum of observations per label set."""

    name: str
    help_text: str = ""
    _totals: dict[LabelKey, list[float]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def observe(self, value: float, labels: Mapping[str, str] | None = None) -> None:
        with self._lock:
            totals = self._totals.setdefault(_label_key(labels), [0.0, 0.0])
            totals[0] += 1
            totals[1] += value

    def stats(self, labels: Mapping[str, str] | None = None) -> dict[str, float]:
        with self._lock:
            count, total = self._totals.get(_label_key(labels), (0.0, 0.0))
        return {"count": count, "sum": total, "avg": total / count if count else 0.0}

    def label_keys(self) -> list[LabelKey]:
        with self._lock:
            return list(self._totals)


class MetricRegistry:
    """Named counters and histograms, created on first use."""

    def __init__(self) -> None:
        self._counters: dict[str, Counter] = {}
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, help_text: str = "") -> Counter:
        with self._lock:
            return self._counters.setdefault(name, Counter(name, help_text))

    def histogram(self, name: str, help_text: str = "") -> Histogram:
        with self._lock:
            return self._histograms.setdefault(name, Histogram(name, help_text))

    def counters(self) -> dict[str, Counter]:
        with self._lock:
            return dict(self._counters)

    def histograms(self) -> dict[str, Histogram]:
        with self._lock:
            return dict(self._histograms)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


_registry = MetricRegistry()


def get_registry() -> MetricRegistry:
    return _registry


def increment_counter(
    name: str,
    value: float = 1.0,
    labels: Mapping[str, str] | None = None,
    help_text: str = "",
) -> None:
    _registry.counter(name, help_text).inc(value, labels)


def observe_histogram(
    name: str,
    value: float,
    labels: Mapping[str, str] | None = None,
    help_text: str = "",
) -> None:
    _registry.histogram(name, help_text).observe(value, labels)


SYNC_PASSES = "sync_passes_total"
SYNC_PASS_DURATION = "sync_pass_duration_seconds"
SYNC_ITEMS_COMMITTED = "sync_items_committed_total"
SYNC_RECORDS_SKIPPED = "sync_records_skipped_total"


def record_sync_pass(auction_id: str, status: str, duration: float, items: int) -> None:
    """Record one finished pass, successful or not."""
    increment_counter(
        SYNC_PASSES,
        labels={"auction_id": auction_id, "status": status},
        help_text="Total sync passes",
    )
    observe_histogram(
        SYNC_PASS_DURATION,
        duration,
        labels={"auction_id": auction_id},
        help_text="Sync pass duration in seconds",
    )
    if status == "success":
        increment_counter(
            SYNC_ITEMS_COMMITTED,
            value=float(items),
            labels={"auction_id": auction_id},
            help_text="Items committed by successful passes",
        )


def record_skipped_records(auction_id: str, count: int) -> None:
    if count <= 0:
        return
    increment_counter(
        SYNC_RECORDS_SKIPPED,
        value=float(count),
        labels={"auction_id": auction_id},
        help_text="Raw records dropped because they could not be decoded",
    )


def get_metrics_summary() -> dict[str, object]:
    """Return all metrics as nested dictionaries."""
    counters = {
        name: {_label_text(key): value for key, value in counter.items()}
        for name, counter in _registry.counters().items()
    }
    histograms = {
        name: {_label_text(key): histogram.stats(dict(key)) for key in histogram.label_keys()}
        for name, histogram in _registry.histograms().items()
    }
    return {"counters": counters, "histograms": histograms}


def format_prometheus() -> str:
    """Render the registry in Prometheus text exposition format."""
    lines: list[str] = []
    for name, counter in _registry.counters().items():
        if counter.help_text:
            lines.append(f"# HELP {name} {counter.help_text}")
        lines.append(f"# TYPE {name} counter")
        for key, value in counter.items():
            labels = f"{{{_label_text(key, quoted=True)}}}" if key else ""
            lines.append(f"{name}{labels} {value}")
    for name, histogram in _registry.histograms().items():
        if histogram.help_text:
            lines.append(f"# HELP {name} {histogram.help_text}")
        # Only count and sum are kept, which is the summary type without quantiles.
        lines.append(f"# TYPE {name} summary")
        for key in histogram.label_keys():
            stats = histogram.stats(dict(key))
            labels = f"{{{_label_text(key, quoted=True)}}}" if key else ""
            lines.append(f"{name}_count{labels} {stats['count']}")
            lines.append(f"{name}_sum{labels} {stats['sum']}")
    return "\n".join(lines)


__all__ = [
    "Counter",
    "Histogram",
    "MetricRegistry",
    "SYNC_ITEMS_COMMITTED",
    "SYNC_PASSES",
    "SYNC_PASS_DURATION",
    "SYNC_RECORDS_SKIPPED",
    "format_prometheus",
    "get_metrics_summary",
    "get_registry",
    "increment_counter",
    "observe_histogram",
    "record_skipped_records",
    "record_sync_pass",
]
