"""
Stability Analyzer
==================
Scores how steady temperature and humidity stayed over a window of readings.

score = clamp(1 - sigma / scale, 0, 1), with sigma the population standard
deviation of the window and ``scale`` the deviation treated as fully unstable
(5 °F for temperature, 10 % for humidity by default). Windows with fewer than
two readings score 1.0.
"""

from __future__ import annotations

import logging
import statistics
from typing import Iterable, Sequence

from humidor.domain import Reading, StabilityMetrics, WindowSummary
from humidor.enums import Metric

logger = logging.getLogger(__name__)


class StabilityAnalyzer:
    """Pure computations over reading windows; holds only its scales."""

    def __init__(self, temperature_scale: float = 5.0, humidity_scale: float = 10.0):
        if temperature_scale <= 0 or humidity_scale <= 0:
            raise ValueError("stability scales must be positive")
        self.scales = {
            Metric.TEMPERATURE: float(temperature_scale),
            Metric.HUMIDITY: float(humidity_scale),
        }

    def score(self, values: Iterable[float], metric: Metric) -> float:
        """Stability in [0, 1] for one metric's values."""
        values = [float(v) for v in values]
        if len(values) < 2:
            return 1.0
        raw = 1.0 - statistics.pstdev(values) / self.scales[metric]
        return max(0.0, min(1.0, raw))

    def analyze(self, readings: Sequence[Reading]) -> StabilityMetrics:
        if not readings:
            return StabilityMetrics.IDEAL
        metrics = StabilityMetrics(
            temperature=self.score((r.temperature_f for r in readings), Metric.TEMPERATURE),
            humidity=self.score((r.humidity_pct for r in readings), Metric.HUMIDITY),
        )
        logger.debug(
            "Stability over %d reading(s): temperature=%.3f humidity=%.3f",
            len(readings),
            metrics.temperature,
            metrics.humidity,
        )
        return metrics

    @staticmethod
    def summarize(readings: Sequence[Reading]) -> dict[Metric, WindowSummary]:
        """Min / max / mean per metric; ``None`` values for an empty window."""
        summaries = {}
        for metric in Metric:
            values = [r.value(metric) for r in readings]
            if values:
                summaries[metric] = WindowSummary(
                    metric=metric,
                    count=len(values),
                    minimum=min(values),
                    maximum=max(values),
                    mean=round(sum(values) / len(values), 2),
                )
            else:
                summaries[metric] = WindowSummary(metric=metric, count=0, minimum=None, maximum=None, mean=None)
        return summaries
