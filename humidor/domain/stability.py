"""Derived stability values. Recomputed on demand, never persisted."""

from dataclasses import dataclass
from typing import Any, ClassVar

from humidor.enums import Metric


@dataclass(frozen=True)
class StabilityScore:
    """How little one metric varied over a window: 1.0 is perfectly stable."""

    metric: Metric
    score: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"stability score must be within [0, 1], got {self.score}")


@dataclass(frozen=True)
class StabilityMetrics:
    """Temperature and humidity stability scores for one window."""

    temperature: float
    humidity: float

    IDEAL: ClassVar["StabilityMetrics"]

    def score(self, metric: Metric) -> StabilityScore:
        value = self.temperature if metric is Metric.TEMPERATURE else self.humidity
        return StabilityScore(metric=metric, score=value)

    def to_dict(self) -> dict[str, Any]:
        return {"temperature": self.temperature, "humidity": self.humidity}


StabilityMetrics.IDEAL = StabilityMetrics(temperature=1.0, humidity=1.0)


@dataclass(frozen=True)
class WindowSummary:
    """Min / max / mean of one metric over a window."""

    metric: Metric
    count: int
    minimum: float | None
    maximum: float | None
    mean: float | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric.value,
            "count": self.count,
            "min": self.minimum,
            "max": self.maximum,
            "mean": self.mean,
        }
