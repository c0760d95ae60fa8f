"""Delta, metric, series and ranking computations."""

from opstat.analysis.delta import counter_delta, delta
from opstat.analysis.metrics import METRICS, Metric, PricedDelta, capped, get_metric
from opstat.analysis.ranking import ExclusionReason, WindowAggregator, WindowRanking
from opstat.analysis.series import SeriesBuilder, TimeSeries, min_filter

__all__ = [
    "counter_delta",
    "delta",
    "METRICS",
    "Metric",
    "PricedDelta",
    "capped",
    "get_metric",
    "ExclusionReason",
    "WindowAggregator",
    "WindowRanking",
    "SeriesBuilder",
    "TimeSeries",
    "min_filter",
]
