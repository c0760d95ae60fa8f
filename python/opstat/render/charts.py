"""PNG rendering of metric series and window rankings."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import structlog

from opstat.analysis.ranking import WindowRanking
from opstat.analysis.series import TimeSeries
from opstat.core.config import ChartConfig

logger = structlog.get_logger()


class ChartRenderer:
    """Draws already-derived series and rankings into image files."""

    def __init__(self, config: ChartConfig | None = None) -> None:
        self.config = config or ChartConfig()

    def _figure(self):
        return plt.subplots(figsize=(self.config.width, self.config.height), dpi=self.config.dpi)

    def _save(self, fig, filename: str) -> Path:
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.config.output_dir / filename
        fig.tight_layout()
        fig.savefig(path, format="png")
        plt.close(fig)
        logger.info("chart_written", path=str(path))
        return path

    def line_chart(
        self,
        series: Sequence[TimeSeries],
        title: str,
        x_label: str,
        y_label: str,
        filename: str,
        annotations: Sequence[tuple[str, int]] = (),
        moving_average: TimeSeries | None = None,
        counts: TimeSeries | None = None,
    ) -> Path:
        """Line chart of one or more series.

        Single-operation charts may add a moving-average overlay and the
        interval invocation counts on a secondary axis.
        """
        fig, ax = self._figure()
        for s in series:
            if s.empty:
                continue
            ax.plot(s.heights, s.values, linewidth=1, label=s.name)
        if moving_average is not None and not moving_average.empty:
            ax.plot(
                moving_average.heights,
                moving_average.values,
                color="black",
                linewidth=1.5,
                label=f"Moving AVG {moving_average.name}",
            )

        for label, height in annotations:
            ax.axvline(height, color="gray", linestyle="--", linewidth=0.8)
            ax.annotate(
                label,
                xy=(height, 1.0),
                xycoords=("data", "axes fraction"),
                rotation=90,
                va="top",
                ha="right",
                fontsize=8,
                color="gray",
            )

        ax.set_title(title)
        ax.set_xlabel(x_label)
        ax.set_ylabel(y_label)
        ax.grid(True, which="major", ls="-", alpha=0.3, color="gray")

        if counts is not None and not counts.empty:
            secondary = ax.twinx()
            secondary.plot(counts.heights, counts.values, color="red", linewidth=1, label="Count")
            secondary.set_ylabel("Count")
            secondary.legend(loc="upper right", fontsize=8)

        if ax.get_legend_handles_labels()[0]:
            ax.legend(loc="upper left", fontsize=8, ncol=2 if len(series) > 12 else 1)
        return self._save(fig, filename)

    def bar_chart(self, ranking: WindowRanking, title: str, y_label: str, filename: str) -> Path:
        fig, ax = self._figure()
        pairs = ranking.as_pairs()
        labels = [label for label, _ in pairs]
        values = [value for _, value in pairs]
        ax.bar(range(len(values)), values, color="teal")
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, rotation=60, ha="right", fontsize=8)
        ax.set_title(title)
        ax.set_ylabel(y_label)
        ax.grid(True, axis="y", ls="-", alpha=0.3, color="gray")
        return self._save(fig, filename)

    def pie_chart(self, ranking: WindowRanking, title: str, filename: str) -> Path:
        fig, ax = self._figure()
        shares = [(label, share) for label, share in ranking.shares() if share > 0]
        if shares:
            ax.pie(
                [share for _, share in shares],
                labels=[label for label, _ in shares],
                autopct="%1.1f%%",
                startangle=90,
                counterclock=False,
            )
        ax.set_title(title)
        ax.axis("equal")
        return self._save(fig, filename)
