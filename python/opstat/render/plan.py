"""Default chart set for a replay run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from opstat.analysis.metrics import TIME_MS, TIME_PER_GAS, COUNT, Metric, capped
from opstat.analysis.ranking import WindowAggregator
from opstat.analysis.series import SeriesBuilder, SeriesFilter, min_filter
from opstat.core import opcodes
from opstat.core.config import OpstatConfig
from opstat.core.opcodes import OpCode
from opstat.data.dataset import Dataset
from opstat.render.charts import ChartRenderer
from opstat.schedule.fees import FeeSchedule

logger = structlog.get_logger()


@dataclass(frozen=True)
class ChartSpec:
    filename: str
    title: str
    ops: tuple[int, ...]
    metric: Metric
    y_label: str = "Milliseconds"
    x_label: str = "Blocknumber"
    series_filter: SeriesFilter | None = None
    from_block: int = 0


def default_plan() -> list[ChartSpec]:
    ms_per_mgas = "Milliseconds per Mgas"
    return [
        ChartSpec("timespent.png", "Time spent", opcodes.ALL_OPS, TIME_MS),
        ChartSpec(
            "timespentCapped.png",
            "Time spent",
            opcodes.ALL_OPS,
            capped(TIME_MS, 100_000),
            series_filter=min_filter(45_000),
            from_block=3_220_000,
        ),
        ChartSpec(
            "arithmetics.png",
            f"{ms_per_mgas} (0x00 opcodes - Arithmetic)",
            opcodes.ARITHMETIC_OPS,
            TIME_PER_GAS,
        ),
        ChartSpec(
            "arithmetics_cap.png",
            f"{ms_per_mgas} (0x00 opcodes - Arithmetic) - capped",
            opcodes.ARITHMETIC_OPS,
            capped(TIME_PER_GAS, 250),
        ),
        ChartSpec(
            "comparison_cap.png",
            f"{ms_per_mgas} (0x10 opcodes - Comparison)",
            opcodes.COMPARISON_OPS,
            capped(TIME_PER_GAS, 250),
        ),
        ChartSpec("sha3.png", "Time spent on (0x30 opcodes - SHA3)", (OpCode.SHA3,), TIME_MS),
        ChartSpec(
            "context1.png",
            f"{ms_per_mgas} (0x30 opcodes - Context, part 1)",
            opcodes.CONTEXT_OPS_1,
            capped(TIME_PER_GAS, 500),
        ),
        ChartSpec(
            "context2.png",
            f"{ms_per_mgas} (0x30 opcodes - Context, part 2)",
            opcodes.CONTEXT_OPS_2,
            capped(TIME_PER_GAS, 500),
        ),
        ChartSpec(
            "blockops_cap.png",
            f"{ms_per_mgas} (0x40 opcodes - Block ops)",
            opcodes.BLOCK_OPS,
            capped(TIME_PER_GAS, 600),
        ),
        ChartSpec(
            "blockhash.png",
            f"{ms_per_mgas} (BLOCKHASH)",
            (OpCode.BLOCKHASH,),
            capped(TIME_PER_GAS, 3000),
        ),
        ChartSpec(
            "storage1.png",
            f"{ms_per_mgas} (0x50 Storage and execution - part 1)",
            opcodes.STORAGE_OPS,
            capped(TIME_PER_GAS, 3000),
        ),
        ChartSpec(
            "range60.png",
            f"{ms_per_mgas} (0x60 Pops, Swaps, Dups)",
            opcodes.STACK_OPS,
            capped(TIME_PER_GAS, 600),
        ),
        ChartSpec(
            "range60p2.png",
            f"{ms_per_mgas} (0x60 Pops, Swaps, Dups) - capped at 100",
            opcodes.STACK_OPS,
            capped(TIME_PER_GAS, 100),
        ),
        ChartSpec(
            "logging.png", "Time spent on log operations (0x70 LOG)", opcodes.LOG_OPS, TIME_MS
        ),
        ChartSpec("sload.png", f"{ms_per_mgas} (SLOAD)", (OpCode.SLOAD,), TIME_PER_GAS),
        ChartSpec("balance.png", f"{ms_per_mgas} (BALANCE)", (OpCode.BALANCE,), TIME_PER_GAS),
    ]


class ChartPlanRunner:
    """Derives and renders every chart of a plan from one dataset."""

    def __init__(
        self,
        dataset: Dataset,
        config: OpstatConfig,
        schedule: FeeSchedule | None = None,
    ) -> None:
        self.dataset = dataset
        self.config = config
        self.schedule = schedule or FeeSchedule.mainnet(config.forks)
        self.builder = SeriesBuilder(
            dataset,
            self.schedule,
            threshold=config.analysis.activity_threshold,
            include_restarts=config.analysis.include_restarts,
        )
        self.renderer = ChartRenderer(config.charts)

    def _annotations(self) -> list[tuple[str, int]]:
        if not self.config.charts.annotate_forks:
            return []
        return self.config.forks.annotations()

    def render(self, spec: ChartSpec) -> Path:
        series = self.builder.build_many(spec.ops, spec.metric, spec.from_block, spec.series_filter)
        moving_average = None
        counts = None
        if len(spec.ops) == 1 and series:
            moving_average = series[0].moving_average(self.config.analysis.moving_average_window)
            counts = self.builder.build(spec.ops[0], COUNT, spec.from_block)
        return self.renderer.line_chart(
            series,
            spec.title,
            spec.x_label,
            spec.y_label,
            spec.filename,
            annotations=self._annotations(),
            moving_average=moving_average,
            counts=counts,
        )

    def render_all(self, plan: list[ChartSpec] | None = None) -> list[Path]:
        paths = [self.render(spec) for spec in plan or default_plan()]
        logger.info("charts_rendered", count=len(paths))
        return paths

    def render_window(
        self,
        start: int | None,
        end: int,
        metric: Metric = TIME_PER_GAS,
        top_n: int | None = 20,
    ) -> list[Path]:
        """Bar and pie summaries of one window ranking."""
        ranking = WindowAggregator(self.dataset, self.schedule).rank(start, end, metric, top_n)
        window = f"{start or 0}-{end}"
        return [
            self.renderer.bar_chart(
                ranking,
                f"{metric.label} by opcode, blocks {window}",
                metric.unit,
                f"rank_{metric.name}_{window}.png",
            ),
            self.renderer.pie_chart(
                ranking,
                f"Share of {metric.label.lower()}, blocks {window}",
                f"share_{metric.name}_{window}.png",
            ),
        ]
