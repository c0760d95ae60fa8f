"""CLI entry point for opstat."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
import structlog

from opstat.core.config import OpstatConfig
from opstat.core.errors import OpstatError

app = typer.Typer(
    name="opstat",
    help="Fork-aware opcode performance analysis of replay checkpoints",
)

ConfigOption = typer.Option(
    Path("opstat.yaml"),
    "--config", "-c",
    help="Path to configuration file",
)
LogLevelOption = typer.Option(None, "--log-level", help="Override the configured log level")


def _setup(config_path: Path, log_level: Optional[str]) -> OpstatConfig:
    try:
        config = OpstatConfig.load(config_path)
    except OpstatError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    level = (log_level or config.log_level).upper()
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
    return config


def _load(config: OpstatConfig, data_dir: Optional[Path]):
    from opstat.data.reader import SnapshotReader

    try:
        dataset = SnapshotReader(config.data).load(data_dir or config.data.metrics_dir)
    except (OpstatError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if not len(dataset):
        typer.echo("No checkpoint files found", err=True)
        raise typer.Exit(1)
    return dataset


@app.command()
def info(
    data_dir: Optional[Path] = typer.Argument(None, help="Directory of checkpoint files"),
    config_path: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Summarize the checkpoints of a replay run."""
    from opstat.analysis.delta import snapshot_deltas

    config = _setup(config_path, log_level)
    dataset = _load(config, data_dir)

    restarts = [
        later.block_number
        for earlier, later in dataset.pairs()
        if any(d.restarted for d in snapshot_deltas(later, earlier))
    ]
    gaps = dataset.gaps()

    typer.echo(f"Checkpoints: {len(dataset)}")
    typer.echo(f"Blocks: {dataset.first.block_number} - {dataset.last.block_number}")
    if gaps:
        typer.echo(f"Interval: min {min(gaps):,} / max {max(gaps):,} blocks")
    typer.echo(f"Invocations: {dataset.last.total_count:,}")
    typer.echo(f"Exec time: {dataset.last.total_exec_time / 1e9:,.2f} s")
    typer.echo(f"Restarts: {', '.join(map(str, restarts)) if restarts else 'none'}")


@app.command()
def series(
    data_dir: Optional[Path] = typer.Argument(None, help="Directory of checkpoint files"),
    op: str = typer.Option(..., "--op", help="Opcode mnemonic or number"),
    metric: Optional[str] = typer.Option(None, "--metric", "-m"),
    from_block: int = typer.Option(0, "--from-block"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t"),
    config_path: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Print one opcode's metric series."""
    from opstat.analysis.metrics import get_metric
    from opstat.analysis.series import SeriesBuilder
    from opstat.core.opcodes import opcode_name, parse_opcode
    from opstat.schedule.fees import FeeSchedule

    config = _setup(config_path, log_level)
    try:
        opcode = parse_opcode(op)
        chosen = get_metric(metric or config.analysis.default_metric)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    dataset = _load(config, data_dir)

    builder = SeriesBuilder(
        dataset,
        FeeSchedule.mainnet(config.forks),
        threshold=config.analysis.activity_threshold if threshold is None else threshold,
        include_restarts=config.analysis.include_restarts,
    )
    result = builder.build(opcode, chosen, from_block)

    typer.echo(f"{opcode_name(opcode)} {chosen.label} ({chosen.unit})")
    for height, value in result.points():
        typer.echo(f"{int(height)}\t{value:.6g}")
    if result.empty:
        typer.echo("No interval above the activity threshold", err=True)


@app.command()
def rank(
    data_dir: Optional[Path] = typer.Argument(None, help="Directory of checkpoint files"),
    end: int = typer.Option(..., "--end", "-e", help="Window end block"),
    start: Optional[int] = typer.Option(None, "--start", "-s", help="Window start block"),
    metric: Optional[str] = typer.Option(None, "--metric", "-m"),
    top: Optional[int] = typer.Option(None, "--top", "-n"),
    group: str = typer.Option("all", "--group", "-g", help="Opcode group to rank"),
    config_path: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Rank opcodes by a metric over a block window."""
    from opstat.analysis.metrics import get_metric
    from opstat.analysis.ranking import WindowAggregator
    from opstat.core.opcodes import GROUPS
    from opstat.schedule.fees import FeeSchedule

    config = _setup(config_path, log_level)
    try:
        chosen = get_metric(metric or config.analysis.default_metric)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    if group not in GROUPS:
        typer.echo(f"Error: unknown group {group!r}, choose from {', '.join(GROUPS)}", err=True)
        raise typer.Exit(2)
    dataset = _load(config, data_dir)

    aggregator = WindowAggregator(dataset, FeeSchedule.mainnet(config.forks))
    try:
        ranking = aggregator.rank(start, end, chosen, top, ops=GROUPS[group])
    except (OpstatError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{chosen.label} ({chosen.unit}), blocks {start or 0} - {end}")
    for position, (label, value) in enumerate(ranking.as_pairs(), start=1):
        typer.echo(f"{position:>3}. {label:<16} {value:.6g}")
    typer.echo(f"Excluded: {len(ranking.excluded)}")


@app.command()
def charts(
    data_dir: Optional[Path] = typer.Argument(None, help="Directory of checkpoint files"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Chart output directory"),
    rank_start: Optional[int] = typer.Option(None, "--rank-start"),
    rank_end: Optional[int] = typer.Option(None, "--rank-end", help="Also render window rankings"),
    config_path: Path = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Render the default chart set."""
    from opstat.render.plan import ChartPlanRunner

    config = _setup(config_path, log_level)
    if output_dir is not None:
        config.charts.output_dir = output_dir
    dataset = _load(config, data_dir)

    runner = ChartPlanRunner(dataset, config)
    paths = runner.render_all()
    if rank_end is not None:
        try:
            paths.extend(runner.render_window(rank_start, rank_end))
        except (OpstatError, ValueError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    typer.echo(f"Wrote {len(paths)} charts to {config.charts.output_dir}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
