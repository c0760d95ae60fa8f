"""Checkpoint file decoding and directory ingestion."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from opstat.core.config import DataConfig
from opstat.core.errors import DecodeError
from opstat.core.opcodes import NUM_OPCODES
from opstat.core.types import Counter, Snapshot
from opstat.data.dataset import Dataset

logger = structlog.get_logger()


class CounterRecord(BaseModel):
    """One entry of a checkpoint file.

    Checkpoints were written by serializing ``opMeter{Num, Time}`` records,
    so both the writer's field names and descriptive aliases are accepted.
    """

    model_config = ConfigDict(extra="ignore", strict=True)

    count: int = Field(
        ge=0,
        validation_alias=AliasChoices("Num", "num", "Count", "count", "invocationCount"),
    )
    exec_time: int = Field(
        ge=0,
        validation_alias=AliasChoices(
            "Time", "time", "ExecTime", "execTime", "cumulativeExecTimeNanoseconds"
        ),
    )


_RECORDS = TypeAdapter(list[CounterRecord])


def decode_counters(raw: bytes | str, source: str | None = None) -> tuple[Counter, ...]:
    """Decode a JSON array of exactly 256 counter records."""
    try:
        records = _RECORDS.validate_json(raw)
    except ValidationError as e:
        raise DecodeError(f"invalid counter table: {e.error_count()} error(s), "
                          f"first: {e.errors()[0]['msg']}", source) from e
    if len(records) != NUM_OPCODES:
        raise DecodeError(f"expected {NUM_OPCODES} records, got {len(records)}", source)
    return tuple(Counter(r.count, r.exec_time) for r in records)


def parse_block_number(name: str, prefix: str = "metrics_to") -> int | None:
    """Map ``metrics_to_4760000[.json]`` to 4760000, or None for other files."""
    match = re.fullmatch(rf"{re.escape(prefix)}_(\d+)(?:\.\w+)?", name)
    if match is None:
        return None
    return int(match.group(1))


class SnapshotReader:
    """Loads every checkpoint file of a directory into a Dataset."""

    def __init__(self, config: DataConfig | None = None) -> None:
        self.config = config or DataConfig()

    def checkpoint_files(self, directory: Path) -> Iterator[tuple[int, Path]]:
        if not directory.is_dir():
            raise FileNotFoundError(f"not a directory: {directory}")
        for path in sorted(directory.iterdir()):
            if not path.is_file():
                continue
            block_number = parse_block_number(path.name, self.config.file_prefix)
            if block_number is None:
                logger.debug("file_skipped", path=str(path))
                continue
            yield block_number, path

    def read(self, path: Path, block_number: int) -> Snapshot:
        counters = decode_counters(path.read_bytes(), source=path.name)
        return Snapshot(block_number, counters)

    def iter_snapshots(self, directory: Path) -> Iterator[Snapshot]:
        for block_number, path in self.checkpoint_files(directory):
            try:
                snapshot = self.read(path, block_number)
            except DecodeError as e:
                logger.error("decode_failed", path=str(path), error=str(e))
                if self.config.strict:
                    raise
                continue
            logger.debug("snapshot_loaded", block=block_number, path=str(path))
            yield snapshot

    def load(self, directory: Path | None = None) -> Dataset:
        """Decode all checkpoints, then merge them in a single step."""
        directory = directory or self.config.metrics_dir
        dataset = Dataset.from_snapshots(self.iter_snapshots(directory))
        logger.info(
            "dataset_loaded",
            directory=str(directory),
            snapshots=len(dataset),
            first=dataset.heights[0] if dataset.heights else None,
            last=dataset.heights[-1] if dataset.heights else None,
        )
        return dataset
