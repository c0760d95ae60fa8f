"""Checkpoint ingestion for opstat."""

from opstat.data.dataset import Dataset
from opstat.data.reader import SnapshotReader, decode_counters, parse_block_number

__all__ = ["Dataset", "SnapshotReader", "decode_counters", "parse_block_number"]
