"""Exception hierarchy for opstat."""

from __future__ import annotations


class OpstatError(Exception):
    """Base class for all opstat errors."""


class DecodeError(OpstatError):
    """A checkpoint's counter table could not be decoded."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class MissingHeightError(OpstatError, KeyError):
    """A block height was requested that the dataset does not hold."""

    def __init__(self, block_number: int) -> None:
        self.block_number = block_number
        super().__init__(block_number)

    def __str__(self) -> str:
        return f"no snapshot at block {self.block_number}"


class ConfigError(OpstatError, ValueError):
    """Invalid configuration."""
