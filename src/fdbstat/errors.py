"""Exceptions raised by the snapshot pipeline."""

from __future__ import annotations


class StatusError(Exception):
    """Base class; ``stage`` names the pipeline stage that failed."""

    stage = ""

    def __str__(self) -> str:
        msg = super().__str__()
        cause = self.__cause__
        if cause is not None:
            return f"{self.stage}: {msg}: {cause}"
        return f"{self.stage}: {msg}"


class ReadFailure(StatusError):
    """The atomic status read did not complete."""

    stage = "read"


class DecodeFailure(StatusError):
    """The status payload could not be decoded into the model."""

    stage = "decode"

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{message} at {path}" if path else message)
        self.path = path


class StatusKeyMissing(LookupError):
    """The reserved status key held no value."""
