"""
Error types raised by the inference engine.

Every failure surfaces as a ``SchemaInferenceError`` tagged with a kind.
Errors are wrapped with the stage, table and column being processed and
re-raised; the engine never retries and never returns partial output.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of inference failures."""
    STORE_UNAVAILABLE = "store_unavailable"   # Connection or initialisation failure
    QUERY_FAILED = "query_failed"             # A specific query failed
    SCHEMA_CHANGED = "schema_changed"         # Table or column vanished mid-pass


_NOT_FOUND_MARKERS = ("no such table", "no such column")
_UNAVAILABLE_MARKERS = ("unable to open database", "disk i/o error")


class SchemaInferenceError(Exception):
    """Failure of a profiling or inference pass."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        stage: Optional[str] = None,
        table: Optional[str] = None,
        column: Optional[str] = None,
        intent: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.message = message
        self.stage = stage
        self.table = table
        self.column = column
        self.intent = intent
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
        super().__init__(self._render())

    def _render(self) -> str:
        context = []
        if self.stage:
            context.append(f"stage={self.stage}")
        if self.table:
            context.append(f"table={self.table}")
        if self.column:
            context.append(f"column={self.column}")
        if self.intent:
            context.append(f"query={self.intent}")
        suffix = f" [{', '.join(context)}]" if context else ""
        return f"{self.kind.value}: {self.message}{suffix}"

    def with_context(
        self,
        stage: Optional[str] = None,
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> SchemaInferenceError:
        """Return a new error of the same kind wrapping this one with more context."""
        return SchemaInferenceError(
            kind=self.kind,
            message=self.message,
            stage=stage or self.stage,
            table=table or self.table,
            column=column or self.column,
            intent=self.intent,
            cause=self,
        )


def classify_store_error(exc: BaseException) -> ErrorKind:
    """Map a driver exception to an error kind by its message."""
    text = str(exc).lower()
    if any(marker in text for marker in _UNAVAILABLE_MARKERS):
        return ErrorKind.STORE_UNAVAILABLE
    if any(marker in text for marker in _NOT_FOUND_MARKERS):
        return ErrorKind.SCHEMA_CHANGED
    return ErrorKind.QUERY_FAILED


def wrap_error(
    exc: BaseException,
    message: str,
    stage: Optional[str] = None,
    table: Optional[str] = None,
    column: Optional[str] = None,
) -> SchemaInferenceError:
    """Wrap any exception raised during a stage into a SchemaInferenceError."""
    if isinstance(exc, SchemaInferenceError):
        return exc.with_context(stage=stage, table=table, column=column)
    return SchemaInferenceError(
        kind=classify_store_error(exc),
        message=message,
        stage=stage,
        table=table,
        column=column,
        cause=exc,
    )
