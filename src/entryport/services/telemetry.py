"""Timing spans for export and import runs.

Telemetry is off unless the CLI runs with ``--verbose``. When on, every
``@traced`` service call records a span tree (the call itself plus the
pipeline phases opened with :func:`trace_span`) and attaches it to the
result as ``meta["telemetry"]``. Traced calls also bind ``operation`` into
the structlog context so every log line of the run names its operation.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from entryport.services.result import ServiceResult

_log = structlog.get_logger("entryport.telemetry")

_enabled: ContextVar[bool] = ContextVar("entryport_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("entryport_active_span", default=None)


@dataclass
class Span:
    """One timed phase; children are the phases opened while it was active."""

    name: str
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def finish(self) -> None:
        if self.finished is None:
            self.finished = time.perf_counter()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def enable_telemetry() -> None:
    """Turn span recording on for the current context."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


@contextmanager
def _activate(span: Span) -> Iterator[Span]:
    parent = _active.get()
    if parent is not None:
        parent.children.append(span)
    token = _active.set(span)
    try:
        yield span
    except Exception as exc:
        span.annotate("error", type(exc).__name__)
        raise
    finally:
        span.finish()
        _active.reset(token)


@contextmanager
def trace_span(name: str, **annotations: Any) -> Iterator[Span | None]:
    """Time a pipeline phase inside a traced call.

    Yields ``None`` when telemetry is off or no traced call is running, so
    callers guard their ``annotate`` calls with ``if span``.
    """
    if not _enabled.get() or _active.get() is None:
        yield None
        return
    with _activate(Span(name=name, annotations=dict(annotations))) as span:
        yield span


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record a span for a service call and attach the tree to its result.

    A traced call made inside another traced call becomes a child span and
    leaves the result's meta alone; only the outermost call reports.
    """
    operation = func.__qualname__

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        with structlog.contextvars.bound_contextvars(operation=operation):
            if not _enabled.get():
                return func(*args, **kwargs)

            outermost = _active.get() is None
            with _activate(Span(name=operation)) as span:
                result = func(*args, **kwargs)
                if isinstance(result, ServiceResult) and result.error is not None:
                    span.annotate("error", str(result.error.code))

            _log.debug(
                "telemetry.span",
                span=operation,
                duration_ms=round(span.duration_ms, 2),
                phases=[child.name for child in span.children],
            )
            if outermost and isinstance(result, ServiceResult):
                meta = {**(result.meta or {}), "telemetry": span.to_dict()}
                return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
            return result

    return wrapper
