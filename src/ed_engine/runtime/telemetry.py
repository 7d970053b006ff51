"""Telemetry services built directly on telelog.

The editor writes its data (printed lines, byte counts, ``?``) to stdout, so
the console sink stays off unless ``ED_ENGINE_LOG_CONSOLE`` is set; records
go to ``ED_ENGINE_LOG_FILE`` when one is named.

``get_logger(name)`` -- fetch (and cache) a configured logger
``record_event(name, ...)`` -- emit structured events at a chosen level
``span(name, ...)`` -- profile a block, optionally tracked as a component
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "ED_ENGINE_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "ed_engine")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None
# Names of the spans currently open, outermost first.
_OPEN_SPANS: list[str] = []


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str) -> bool:
    raw = _env(name)
    return raw is not None and raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _format_pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _stringify(value)) for key, value in data.items()]


def build_config() -> Any:
    """Build a ``tl.Config`` from the ``ED_ENGINE_LOG_*`` environment."""

    config = tl.Config()
    config.with_min_level((_env("LOG_LEVEL") or "WARNING").upper())
    config.with_console_output(_env_flag("LOG_CONSOLE"))
    if _env_flag("LOG_CONSOLE"):
        config.with_colored_output(not _env_flag("NO_COLOR"))
    if _env_flag("LOG_JSON"):
        config.with_json_format(True)
    log_file = _env("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)
    if _env_flag("LOG_BUFFERED"):
        config.with_buffering(True)
        config.with_buffer_size(int(_env("LOG_BUFFER_SIZE") or "2048"))
    # Profiling records every command span; keep it opt-in for scripted runs.
    config.with_profiling(_env_flag("PROFILE"))
    return config


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger`` configured for this engine."""

    global _ACTIVE_CONFIG
    if _ACTIVE_CONFIG is None:
        _ACTIVE_CONFIG = build_config()
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(logger_name, _ACTIVE_CONFIG)
    return _LOGGER_CACHE[logger_name]


def _resolve_level_method(logger: Any, level: Any) -> Tuple[Any, bool]:
    name = str(level).lower()
    with_attr = getattr(logger, f"{name}_with", None)
    if with_attr is not None:
        return with_attr, True
    attr = getattr(logger, name, None)
    if attr is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return attr, False


def _log(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, accepts_data = _resolve_level_method(logger, level)
    if accepts_data:
        method(message, _format_pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit a structured ``event::<name>`` record."""

    _log(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Handle returned from ``span``; metadata set here rides on its records."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _emit(self, level: str, message: str, reason: Optional[str]) -> None:
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if reason:
            payload["reason"] = reason
        _log(self.logger, level, message, payload)

    def fail(self, reason: str) -> None:
        self._emit("error", "span::fail", reason)

    def cancel(self, reason: Optional[str] = None) -> None:
        self._emit("warning", "span::cancel", reason)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a code block and (optionally) track it as a component.

    ``metadata`` is added to the logger context for the duration of the
    block. Keys of nested spans get a ``.<depth>`` suffix so an inner span
    never removes what an outer one added. Editor errors (``EdError``) are
    reported through ``cancel``; any other exception through ``fail``.
    """

    from ed_engine.errors import EdError

    log = get_logger(logger_name)
    component_name = name if component is True else component or None
    depth = len(_OPEN_SPANS)
    _OPEN_SPANS.append(name)

    payload = {key: _stringify(value) for key, value in (metadata or {}).items()}
    context_keys = [key if depth == 0 else f"{key}.{depth}" for key in payload]
    try:
        for context_key, value in zip(context_keys, payload.values()):
            log.add_context(context_key, value)
        with ExitStack() as stack:
            if component_name:
                stack.enter_context(log.track_component(component_name))
            stack.enter_context(log.profile(name))
            handle = SpanHandle(
                logger=log,
                span_name=name,
                component_name=component_name,
                metadata=dict(payload),
            )
            try:
                yield handle
            except EdError as exc:
                handle.cancel(exc.message)
                raise
            except Exception as exc:
                handle.fail(str(exc))
                raise
    finally:
        for context_key in context_keys:
            log.remove_context(context_key)
        del _OPEN_SPANS[depth:]


__all__ = [
    "SpanHandle",
    "build_config",
    "get_logger",
    "record_event",
    "span",
]
