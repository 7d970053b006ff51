"""UI-agnostic line editing engine speaking the ed command language."""

__all__ = [
    "adapters",
    "buffer",
    "commands",
    "errors",
    "host",
    "regex",
    "runtime",
    "session",
]

__version__ = "0.1.0"
