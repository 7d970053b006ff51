"""Textual front end; the app itself needs the ``textual`` extra."""

from .controller import TextualEdAdapter, TextualUIHooks

__all__ = ["TextualEdAdapter", "TextualUIHooks"]
