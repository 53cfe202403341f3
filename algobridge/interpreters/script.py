"""
Interpreters for failures raised by embedded code itself.

Copyright (c) 2025 Graziano Labs Corp.
"""

from typing import Optional

from ..errors import InterpretedError, ScriptError
from .base import ErrorInterpreter, format_frames


class ScriptErrorInterpreter(ErrorInterpreter):
    """
    Render a ScriptError as the script's exception plus its embedded frames.

    Frames are listed innermost first so the failing line is read first.
    Host frames never appear; ScriptError only records embedded ones.
    """

    order = 100

    def __init__(self, max_frames: Optional[int] = None):
        self.max_frames = max_frames

    def can_interpret(self, error):
        return type(error) is ScriptError

    def interpret(self, error, next_interpreter):
        self._require(error)
        lines = [self._headline(error)]
        lines.extend(self._details(error))
        lines.extend(format_frames(reversed(error.frames), self.max_frames))

        result = InterpretedError("\n".join(lines))
        result.__cause__ = error
        return result

    def _headline(self, error: ScriptError) -> str:
        inner = error.inner_error
        return f"{type(inner).__name__} : {inner}"

    def _details(self, error: ScriptError) -> list:
        return []


class ScriptKeyErrorInterpreter(ScriptErrorInterpreter):
    """ScriptError whose underlying error is a KeyError; adds a lookup hint."""

    order = 50

    def can_interpret(self, error):
        return (
            type(error) is ScriptError
            and isinstance(error.inner_error, KeyError)
        )

    def _headline(self, error):
        if not error.inner_error.args:
            return super()._headline(error)
        return f"KeyError : {error.inner_error.args[0]!r} not found in collection"

    def _details(self, error):
        return [
            "  Check that the key exists before indexing, "
            "e.g. `if key in collection:` or `collection.get(key)`"
        ]
