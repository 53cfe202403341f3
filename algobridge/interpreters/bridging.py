"""
Interpreter for host failures raised inside boundary-crossing calls.

The rendered message reads innermost first: what failed on the host side,
then the embedded call site, then the embedded callers that led there.

Example:
    ValueError: Value cannot be null. (Parameter 'key')
      at dotnet_error
        self.market_order(None, 1)
      in Test_Module.py: line 7
      at on_data
        self.dotnet_error()
      in Test_Module.py: line 10

Copyright (c) 2025 Graziano Labs Corp.
"""

import traceback

from ..errors import BridgingError, InterpretedError
from .base import ErrorInterpreter, describe, format_frame, format_frames, interpret_inner


class BridgingErrorInterpreter(ErrorInterpreter):
    """Merge a BridgingError's host message with its embedded call site."""

    order = 0

    def __init__(self, include_host_stack: bool = False):
        """
        Args:
            include_host_stack: Append the host-side traceback of the inner
                error under a "Host stack:" header
        """
        self.include_host_stack = include_host_stack

    def can_interpret(self, error):
        return type(error) is BridgingError

    def interpret(self, error, next_interpreter):
        self._require(error)

        inner = interpret_inner(error.inner_error, next_interpreter)

        lines = [describe(inner)]
        lines.extend(format_frame(
            error.source_function,
            error.source_module,
            error.source_line,
            error.source_snippet
        ))
        lines.extend(format_frames(error.script_stack))

        if self.include_host_stack:
            host_tb = error.inner_error.__traceback__
            if host_tb is not None:
                lines.append("Host stack:")
                lines.extend(
                    entry.rstrip("\n")
                    for entry in traceback.format_tb(host_tb)
                )

        result = InterpretedError("\n".join(lines))
        result.__cause__ = error
        return result
