"""
Interpreter contract and the terminal pass-through interpreter.

Copyright (c) 2025 Graziano Labs Corp.
"""

import sys
import traceback
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..errors import InvalidInterpretationError, InterpretedError, module_file


class ErrorInterpreter(ABC):
    """
    Recognizes one error kind and rewrites it into a richer diagnostic.

    Implementations must keep ``can_interpret`` a pure predicate that is safe
    on any value, and must raise ``InvalidInterpretationError`` from
    ``interpret`` when handed an error they do not claim.
    """

    # Sort key for registration; lower runs first.
    order: int = 0

    @abstractmethod
    def can_interpret(self, error: Optional[BaseException]) -> bool:
        """Return True iff this interpreter handles ``error``'s kind."""

    @abstractmethod
    def interpret(
        self,
        error: BaseException,
        next_interpreter: "ErrorInterpreter"
    ) -> BaseException:
        """
        Rewrite ``error``.

        Args:
            error: Error for which can_interpret() returned True
            next_interpreter: Rest of the chain, for inner errors

        Returns:
            A new error wrapping ``error`` as its cause, or ``error`` itself

        Raises:
            InvalidInterpretationError: If can_interpret(error) is False
        """

    def _require(self, error) -> None:
        if not self.can_interpret(error):
            raise InvalidInterpretationError(self, error)


class NullInterpreter(ErrorInterpreter):
    """Always matches and returns the error unchanged."""

    order = sys.maxsize
    instance: "NullInterpreter"

    def can_interpret(self, error):
        return True

    def interpret(self, error, next_interpreter=None):
        return error


NullInterpreter.instance = NullInterpreter()


def interpret_inner(
    error: BaseException,
    next_interpreter: Optional[ErrorInterpreter]
) -> BaseException:
    """Run ``error`` through ``next_interpreter`` when it claims it."""
    if next_interpreter is None or not next_interpreter.can_interpret(error):
        return error
    return next_interpreter.interpret(error, NullInterpreter.instance)


def describe(error: BaseException) -> str:
    """Headline for an error: rewritten text as-is, raw errors as 'Type: msg'."""
    if isinstance(error, InterpretedError):
        return str(error)
    text = str(error)
    name = type(error).__name__
    return f"{name}: {text}" if text else name


def format_frame(
    function: str,
    module: str,
    line: Optional[int],
    snippet: Optional[str] = None
) -> List[str]:
    """Render one embedded frame as 'at', optional source, and 'in' lines."""
    lines = [f"  at {function}"]
    if snippet:
        lines.append(f"    {snippet.strip()}")
    where = line if line is not None else "unknown"
    lines.append(f"  in {module_file(module)}: line {where}")
    return lines


def format_frames(
    frames: Iterable[traceback.FrameSummary],
    limit: Optional[int] = None
) -> List[str]:
    """Render FrameSummary entries in the order given, capped at ``limit``."""
    lines: List[str] = []
    for count, frame in enumerate(frames):
        if limit is not None and count >= limit:
            lines.append("  ...")
            break
        lines.extend(format_frame(
            frame.name, frame.filename, frame.lineno, frame.line
        ))
    return lines
