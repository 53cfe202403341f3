"""
Error taxonomy for algobridge.

Error code ranges:
- E001-E099: Interpreter contract errors
- E100-E199: Embedded script errors
- E200-E299: Boundary-crossing (host) errors
- E300-E399: Interpreter registration errors

Copyright (c) 2025 Graziano Labs Corp.
"""

import traceback
from typing import Optional, Sequence


class AlgoBridgeError(Exception):
    """Base class for all algobridge errors."""

    def __init__(
        self,
        code: str,
        message: str,
        loc: tuple[int, int] | None = None,
        hint: str | None = None
    ):
        """
        Initialize algobridge error.

        Args:
            code: Error code (e.g., "E001")
            message: Human-readable error message
            loc: Optional (line, column) location
            hint: Optional suggestion for fixing the error
        """
        self.code = code
        self.message = message
        self.loc = loc
        self.hint = hint
        super().__init__(f"[{code}] {message}")


class InvalidInterpretationError(AlgoBridgeError):
    """Interpreter invoked on an error it cannot interpret (E001-E099)."""

    def __init__(self, interpreter, error):
        super().__init__(
            code="E001",
            message=(
                f"{type(interpreter).__name__} cannot interpret "
                f"{type(error).__name__}"
            ),
            hint="Check can_interpret() before calling interpret()"
        )
        self.interpreter = interpreter
        self.error = error


class ScriptLoadError(AlgoBridgeError):
    """Embedded algorithm source failed to compile (E101)."""
    pass


class ScriptError(AlgoBridgeError):
    """
    Failure raised by embedded code itself (E100).

    Carries the original exception and the embedded frames of its
    traceback, outermost first (the order Python prints them).
    """

    def __init__(
        self,
        inner_error: BaseException,
        module_name: str,
        frames: Sequence[traceback.FrameSummary] = ()
    ):
        if inner_error is None:
            raise ValueError("ScriptError requires the original error")
        self._inner_error = inner_error
        self._module_name = module_name
        self._frames = tuple(frames)
        last = self._frames[-1] if self._frames else None
        super().__init__(
            code="E100",
            message=_describe(inner_error),
            loc=(last.lineno, 0) if last is not None and last.lineno else None
        )

    @property
    def inner_error(self) -> BaseException:
        return self._inner_error

    @property
    def module_name(self) -> str:
        return self._module_name

    @property
    def frames(self) -> tuple[traceback.FrameSummary, ...]:
        return self._frames


class BridgingError(AlgoBridgeError):
    """
    Host-native failure raised inside a call made from embedded code (E200).

    Created at the boundary-crossing call site. The provenance fields
    describe the embedded frame that made the call; ``script_stack`` holds
    the embedded frames that led there, innermost first. All fields are
    read-only.
    """

    def __init__(
        self,
        inner_error: BaseException,
        source_module: str,
        source_function: str,
        source_line: Optional[int] = None,
        source_snippet: Optional[str] = None,
        script_stack: Sequence[traceback.FrameSummary] = ()
    ):
        if inner_error is None:
            raise ValueError("BridgingError requires the original host error")
        if source_line is not None and source_line < 0:
            raise ValueError(f"source_line must be >= 0, got {source_line}")

        self._inner_error = inner_error
        self._source_module = source_module
        self._source_function = source_function
        self._source_line = source_line
        self._source_snippet = (source_snippet or "").strip() or None
        self._script_stack = tuple(script_stack)

        super().__init__(
            code="E200",
            message=_describe(inner_error),
            loc=(source_line, 0) if source_line is not None else None
        )
        self.__cause__ = inner_error

    @property
    def inner_error(self) -> BaseException:
        return self._inner_error

    @property
    def source_module(self) -> str:
        return self._source_module

    @property
    def source_function(self) -> str:
        return self._source_function

    @property
    def source_line(self) -> Optional[int]:
        return self._source_line

    @property
    def source_snippet(self) -> Optional[str]:
        return self._source_snippet

    @property
    def script_stack(self) -> tuple[traceback.FrameSummary, ...]:
        return self._script_stack

    @property
    def source_file(self) -> str:
        """File name the embedded module was loaded under."""
        return module_file(self._source_module)


class RegistryError(AlgoBridgeError):
    """Interpreter registration and configuration errors (E300-E399)."""
    pass


class InterpretedError(Exception):
    """
    Generic diagnostic produced by an interpreter.

    ``str()`` is the merged message; ``__cause__`` is the error it was built
    from. No interpreter claims this kind, so interpreting it again is a
    no-op.
    """
    pass


def module_file(module_name: str) -> str:
    """Map an embedded module name to the file name shown in diagnostics."""
    if module_name.endswith(".py"):
        return module_name
    return module_name.replace(".", "/") + ".py"


def _describe(error: BaseException) -> str:
    text = str(error)
    name = type(error).__name__
    return f"{name}: {text}" if text else name


# Specific error codes documentation:
#
# E001: Interpreter called on an error kind it does not handle
# E100: Embedded code raised while running
# E101: Embedded source failed to compile
# E200: Host function called from embedded code raised
# E300: Interpreter class could not be imported or instantiated
# E301: Interpreter registry file is invalid
