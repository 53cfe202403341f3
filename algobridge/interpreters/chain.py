"""
Ordered interpreter chain: the single entry point for error interpretation.

Copyright (c) 2025 Graziano Labs Corp.
"""

from typing import Iterable, Optional, Tuple

from .base import ErrorInterpreter, NullInterpreter


class InterpreterChain(ErrorInterpreter):
    """
    First-match-wins dispatch over an ordered, read-only set of interpreters.

    The null interpreter is always the last entry, so every lookup ends in a
    match. More specific interpreters must be registered before more general
    ones; ordering and discovery are the registration step's job
    (see algobridge.runtime.registry).

    Example:
        chain = InterpreterChain([BridgingErrorInterpreter()])
        try:
            algorithm.call("on_data")
        except Exception as exc:
            raise chain.interpret(exc)
    """

    def __init__(self, interpreters: Iterable[ErrorInterpreter] = ()):
        entries = [
            interpreter for interpreter in interpreters
            if not isinstance(interpreter, NullInterpreter)
        ]
        entries.append(NullInterpreter.instance)
        self._interpreters: Tuple[ErrorInterpreter, ...] = tuple(entries)

    @classmethod
    def _view(cls, entries: Tuple[ErrorInterpreter, ...]) -> "InterpreterChain":
        view = cls.__new__(cls)
        view._interpreters = entries
        return view

    @property
    def interpreters(self) -> Tuple[ErrorInterpreter, ...]:
        return self._interpreters

    def can_interpret(self, error):
        return True

    def interpret(
        self,
        error: Optional[BaseException],
        next_interpreter: Optional[ErrorInterpreter] = None
    ) -> Optional[BaseException]:
        """
        Interpret ``error`` with the first interpreter that claims it.

        The matched interpreter receives a view of the entries after it as
        its ``next_interpreter``.

        Args:
            error: Any error value
            next_interpreter: Ignored; the chain supplies its own

        Returns:
            The rewritten error, or ``error`` unchanged
        """
        for index, interpreter in enumerate(self._interpreters):
            if interpreter.can_interpret(error):
                rest = self._view(self._interpreters[index + 1:])
                return interpreter.interpret(error, rest)
        # Unreachable while the null interpreter terminates the chain.
        return error

    def __len__(self) -> int:
        return len(self._interpreters)

    def __repr__(self) -> str:
        names = ", ".join(type(i).__name__ for i in self._interpreters)
        return f"InterpreterChain([{names}])"


def message_header(error: BaseException, separator: str = " ---> ") -> str:
    """
    One-line summary of an error and its causes, outermost first.

    Useful for log lines where the full interpreted message is too long.
    """
    parts = []
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current).splitlines()[0] if str(current) else ""
        parts.append(text or type(current).__name__)
        current = current.__cause__
    return separator.join(parts)
