"""
Error interpretation pipeline.

Turns errors raised across the host/embedded boundary into readable
diagnostics:

- ErrorInterpreter: contract every interpreter implements
- NullInterpreter: terminal pass-through, always last in a chain
- BridgingErrorInterpreter: host failure raised from an embedded call
- ScriptErrorInterpreter / ScriptKeyErrorInterpreter: failures in embedded code
- InterpreterChain: ordered first-match dispatch, the public entry point
"""

from .base import ErrorInterpreter, NullInterpreter
from .bridging import BridgingErrorInterpreter
from .script import ScriptErrorInterpreter, ScriptKeyErrorInterpreter
from .chain import InterpreterChain, message_header

__all__ = [
    "ErrorInterpreter",
    "NullInterpreter",
    "BridgingErrorInterpreter",
    "ScriptErrorInterpreter",
    "ScriptKeyErrorInterpreter",
    "InterpreterChain",
    "message_header",
]
