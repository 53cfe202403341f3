"""
Interpreter registry: builds the interpreter chain at startup.

Interpreters are registered explicitly (instances, dotted class paths, a
YAML registry file, or the classes defined in given modules), ordered by
their ``order`` attribute, and frozen into an InterpreterChain. The chain
itself never scans or imports anything.

Registry file format:

    interpreters:
      - class: algobridge.interpreters.bridging.BridgingErrorInterpreter
        options:
          include_host_stack: true
      - class: mypackage.errors:BrokerErrorInterpreter

Copyright (c) 2025 Graziano Labs Corp.
"""

import importlib
import inspect
import logging
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml
from jsonschema import ValidationError, validate

from ..config import AlgoBridgeConfig, get_default_config
from ..errors import RegistryError
from ..interpreters.base import ErrorInterpreter, NullInterpreter
from ..interpreters.bridging import BridgingErrorInterpreter
from ..interpreters.chain import InterpreterChain
from ..interpreters.script import ScriptErrorInterpreter, ScriptKeyErrorInterpreter

logger = logging.getLogger(__name__)

REGISTRY_SCHEMA = {
    "type": "object",
    "required": ["interpreters"],
    "additionalProperties": False,
    "properties": {
        "interpreters": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["class"],
                "additionalProperties": False,
                "properties": {
                    "class": {"type": "string", "minLength": 1},
                    "options": {"type": "object"},
                    "enabled": {"type": "boolean"},
                },
            },
        },
    },
}


def _sort_key(interpreter: ErrorInterpreter):
    cls = type(interpreter)
    return (interpreter.order, cls.__module__, cls.__qualname__)


def load_interpreter(path: str, **options: Any) -> ErrorInterpreter:
    """
    Import and instantiate an interpreter class.

    Args:
        path: "package.module.ClassName" or "package.module:ClassName"
        **options: Keyword arguments for the constructor

    Raises:
        RegistryError: If the class cannot be imported, is not an
            ErrorInterpreter, or fails to instantiate (E300)
    """
    if ":" in path:
        module_name, _, class_name = path.partition(":")
    else:
        module_name, _, class_name = path.rpartition(".")

    if not module_name or not class_name:
        raise RegistryError(
            code="E300",
            message=f"Invalid interpreter path: '{path}'",
            hint="Use package.module.ClassName"
        )

    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise RegistryError(
            code="E300",
            message=f"Cannot import interpreter '{path}': {e}",
            hint="Check the module is installed and the class name is spelled correctly"
        ) from e

    if not (inspect.isclass(cls) and issubclass(cls, ErrorInterpreter)):
        raise RegistryError(
            code="E300",
            message=f"'{path}' is not an ErrorInterpreter subclass"
        )

    try:
        return cls(**options)
    except TypeError as e:
        raise RegistryError(
            code="E300",
            message=f"Cannot instantiate '{path}' with options {sorted(options)}: {e}"
        ) from e


def discover_interpreters(
    modules: Iterable[Union[str, ModuleType]]
) -> List[ErrorInterpreter]:
    """
    Instantiate every concrete interpreter class defined in ``modules``.

    Classes imported into a module from elsewhere are skipped, as are the
    null interpreter and chains. Classes are instantiated with no arguments.

    Returns:
        Interpreters sorted by (order, module, class name)
    """
    found: List[ErrorInterpreter] = []
    for module in modules:
        if isinstance(module, str):
            module = importlib.import_module(module)
        for _, cls in inspect.getmembers(module, inspect.isclass):
            if cls.__module__ != module.__name__:
                continue
            if not issubclass(cls, ErrorInterpreter) or inspect.isabstract(cls):
                continue
            if issubclass(cls, (NullInterpreter, InterpreterChain)):
                continue
            found.append(cls())
    return sorted(found, key=_sort_key)


def load_registry_file(path: str) -> List[ErrorInterpreter]:
    """
    Load interpreters listed in a YAML registry file.

    Raises:
        FileNotFoundError: If path doesn't exist
        RegistryError: If the document is invalid (E301) or an entry
            cannot be loaded (E300)
    """
    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(f"Interpreter registry file not found: {path}")

    try:
        with open(path_obj, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
        validate(instance=document, schema=REGISTRY_SCHEMA)
    except yaml.YAMLError as e:
        raise RegistryError(
            code="E301",
            message=f"Invalid YAML in {path}: {e}"
        ) from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise RegistryError(
            code="E301",
            message=f"Invalid interpreter registry {path} at {location}: {e.message}",
            hint="Each entry needs a 'class' and may have 'options' and 'enabled'"
        ) from e

    return [
        load_interpreter(entry["class"], **entry.get("options", {}))
        for entry in document["interpreters"]
        if entry.get("enabled", True)
    ]


def builtin_interpreters(config: AlgoBridgeConfig) -> List[ErrorInterpreter]:
    """The interpreters shipped with algobridge, configured from ``config``."""
    return [
        BridgingErrorInterpreter(include_host_stack=config.include_host_stack),
        ScriptKeyErrorInterpreter(max_frames=config.max_script_frames),
        ScriptErrorInterpreter(max_frames=config.max_script_frames),
    ]


class InterpreterRegistry:
    """
    Collects interpreters during startup and freezes them into a chain.

    Each interpreter class may be registered once; two interpreters of the
    same class would claim the same error kind.
    """

    def __init__(self):
        """Initialize empty registry."""
        self.interpreters: Dict[type, ErrorInterpreter] = {}

    def register(self, interpreter: ErrorInterpreter) -> None:
        """
        Register an interpreter instance.

        Raises:
            ValueError: If an interpreter of the same class is registered
            TypeError: If ``interpreter`` is not an ErrorInterpreter
        """
        if not isinstance(interpreter, ErrorInterpreter):
            raise TypeError(
                f"Expected ErrorInterpreter, got {type(interpreter).__name__}"
            )
        if isinstance(interpreter, NullInterpreter):
            return

        cls = type(interpreter)
        if cls in self.interpreters:
            raise ValueError(f"Interpreter '{cls.__name__}' already registered")
        self.interpreters[cls] = interpreter
        logger.debug(
            "Registered interpreter %s.%s (order=%s)",
            cls.__module__, cls.__qualname__, interpreter.order
        )

    def register_all(self, interpreters: Iterable[ErrorInterpreter]) -> None:
        for interpreter in interpreters:
            self.register(interpreter)

    def register_path(self, path: str, **options: Any) -> None:
        """Import, instantiate and register an interpreter by dotted path."""
        self.register(load_interpreter(path, **options))

    def register_modules(self, modules: Iterable[Union[str, ModuleType]]) -> None:
        """Register every concrete interpreter defined in ``modules``."""
        self.register_all(discover_interpreters(modules))

    def list_interpreters(self) -> List[dict]:
        """List registered interpreters in chain order."""
        return [
            {
                "name": type(i).__name__,
                "module": type(i).__module__,
                "order": i.order,
            }
            for i in self.ordered()
        ]

    def ordered(self) -> List[ErrorInterpreter]:
        return sorted(self.interpreters.values(), key=_sort_key)

    def build(self) -> InterpreterChain:
        """Freeze the registered interpreters into a chain."""
        return InterpreterChain(self.ordered())


def build_chain(config: Optional[AlgoBridgeConfig] = None) -> InterpreterChain:
    """
    Build the process-wide interpreter chain from configuration.

    Args:
        config: Configuration to use. If None, loads from environment.

    Returns:
        InterpreterChain terminated by the null interpreter
    """
    config = config or get_default_config()
    registry = InterpreterRegistry()

    if config.interpreter_file:
        registry.register_all(load_registry_file(config.interpreter_file))
    elif config.interpreters:
        for path in config.interpreters:
            registry.register_path(path)
    else:
        registry.register_all(builtin_interpreters(config))

    chain = registry.build()
    logger.debug("Interpreter chain: %r", chain)
    return chain
