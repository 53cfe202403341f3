"""
Embedded runtime for user algorithm scripts.

Scripts are compiled from source into isolated modules (not added to
sys.modules). Their source is registered with linecache under
``<module_name>.py`` so tracebacks and diagnostics can quote it.

Failures leave the runtime as one of:
- ScriptLoadError: the source did not compile
- ScriptError: the script itself raised
- BridgingError: a host function called by the script raised

Copyright (c) 2025 Graziano Labs Corp.
"""

import linecache
import logging
import types
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..errors import BridgingError, ScriptError, ScriptLoadError, module_file
from .boundary import SCRIPT_MARKER, host_call, script_frames
from .host_api import HostAlgorithm

logger = logging.getLogger(__name__)

# Names every script sees without importing
DEFAULT_NAMESPACE: Dict[str, Any] = {
    "HostAlgorithm": HostAlgorithm,
    "host_call": host_call,
}


def invoke(module_name: str, func: Callable, *args, **kwargs):
    """
    Call embedded code, converting script failures to ScriptError.

    BridgingError and ScriptError pass through so nothing is wrapped twice.
    Failures whose traceback never entered embedded code (a host method
    called directly through the proxy) are re-raised unchanged.
    """
    try:
        return func(*args, **kwargs)
    except (BridgingError, ScriptError):
        raise
    except Exception as exc:
        frames = script_frames(exc.__traceback__)
        if not frames:
            raise
        raise ScriptError(exc, module_name, frames) from exc


class EmbeddedAlgorithm:
    """Host-side handle on an algorithm instance living in a script."""

    def __init__(self, instance: Any, module_name: str):
        self.instance = instance
        self.module_name = module_name

    def call(self, method: str, *args, **kwargs):
        """Invoke ``method`` on the algorithm instance."""
        func = getattr(self.instance, method)
        return invoke(self.module_name, func, *args, **kwargs)

    def has_method(self, method: str) -> bool:
        return callable(getattr(self.instance, method, None))

    def __repr__(self) -> str:
        return f"EmbeddedAlgorithm({type(self.instance).__name__} in {self.module_name})"


class ScriptModule:
    """A loaded script module."""

    def __init__(self, name: str, module: types.ModuleType):
        self.name = name
        self.module = module

    @property
    def filename(self) -> str:
        return module_file(self.name)

    def get(self, attr: str) -> Any:
        try:
            return getattr(self.module, attr)
        except AttributeError:
            raise AttributeError(
                f"Script module '{self.name}' has no attribute '{attr}'"
            ) from None

    def create(self, class_name: str, *args, **kwargs) -> EmbeddedAlgorithm:
        """Instantiate an algorithm class defined by the script."""
        cls = self.get(class_name)
        instance = invoke(self.name, cls, *args, **kwargs)
        return EmbeddedAlgorithm(instance, self.name)


class ScriptRuntime:
    """Loads algorithm scripts as embedded modules."""

    def __init__(self, namespace: Optional[Dict[str, Any]] = None):
        """
        Args:
            namespace: Extra names injected into every script's globals
        """
        self.namespace = dict(DEFAULT_NAMESPACE)
        if namespace:
            self.namespace.update(namespace)
        self.modules: Dict[str, ScriptModule] = {}

    def load(self, source: str, module_name: str) -> ScriptModule:
        """
        Compile and execute ``source`` as embedded module ``module_name``.

        Raises:
            ScriptLoadError: If the source does not compile
            ScriptError: If module-level code raises
            BridgingError: If module-level code calls a failing host function
        """
        filename = module_file(module_name)
        linecache.cache[filename] = (
            len(source), None, source.splitlines(keepends=True), filename
        )

        try:
            code = compile(source, filename, "exec")
        except SyntaxError as e:
            raise ScriptLoadError(
                code="E101",
                message=f"Invalid syntax in {filename}: {e.msg}",
                loc=(e.lineno, e.offset) if e.lineno else None,
                hint="Fix the syntax error and load the script again"
            ) from e

        module = types.ModuleType(module_name)
        module.__file__ = filename
        module.__dict__.update(self.namespace)
        module.__dict__[SCRIPT_MARKER] = True

        invoke(module_name, exec, code, module.__dict__)

        loaded = ScriptModule(module_name, module)
        self.modules[module_name] = loaded
        logger.debug("Loaded embedded module %s (%d bytes)", module_name, len(source))
        return loaded

    def load_file(self, path: str, module_name: Optional[str] = None) -> ScriptModule:
        """Load a script from disk; module name defaults to the file stem."""
        path_obj = Path(path)
        if not path_obj.exists():
            raise FileNotFoundError(f"Script file not found: {path}")
        return self.load(path_obj.read_text(), module_name or path_obj.stem)
