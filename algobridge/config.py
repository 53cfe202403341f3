"""
algobridge Configuration Module

Centralized configuration for interpreter registration, diagnostics rendering
and data access. Loads settings from environment variables with sensible
defaults.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class AlgoBridgeConfig:
    """Configuration for the interpreter chain and the host runtime.

    Interpreter selection, in order of precedence:
      1. interpreter_file - YAML registry file
      2. interpreters - dotted class paths
      3. the built-in interpreters
    """

    # ====================
    # Interpreter registration
    # ====================

    interpreters: Optional[List[str]] = None
    """Dotted paths of interpreter classes, e.g.
    "algobridge.interpreters.bridging.BridgingErrorInterpreter".

    Default: None (use the built-in interpreters)
    """

    interpreter_file: Optional[str] = None
    """YAML file listing interpreter classes and their options"""

    # ====================
    # Diagnostics
    # ====================

    include_host_stack: bool = False
    """Append the host-side traceback to boundary-crossing diagnostics.

    Useful when debugging the host API itself; noisy for algorithm authors.
    """

    max_script_frames: int = 10
    """Maximum embedded frames rendered for script failures"""

    # ====================
    # Runtime
    # ====================

    data_folder: str = "data"
    """Base directory for relative data keys"""

    log_level: str = "INFO"
    """Logging level used by the CLI"""

    @classmethod
    def from_env(cls) -> "AlgoBridgeConfig":
        """Load configuration from environment variables.

        Environment variables:
          ALGOBRIDGE_INTERPRETERS - Comma-separated dotted class paths
          ALGOBRIDGE_INTERPRETER_FILE - YAML registry file
          ALGOBRIDGE_INCLUDE_HOST_STACK - Include host traceback (1/0)
          ALGOBRIDGE_MAX_SCRIPT_FRAMES - Frames rendered for script errors
          ALGOBRIDGE_DATA_FOLDER - Data directory
          ALGOBRIDGE_LOG_LEVEL - DEBUG, INFO, WARNING, ERROR

        Returns:
            AlgoBridgeConfig instance with values from environment
        """
        raw_interpreters = os.getenv("ALGOBRIDGE_INTERPRETERS", "")
        interpreters = [
            name.strip() for name in raw_interpreters.split(",") if name.strip()
        ]

        return cls(
            interpreters=interpreters or None,
            interpreter_file=os.getenv("ALGOBRIDGE_INTERPRETER_FILE") or None,
            include_host_stack=os.getenv("ALGOBRIDGE_INCLUDE_HOST_STACK", "0") == "1",
            max_script_frames=int(os.getenv("ALGOBRIDGE_MAX_SCRIPT_FRAMES", "10")),
            data_folder=os.getenv("ALGOBRIDGE_DATA_FOLDER", "data"),
            log_level=os.getenv("ALGOBRIDGE_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Validate configuration settings.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.max_script_frames < 1:
            raise ValueError(
                f"max_script_frames must be >= 1, got {self.max_script_frames}"
            )

        if self.interpreters is not None:
            for name in self.interpreters:
                if "." not in name and ":" not in name:
                    raise ValueError(
                        f"interpreter '{name}' must be a dotted path "
                        f"(package.module.ClassName)"
                    )

        if self.interpreter_file and not os.path.exists(self.interpreter_file):
            raise ValueError(
                f"interpreter_file not found: {self.interpreter_file}"
            )

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log_level: {self.log_level}")

    def get_summary(self) -> str:
        """Get human-readable configuration summary.

        Returns:
            Formatted string describing current configuration
        """
        if self.interpreter_file:
            source = f"file {self.interpreter_file}"
        elif self.interpreters:
            source = f"{len(self.interpreters)} configured class(es)"
        else:
            source = "built-in"

        lines = [
            "algobridge Configuration Summary",
            "=" * 50,
            "",
            "Interpreters:",
            f"  Source: {source}",
        ]

        if self.interpreters and not self.interpreter_file:
            lines.extend(f"    - {name}" for name in self.interpreters)

        lines.extend([
            "",
            "Diagnostics:",
            f"  Host Stack: {'Included' if self.include_host_stack else 'Omitted'}",
            f"  Max Script Frames: {self.max_script_frames}",
            "",
            "Runtime:",
            f"  Data Folder: {self.data_folder}",
            f"  Log Level: {self.log_level}",
        ])

        return "\n".join(lines)


# Default configuration instance (lazy-loaded from environment)
_default_config: Optional[AlgoBridgeConfig] = None


def get_default_config() -> AlgoBridgeConfig:
    """Get default configuration instance (singleton pattern).

    Returns:
        Default AlgoBridgeConfig loaded from environment
    """
    global _default_config
    if _default_config is None:
        _default_config = AlgoBridgeConfig.from_env()
        _default_config.validate()
    return _default_config
