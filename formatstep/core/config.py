"""
Configuration for format steps.

Gathers the knobs that change how a step caches, builds and applies its
formatter into a single dataclass with sensible defaults.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class StepConfig:
    """
    Behaviour switches shared by all format step variants.

    A single instance can be passed to any number of steps.
    """

    # === Concurrency ===
    thread_safe: bool = True
    """Guard first-call key/formatter construction with a lock"""

    # === Failure policy ===
    rebuild_on_apply_error: bool = False
    """Discard the built formatter when applying it fails (rebuilt on next call)"""

    validate_output: bool = True
    """Reject formatter output that is not a ``str``"""

    # === Logging ===
    log_level: Optional[str] = None
    """Level for the ``formatstep`` logger, applied only by ``apply_logging()``"""

    # === Validation ===
    def __post_init__(self):
        """Validate configuration values after initialization."""
        for name in ("thread_safe", "rebuild_on_apply_error", "validate_output"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigurationError(f"{name} must be a bool, got {value!r}")

        if self.log_level is not None:
            level = str(self.log_level).upper()
            if level not in _VALID_LOG_LEVELS:
                raise ConfigurationError(
                    f"log_level must be one of {', '.join(_VALID_LOG_LEVELS)}, got {self.log_level!r}"
                )
            object.__setattr__(self, "log_level", level)

    def apply_logging(self) -> None:
        """Set the package logger level if ``log_level`` is configured.

        Steps never call this; it is for the application that owns logging.
        """
        if self.log_level is not None:
            logging.getLogger("formatstep").setLevel(self.log_level)

    @classmethod
    def for_development(cls) -> 'StepConfig':
        """Create configuration suited to local runs and debugging."""
        return cls(
            thread_safe=False,            # Single pipeline thread
            rebuild_on_apply_error=True,  # Recover from a broken formatter
            log_level="DEBUG"
        )

    @classmethod
    def for_production(cls) -> 'StepConfig':
        """Create configuration suited to concurrent build workers."""
        return cls(
            thread_safe=True,
            rebuild_on_apply_error=False,
            log_level="WARNING"
        )


DEFAULT_CONFIG = StepConfig()
