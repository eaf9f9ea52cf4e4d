"""
Configuration models and validation schemas.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import os

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class KernelConfiguration:
    """Configuration for the kernel's logging and in-memory event buses."""

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # In-memory bus behaviour
    raise_handler_errors: bool = True
    handler_timeout: Optional[float] = None  # seconds per handler, None waits forever

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_logging()
        self._validate_bus()

    def _validate_logging(self) -> None:
        """Validate logging configuration."""
        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(VALID_LOG_LEVELS)}")

        if self.log_file is not None and (not isinstance(self.log_file, str) or not self.log_file.strip()):
            raise ValueError("log_file must be a non-empty string if provided")

    def _validate_bus(self) -> None:
        """Validate event bus configuration."""
        if not isinstance(self.raise_handler_errors, bool):
            raise ValueError("raise_handler_errors must be a boolean")

        if self.handler_timeout is not None:
            if isinstance(self.handler_timeout, bool) or not isinstance(self.handler_timeout, (int, float)):
                raise ValueError("handler_timeout must be a number of seconds")
            if self.handler_timeout <= 0:
                raise ValueError("handler_timeout must be positive")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'KernelConfiguration':
        """Create configuration from dictionary with environment variable support."""
        config_dict = dict(config_dict)
        env_overrides = {
            'log_level': os.getenv('DDD_KERNEL_LOG_LEVEL'),
            'log_file': os.getenv('DDD_KERNEL_LOG_FILE'),
            'handler_timeout': os.getenv('DDD_KERNEL_HANDLER_TIMEOUT'),
        }

        for key, env_value in env_overrides.items():
            if env_value is not None:
                if key == 'handler_timeout':
                    config_dict[key] = float(env_value)
                else:
                    config_dict[key] = env_value

        return cls(**config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'log_level': self.log_level,
            'log_file': self.log_file,
            'raise_handler_errors': self.raise_handler_errors,
            'handler_timeout': self.handler_timeout,
        }
