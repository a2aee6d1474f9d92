"""
protometta Configuration

This module provides configuration settings for the interpreter,
the integration wrapper and logging.
"""

import logging
from dataclasses import dataclass
from typing import Optional


@dataclass
class InterpreterConfig:
    """Configuration for the MeTTa interpreter."""
    max_reduction_steps: int = 1000
    max_depth: int = 200
    enable_trace: bool = False
    default_space_name: str = "default"
    load_stdlib: bool = True


@dataclass
class MettaConfig:
    """Main configuration for protometta."""
    interpreter: InterpreterConfig = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.interpreter is None:
            self.interpreter = InterpreterConfig()


# Global configuration instance
_config: Optional[MettaConfig] = None


def get_config() -> MettaConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = MettaConfig()
    return _config


def set_config(config: MettaConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def setup_logging(level: str = "INFO") -> None:
    """Setup logging for protometta."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
