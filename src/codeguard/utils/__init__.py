"""CodeGuard utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- preflight: Dependency and credential checks before analysis
"""

from codeguard.utils.logging import configure_from_cli, get_logger, setup_logging
from codeguard.utils.preflight import PreflightChecker, PreflightResult, ToolCheck

__all__ = [
    "configure_from_cli",
    "get_logger",
    "setup_logging",
    "PreflightChecker",
    "PreflightResult",
    "ToolCheck",
]
