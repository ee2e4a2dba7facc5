"""
crules - keep Cursor rules consistent across projects
"""

from crules.config import CrulesConfig, load_config
from crules.core.registry import Registry
from crules.core.results import FanOutReport, OperationResult, Outcome
from crules.core.sync import SyncManager

__version__ = "0.1.0"
__all__ = [
    "CrulesConfig",
    "load_config",
    "Registry",
    "SyncManager",
    "OperationResult",
    "Outcome",
    "FanOutReport",
]
