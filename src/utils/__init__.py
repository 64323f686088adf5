"""
Logging setup and step profiling shared by the CLI, the HTTP app and the pipeline.
"""

from src.utils.logging import configure_logging, get_logger
from src.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
