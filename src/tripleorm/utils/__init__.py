"""
Utility helpers shared across TripleORM packages.
"""

from .logging import configure_logging, get_correlation_id, get_logger, set_correlation_id, time_call
from .naming import camel_to_snake, coin_identifier

__all__ = [
    "camel_to_snake",
    "coin_identifier",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "time_call",
]
