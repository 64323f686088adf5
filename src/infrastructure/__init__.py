"""
Infrastructure package for the price archive service.

Centralizes database connectivity (DSN, pooling, readiness probe) and the
PostgreSQL-backed PriceStore. Keep this layer focused on I/O and resource
management, decoupled from CSV/ZIP handling and HTTP concerns.
"""

from src.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    create_pool,
    wait_for_database,
)
from src.infrastructure.store import PriceStore, compute_stats, insert_records

__all__ = [
    "PriceStore",
    "apply_statement_timeout",
    "build_dsn",
    "compute_stats",
    "create_pool",
    "insert_records",
    "wait_for_database",
]
