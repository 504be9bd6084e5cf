"""
Store Factory - pick the live database or the JSON snapshot fallback.

Usage:
    from fairprice.infrastructure.database.factory import create_store

    store = create_store(config.store)                    # backend from config
    store = create_store(config.store, backend="snapshot")  # force fallback
"""

import logging
from typing import Optional

from fairprice.config.settings import DataStoreSettings
from fairprice.infrastructure.database.snapshot_store import SnapshotTabularStore
from fairprice.infrastructure.database.sql_store import SqlTabularStore
from fairprice.infrastructure.database.store import TabularStore

logger = logging.getLogger(__name__)

BACKENDS = ("database", "snapshot")


def create_store(settings: Optional[DataStoreSettings] = None, backend: Optional[str] = None) -> TabularStore:
    """
    Build the configured ``TabularStore``.

    Args:
        settings: store settings; defaults from the environment when omitted
        backend: ``database`` or ``snapshot``; overrides ``settings.backend``

    Raises:
        ValueError: for an unknown backend name
    """
    settings = settings or DataStoreSettings()
    backend = backend or settings.backend
    if backend not in BACKENDS:
        raise ValueError(f"Unknown store backend '{backend}'; expected one of {BACKENDS}")

    logger.debug(f"Creating {backend} store")
    if backend == "snapshot":
        return SnapshotTabularStore(settings.snapshot_dir)
    return SqlTabularStore(url=settings.url, pool_pre_ping=settings.pool_pre_ping)
