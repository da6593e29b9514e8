"""
Backing store selection.
The active store is chosen once per process from settings.STORAGE_BACKEND.
"""
from typing import Optional

from smartstudy.config import settings
from smartstudy.db.base import BackingStore
from smartstudy.db.local_storage import JSONFileStorage, MemoryStorage
from smartstudy.db.local_store import LocalStore
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)

_store: Optional[BackingStore] = None


async def create_backing_store(backend: str = None) -> BackingStore:
    """Build a fresh store for ``backend`` (memory, local or supabase)"""
    backend = (backend or settings.STORAGE_BACKEND).lower()

    if backend == "memory":
        return LocalStore(MemoryStorage())
    if backend == "local":
        return LocalStore(JSONFileStorage(settings.LOCAL_STORAGE_DIR))
    if backend == "supabase":
        from smartstudy.db.supabase_store import SupabaseStore
        return SupabaseStore()

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend} (expected memory, local or supabase)")


async def get_backing_store() -> BackingStore:
    """Get or create the process-wide backing store"""
    global _store
    if _store is None:
        _store = await create_backing_store()
        logger.info(f"Using '{_store.name}' backing store")
    return _store
