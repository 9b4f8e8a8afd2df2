from voicepos.core.config import Settings
from voicepos.store.base import CatalogStore, new_id
from voicepos.store.memory import InMemoryCatalogStore
from voicepos.store.seed import CATEGORIES, seed_catalog
from voicepos.store.sql import SqlCatalogStore


async def build_store(settings: Settings) -> CatalogStore:
    """Create the catalog store selected by ``CATALOG_BACKEND``."""
    if settings.CATALOG_BACKEND == "memory":
        store: CatalogStore = InMemoryCatalogStore()
    elif settings.CATALOG_BACKEND == "sql":
        store = await SqlCatalogStore.connect(settings.DATABASE_URL)
    else:
        raise ValueError(f"Unknown CATALOG_BACKEND: {settings.CATALOG_BACKEND}")

    if settings.SEED_SAMPLE_DATA:
        await seed_catalog(store)
    return store


__all__ = [
    "CatalogStore", "InMemoryCatalogStore", "SqlCatalogStore",
    "CATEGORIES", "build_store", "new_id", "seed_catalog",
]
