from catalog_dedupe.stores.memory import InMemoryCatalogStore
from catalog_dedupe.stores.sql import SqlCatalogStore

__all__ = ["InMemoryCatalogStore", "SqlCatalogStore"]
