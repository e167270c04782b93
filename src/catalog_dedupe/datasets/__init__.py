from catalog_dedupe.datasets.profiles import PRODUCT_LINES
from catalog_dedupe.datasets.reference import ReferenceCatalogGenerator

__all__ = ["PRODUCT_LINES", "ReferenceCatalogGenerator"]
