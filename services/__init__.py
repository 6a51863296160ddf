"""
Service package marker.

Intentionally empty to keep package import cheap.
Import the concrete modules directly, e.g.:

    from services.recommend import recommend, trending
    from services.normalize import normalize_catalog, CatalogError
"""
__all__: list[str] = []
