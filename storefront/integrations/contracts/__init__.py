"""
Contracts (data models).

This folder defines the shapes exchanged with catalogue sources:
- the normalised ``CatalogItem`` and the field fallback chains behind it
- the ``FetchError`` taxonomy
- the ``CatalogSource`` interface every client implements

Both mock and real HTTP clients should use these contracts.
"""
