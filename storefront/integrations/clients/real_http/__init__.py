"""
Real HTTP integration clients.

Must implement ``CatalogSource`` and return ``CatalogItem`` lists shaped by
storefront.integrations.contracts.
"""
