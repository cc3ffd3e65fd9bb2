"""
Catalogue source clients.

- real_http/: talks to the storefront products API
- mocks/: serves local JSON data with the same interface
"""
