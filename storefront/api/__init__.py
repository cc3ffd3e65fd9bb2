"""HTTP surface for the catalogue layer."""
