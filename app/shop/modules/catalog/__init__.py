"""
Catalog module: products, categories and subcategories.

Reads are public; every mutation goes through the admin role gate.
"""
