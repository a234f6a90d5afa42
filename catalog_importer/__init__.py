"""
Catalog importer
Imports public storefront catalogs into a destination shop under a metered plan.
"""

__version__ = "0.1.0"
