"""
patrimoine - Household Net Worth Projection & Taxation Engine

Projects a household's patrimoine year after year under a deterministic or
Monte-Carlo economic scenario, applying the versioned French fiscal models.

Modules:
    - core: Financial math, exceptions, logging and settings
    - domain: Pydantic models (family, patrimoine, fiscal configuration) and tax calculators
    - application: Economy providers, social accounts and simulation drivers
    - services: CSV export, fiscal configuration loading and parallel workers
"""

__version__ = "1.0.0"
