"""
Market Signal Analytics Engine.

Pure, synchronous analytics over game-market time series and player reviews:
trending, CCU volatility, retention, player persona, core fun and streaming
correlation. Callers (dashboards, report generators, schedulers) fetch the
raw data and pass it in as pydantic records; results come back as frozen
records that serialize with model_dump(mode="json").

Subpackages:
    - core: Settings, error taxonomy and logging setup
    - models: Pydantic records and enums
    - services: The analyzers and the shared scoring framework
"""

__version__ = "1.0.0"
