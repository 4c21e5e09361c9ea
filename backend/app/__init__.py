"""
BaseDrop Backend — Application Package Initializer
===================================================

What:  Marks the `app` directory as a Python package.
Who:   Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (HTTP Layer)       │  ← form parsing, status codes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, orchestration
    ├─────────────────────────────────────┤
    │             Schemas (Data)          │  ← Pydantic records and responses
    ├─────────────────────────────────────┤
    │     Flat-file storage (Persistence) │  ← image/ and base/baseth<N>.json
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
