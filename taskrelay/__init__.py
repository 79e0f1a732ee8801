"""
TaskRelay Backend — Application Package Initializer
====================================================

What: Marks the `taskrelay` directory as a Python package.
Why:  Enables module imports like `from taskrelay.config import Settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin relay between a frontend and third-party services:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Reshaping + Adapters)   │  ← grouping, date/amount extraction
    ├─────────────────────────────────────┤
    │        Schemas (API Contracts)      │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │   Upstreams: Todoist, Sheets, OCR   │  ← external, never persisted locally
    └─────────────────────────────────────┘

    Nothing is stored between requests. Every request re-fetches current state
    from the upstream service it needs.
"""

__version__ = "1.0.0"
