"""
Habit Tracker Backend — Application Package Initializer
========================================================

What: Marks the `habitapi` directory as a Python package.
Why:  Enables module imports like `from habitapi.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is thin glue over a managed auth + database service (Supabase):

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Ownership rules, idempotency
    ├─────────────────────────────────────┤
    │        Schemas (Records + API)      │  ← Pydantic models
    ├─────────────────────────────────────┤
    │   Backend clients (Supabase, Google)│  ← Network calls, error translation
    └─────────────────────────────────────┘

    Routes never talk to Supabase directly; they receive services and clients
    through FastAPI dependencies so tests can swap them out.
"""

__version__ = "1.0.0"
