"""
StackIt Backend — Application Package Initializer
==================================================

What: Marks the `stackit` directory as a Python package.
Who:  Imported by uvicorn (`stackit.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │    Routes (REST + WebSocket)        │  ← HTTP concerns, actor resolution
    ├─────────────────────────────────────┤
    │    Services (Business Rules)        │  ← votes, acceptance, fan-out, moderation
    ├─────────────────────────────────────┤
    │    Models & Schemas (Data)          │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │    Database (Persistence)           │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never read request state. The acting user is always passed in
    explicitly, so every rule can be exercised without HTTP.
"""

__version__ = "1.0.0"
