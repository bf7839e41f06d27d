"""
DishManager Backend — Application Package Initializer
=====================================================

What: Marks the `dishmanager` directory as a Python package.
Why:  Enables module imports like `from dishmanager.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows the same layered layout for every concern:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Mutations + Broadcast)  │  ← Store writes, then one event each
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The `client` subpackage is the other side of the wire: a snapshot +
    broadcast-event sync layer used by dashboards and scripts.
"""

__version__ = "1.0.0"
