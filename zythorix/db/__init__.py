"""
Database package initialization.
Exposes the engine, session factory and request-scoped session dependency.
"""

from zythorix.db.session import get_db, SessionLocal, engine

__all__ = ["get_db", "SessionLocal", "engine"]
