"""Database package: engine, session, base."""

from app.db.session import async_session_maker, get_db, get_session_maker

__all__ = ["async_session_maker", "get_db", "get_session_maker"]
