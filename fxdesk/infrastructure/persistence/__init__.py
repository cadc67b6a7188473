"""SQLAlchemy ORM models and session management."""
