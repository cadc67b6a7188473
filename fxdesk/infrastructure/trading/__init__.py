"""
Infrastructure adapters for the trading bounded context.

Each adapter implements a domain port (ABC) on top of
SQLAlchemy sessions.
"""
