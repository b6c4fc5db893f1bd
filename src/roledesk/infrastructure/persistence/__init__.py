"""Persistence layer: SQLAlchemy models, repositories and the SQL role store."""
