"""
Declarative base - every ORM model in AI Studio inherits from Base.

Importing this module does NOT import the models. Anything that needs the
full metadata (alembic, Base.metadata.create_all in tests) must import
aistudio.models first so every table is registered.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base shared by all models."""
