"""
Declarative base shared by every SQLAlchemy model and by Alembic autogenerate.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
