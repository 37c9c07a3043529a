"""
Declarative base shared by every table definition.

Both storage adapters build the schema from ``Base.metadata`` so the two
backends never drift apart.
"""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

# Largest key every backend can bind: Integer columns are 32-bit on PostgreSQL
MAX_ROW_ID = 2**31 - 1
