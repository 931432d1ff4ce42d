"""
Database model registry.

Importing this module registers every table model with SQLModel's metadata,
which ``create_all()`` needs before it can create the schema.
"""

from sqlmodel import SQLModel

from app.models.fund import Fund, FundType  # noqa: F401

metadata = SQLModel.metadata
