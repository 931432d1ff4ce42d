"""SQLModel table models — import here so metadata is populated."""

from app.models.fund import Fund, FundDetail, FundType  # noqa: F401
