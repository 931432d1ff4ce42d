"""
Shared pytest fixtures.

The whole suite runs against an in-memory SQLite database and never writes
log files, so no external services are needed.  Service and endpoint tests
use mocks; repository and end-to-end tests use the ``session_factory``
fixture, which builds a fresh in-memory database per test.
"""

import os

os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

from decimal import Decimal  # noqa: E402
from typing import Optional  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app.db.session import build_engine, build_session_factory  # noqa: E402
from app.models.fund import FundDetail  # noqa: E402
from app.schemas.fund import FundPayload  # noqa: E402
from app.seed import seed_fund_types  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers
# ────────────────────────────────────────────────────────────────────────────

FUND_CODE = "X1"
TAX_ID = "00.000.000/0001-00"


def make_payload(
    *,
    code: str = FUND_CODE,
    name: str = "Alpha",
    tax_id: str = TAX_ID,
    type_code: int = 1,
    net_asset_value: Optional[Decimal] = None,
) -> FundPayload:
    """Create a FundPayload with sensible test defaults."""
    return FundPayload(
        code=code,
        name=name,
        tax_id=tax_id,
        type_code=type_code,
        net_asset_value=net_asset_value,
    )


def make_detail(
    *,
    code: str = FUND_CODE,
    name: str = "Alpha",
    tax_id: str = TAX_ID,
    type_code: int = 1,
    type_name: str = "RENDA FIXA",
    net_asset_value: Optional[Decimal] = None,
) -> FundDetail:
    """Create a FundDetail (a fund as read back from the store)."""
    return FundDetail(
        code=code,
        name=name,
        tax_id=tax_id,
        type_code=type_code,
        type_name=type_name,
        net_asset_value=net_asset_value,
    )


# ────────────────────────────────────────────────────────────────────────────
# Fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture()
def fund_repo():
    """Mocked FundRepository."""
    return AsyncMock()


@pytest_asyncio.fixture()
async def session_factory():
    """Session factory bound to a fresh, seeded in-memory SQLite database."""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    factory = build_session_factory(engine)
    await seed_fund_types(factory)
    yield factory
    await engine.dispose()
