"""
Seed data for the fund-type lookup table and, optionally, sample funds.

The application calls :func:`seed_fund_types` on startup so that funds can
reference a type from the very first request.  Running the module directly
also inserts a few sample funds for development / demo::

    python -m app.seed

Both steps are idempotent: existing rows are left alone.
"""

import asyncio
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from app.models.fund import Fund, FundType

logger = logging.getLogger(__name__)

FUND_TYPES = [
    FundType(code=1, name="RENDA FIXA"),
    FundType(code=2, name="ACOES"),
    FundType(code=3, name="MULTI MERCADO"),
]

SAMPLE_FUNDS = [
    Fund(
        code="ITAUTESTE01",
        name="Fundo de Teste Renda Fixa",
        tax_id="11.111.111/0001-11",
        type_code=1,
        net_asset_value=Decimal("1500000.00"),
    ),
    Fund(
        code="ITAUTESTE02",
        name="Fundo de Teste Acoes",
        tax_id="22.222.222/0001-22",
        type_code=2,
        net_asset_value=None,
    ),
]


async def seed_fund_types(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Insert any missing fund types.  Returns how many were added."""
    async with session_factory() as session, session.begin():
        result = await session.execute(select(FundType.code))
        present = set(result.scalars().all())
        missing = [
            FundType(code=t.code, name=t.name) for t in FUND_TYPES if t.code not in present
        ]
        session.add_all(missing)
    if missing:
        logger.info("Seeded %d fund types", len(missing))
    return len(missing)


async def seed_sample_funds(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Insert the sample funds whose codes are not taken yet."""
    async with session_factory() as session, session.begin():
        result = await session.execute(select(Fund.code))
        present = set(result.scalars().all())
        missing = [
            Fund.model_validate(f.model_dump()) for f in SAMPLE_FUNDS if f.code not in present
        ]
        session.add_all(missing)
    logger.info("Seeded %d sample funds", len(missing))
    return len(missing)


async def seed() -> None:
    """Create tables, then seed fund types and sample funds."""
    from app.db.session import AsyncSessionLocal, engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    await seed_fund_types(AsyncSessionLocal)
    await seed_sample_funds(AsyncSessionLocal)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    asyncio.run(seed())
