"""
Fund repository — data-access layer for the ``funds`` table.

Every public method opens its own session and transaction from the injected
session factory and releases both before returning, whether the call
succeeds, fails, or returns early.  All statements are SQLAlchemy expression
constructs, so values always travel as bound parameters.

Design notes:
- Reads join ``fund_types`` and return :class:`FundDetail` entities.
- ``find_by_code`` returns ``None`` for a missing fund; that is not an error
  at this layer.
- ``update`` and ``delete`` report rows affected and are silent no-ops for an
  unknown code; existence checks belong to the service.
- **IntegrityError** is NOT caught here.  The service decides how a duplicate
  code or an unknown type code is reported.
- **OperationalError** (connection loss, locked database) is logged and
  re-raised; the transaction is rolled back by the session context.
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, List, Optional, cast

from sqlalchemy import delete, func, literal, select, type_coerce, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.types import Money
from app.models.fund import MAX_NET_ASSET_VALUE, Fund, FundDetail, FundType

logger = logging.getLogger(__name__)


class FundRepository:
    """Persistence gateway for :class:`Fund` records."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ── Internal helpers ──

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction that commits on clean exit."""
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except OperationalError:
                logger.error("OperationalError during %s on funds", operation)
                raise

    @staticmethod
    def _detail_query():
        return select(
            Fund.code,
            Fund.name,
            Fund.tax_id,
            Fund.type_code,
            Fund.net_asset_value,
            FundType.name.label("type_name"),
        ).join(FundType, FundType.code == Fund.type_code)

    async def _fetch_one(self, session: AsyncSession, code: str) -> Optional[FundDetail]:
        result = await session.execute(self._detail_query().where(Fund.code == code))
        row = result.first()
        return FundDetail.model_validate(row._asdict()) if row is not None else None

    # ── Queries ──

    async def list_all(self) -> List[FundDetail]:
        """Return every fund joined with its type name, in storage order."""
        async with self._transaction("list_all") as session:
            result = await session.execute(self._detail_query())
            return [FundDetail.model_validate(row._asdict()) for row in result.all()]

    async def find_by_code(self, code: str) -> Optional[FundDetail]:
        """Fetch a single fund.  Returns ``None`` if not found."""
        async with self._transaction("find_by_code") as session:
            return await self._fetch_one(session, code)

    # ── Commands ──

    async def create(self, fund: Fund) -> FundDetail:
        """
        Insert a new fund and return it as stored, type name included.

        Raises ``IntegrityError`` when the code already exists or the type
        code has no lookup row.
        """
        async with self._transaction("create") as session:
            session.add(fund)
            await session.flush()
            # The row was flushed in this transaction, so the read finds it.
            return cast(FundDetail, await self._fetch_one(session, fund.code))

    async def update(self, code: str, fund: Fund) -> int:
        """
        Overwrite name, tax id, type code and net asset value of ``code``.

        ``fund.code`` is ignored; the key of a record never changes.
        Returns the number of rows affected.
        """
        stmt = (
            update(Fund)
            .where(Fund.code == code)
            .values(
                name=fund.name,
                tax_id=fund.tax_id,
                type_code=fund.type_code,
                net_asset_value=fund.net_asset_value,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("update") as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def delete(self, code: str) -> int:
        """Delete the fund with ``code``.  Returns the number of rows affected."""
        stmt = (
            delete(Fund)
            .where(Fund.code == code)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("delete") as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def adjust_net_asset_value(self, code: str, delta: Decimal) -> int:
        """
        Add ``delta`` to the fund's net asset value in a single statement.

        An unset value counts as zero.  The row is only touched when the
        result stays within ``0 .. MAX_NET_ASSET_VALUE``, so concurrent
        movements cannot jointly overdraw the fund.  Operands are bound as
        :class:`Money`, which keeps the arithmetic exact on every dialect.
        Returns 1 when applied, 0 when the code is unknown or the guard
        rejected the change.
        """
        money = Money()
        new_value = type_coerce(
            func.coalesce(Fund.net_asset_value, 0) + literal(delta, money), money
        )
        stmt = (
            update(Fund)
            .where(
                Fund.code == code,
                new_value >= literal(Decimal("0"), money),
                new_value <= literal(MAX_NET_ASSET_VALUE, money),
            )
            .values(net_asset_value=new_value)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("adjust_net_asset_value") as session:
            result = await session.execute(stmt)
            return result.rowcount
