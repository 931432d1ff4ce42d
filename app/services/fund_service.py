"""
Fund service — business logic layer for fund operations.

Validation, existence and uniqueness checks and the net asset value movement
rule live here.  Every method returns a :data:`~app.core.results.Result`:
``Ok`` with the value, or ``Err`` with an :class:`ErrorKind` for an expected
failure.  Unexpected failures (database connectivity and the like) are logged
where they happen and re-raised.

The service stays framework-agnostic: no FastAPI imports.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.results import Err, ErrorKind, Ok, Result
from app.models.fund import MAX_NET_ASSET_VALUE, Fund, FundDetail
from app.repositories.fund_repo import FundRepository
from app.schemas.fund import FundPayload

logger = logging.getLogger(__name__)

CODE_REQUIRED = "Fund code is required"
FUND_REQUIRED = "Fund is required"
NEGATIVE_RESULT = "Operation would result in a negative net asset value"


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _not_found(code: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, f"Fund with code '{code}' not found")


def validate_fund(fund: Optional[FundPayload]) -> Optional[Err]:
    """
    Check the content rules shared by create and update.

    Returns ``None`` when the fund is acceptable, otherwise an
    ``INVALID_INPUT`` error naming the first offending field.
    """
    if fund is None:
        return Err(ErrorKind.INVALID_INPUT, FUND_REQUIRED)
    if _is_blank(fund.code):
        return Err(ErrorKind.INVALID_INPUT, CODE_REQUIRED)
    if _is_blank(fund.name):
        return Err(ErrorKind.INVALID_INPUT, "Fund name is required")
    if _is_blank(fund.tax_id):
        return Err(ErrorKind.INVALID_INPUT, "Fund tax id is required")
    if fund.type_code <= 0:
        return Err(
            ErrorKind.INVALID_INPUT, "Fund type code is required and must be greater than zero"
        )
    if fund.net_asset_value is not None and fund.net_asset_value < 0:
        return Err(ErrorKind.INVALID_INPUT, "Net asset value cannot be negative")
    return None


class FundService:
    """Encapsulates CRUD + business rules for :class:`Fund`."""

    def __init__(self, fund_repo: FundRepository):
        self._repo = fund_repo

    # ── Queries ──

    async def list_funds(self) -> Result[List[FundDetail]]:
        logger.info("Listing all funds")
        try:
            funds = await self._repo.list_all()
        except SQLAlchemyError:
            logger.exception("Failed to list funds")
            raise
        return Ok(funds)

    async def get_fund(self, code: str) -> Result[Optional[FundDetail]]:
        """
        Look up a fund by code.

        A missing fund is ``Ok(None)``, not an error: the caller decides
        whether absence is worth reporting.
        """
        if _is_blank(code):
            return Err(ErrorKind.INVALID_INPUT, CODE_REQUIRED)

        logger.info("Fetching fund %s", code)
        try:
            fund = await self._repo.find_by_code(code)
        except SQLAlchemyError:
            logger.exception("Failed to fetch fund %s", code)
            raise
        return Ok(fund)

    # ── Commands ──

    async def create_fund(self, fund_in: Optional[FundPayload]) -> Result[FundDetail]:
        """
        Create a new fund.

        The code must not be taken; an existing record with the same code is
        left untouched.  An ``IntegrityError`` from the insert (a concurrent
        create with the same code, or a type code with no lookup row) is
        reported as a conflict as well.
        """
        if fund_in is None:
            return Err(ErrorKind.INVALID_INPUT, FUND_REQUIRED)
        invalid = validate_fund(fund_in)
        if invalid is not None:
            return invalid

        try:
            existing = await self._repo.find_by_code(fund_in.code)
            if existing is not None:
                logger.warning("Rejected create: fund %s already exists", fund_in.code)
                return Err(ErrorKind.CONFLICT, f"Fund with code '{fund_in.code}' already exists")

            created = await self._repo.create(Fund(**fund_in.model_dump()))
        except IntegrityError as exc:
            logger.warning("IntegrityError creating fund %s: %s", fund_in.code, exc.orig)
            return Err(
                ErrorKind.CONFLICT,
                f"Fund '{fund_in.code}' violates a database constraint: the code may "
                f"already exist or type code {fund_in.type_code} may be unknown",
            )
        except SQLAlchemyError:
            logger.exception("Failed to create fund %s", fund_in.code)
            raise

        logger.info("Created fund %s (%s)", created.code, created.name)
        return Ok(created)

    async def update_fund(self, code: str, fund_in: Optional[FundPayload]) -> Result[None]:
        """
        Full replacement update of an existing fund's mutable fields.

        The record keeps ``code``; any code in the payload is validated but not
        applied.
        """
        if _is_blank(code):
            return Err(ErrorKind.INVALID_INPUT, CODE_REQUIRED)
        if fund_in is None:
            return Err(ErrorKind.INVALID_INPUT, FUND_REQUIRED)
        invalid = validate_fund(fund_in)
        if invalid is not None:
            return invalid

        try:
            if await self._repo.find_by_code(code) is None:
                return _not_found(code)
            await self._repo.update(code, Fund(**fund_in.model_dump()))
        except IntegrityError as exc:
            logger.warning("IntegrityError updating fund %s: %s", code, exc.orig)
            return Err(
                ErrorKind.CONFLICT,
                f"Fund '{code}' update violates a database constraint: "
                f"type code {fund_in.type_code} may be unknown",
            )
        except SQLAlchemyError:
            logger.exception("Failed to update fund %s", code)
            raise

        logger.info("Updated fund %s", code)
        return Ok(None)

    async def delete_fund(self, code: str) -> Result[None]:
        if _is_blank(code):
            return Err(ErrorKind.INVALID_INPUT, CODE_REQUIRED)

        try:
            if await self._repo.find_by_code(code) is None:
                return _not_found(code)
            await self._repo.delete(code)
        except SQLAlchemyError:
            logger.exception("Failed to delete fund %s", code)
            raise

        logger.info("Deleted fund %s", code)
        return Ok(None)

    async def move_net_asset_value(
        self, code: str, signed_amount: Decimal
    ) -> Result[FundDetail]:
        """
        Apply a signed movement to a fund's net asset value.

        Sequence:
        1. Blank code → ``INVALID_INPUT``.
        2. Unknown fund → ``NOT_FOUND``.
        3. ``current + signed_amount`` (unset counts as zero) below zero or
           above ``MAX_NET_ASSET_VALUE`` → ``INVALID_OPERATION``.
        4. Relative, guarded update in the store.  If it touches no row, a
           concurrent movement changed the balance after step 3 and the
           result is ``INVALID_OPERATION`` as well.

        Returns the fund as stored after the movement.
        """
        if _is_blank(code):
            return Err(ErrorKind.INVALID_INPUT, CODE_REQUIRED)

        try:
            existing = await self._repo.find_by_code(code)
            if existing is None:
                return _not_found(code)

            current = existing.net_asset_value or Decimal("0")
            if current + signed_amount < 0:
                logger.warning(
                    "Rejected movement of %s on fund %s: balance %s would go negative",
                    signed_amount,
                    code,
                    current,
                )
                return Err(ErrorKind.INVALID_OPERATION, NEGATIVE_RESULT)
            if current + signed_amount > MAX_NET_ASSET_VALUE:
                logger.warning(
                    "Rejected movement of %s on fund %s: balance %s would exceed %s",
                    signed_amount,
                    code,
                    current,
                    MAX_NET_ASSET_VALUE,
                )
                return Err(
                    ErrorKind.INVALID_OPERATION,
                    "Operation would exceed the maximum net asset value",
                )

            applied = await self._repo.adjust_net_asset_value(code, signed_amount)
            if not applied:
                logger.warning(
                    "Movement of %s on fund %s refused by the store: the balance "
                    "changed after it was read",
                    signed_amount,
                    code,
                )
                return Err(ErrorKind.INVALID_OPERATION, NEGATIVE_RESULT)

            updated = await self._repo.find_by_code(code)
        except SQLAlchemyError:
            logger.exception("Failed to move net asset value of fund %s", code)
            raise

        if updated is None:
            # Deleted between the adjustment and the read-back.
            return _not_found(code)

        logger.info(
            "Moved net asset value of fund %s by %s (now %s)",
            code,
            signed_amount,
            updated.net_asset_value,
        )
        return Ok(updated)
