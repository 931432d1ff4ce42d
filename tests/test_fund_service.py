"""
Unit tests for FundService — business logic layer.

Repository calls are mocked except in TestMoveNetAssetValueOnStore.  Tests cover:
- validate_fund: every rejected field, acceptable funds
- list_funds / get_fund: found, missing (Ok(None)), blank code
- create_fund: success, duplicate code, IntegrityError, invalid input
- update_fund / delete_fund: success, not found, blank code
- move_net_asset_value: the balance guards and the lost-race path, plus
  exact cent arithmetic against the in-memory store
- unexpected database errors propagate
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.results import Err, ErrorKind, Ok
from app.models.fund import MAX_NET_ASSET_VALUE, Fund
from app.repositories.fund_repo import FundRepository
from app.services.fund_service import FundService, validate_fund

from .conftest import FUND_CODE, make_detail, make_payload

# ────────────────────────────────────────────────────────────────────────────
# Fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture()
def fund_service(fund_repo):
    """FundService wired to the mocked repository."""
    return FundService(fund_repo)


def assert_err(result, kind: ErrorKind) -> None:
    assert isinstance(result, Err)
    assert result.kind == kind


# ────────────────────────────────────────────────────────────────────────────
# validate_fund
# ────────────────────────────────────────────────────────────────────────────


class TestValidateFund:
    """Tests for the module-level content validator."""

    def test_accepts_valid_fund(self):
        assert validate_fund(make_payload()) is None

    def test_accepts_zero_net_asset_value(self):
        assert validate_fund(make_payload(net_asset_value=Decimal("0"))) is None

    def test_rejects_missing_fund(self):
        assert_err(validate_fund(None), ErrorKind.INVALID_INPUT)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"code": ""},
            {"code": "   "},
            {"name": ""},
            {"name": "\t"},
            {"tax_id": ""},
            {"tax_id": "  "},
            {"type_code": 0},
            {"type_code": -3},
            {"net_asset_value": Decimal("-0.01")},
        ],
    )
    def test_rejects_invalid_field(self, overrides):
        result = validate_fund(make_payload(**overrides))
        assert_err(result, ErrorKind.INVALID_INPUT)


# ────────────────────────────────────────────────────────────────────────────
# Queries
# ────────────────────────────────────────────────────────────────────────────


class TestListFunds:
    @pytest.mark.asyncio
    async def test_returns_all_funds(self, fund_service, fund_repo):
        funds = [make_detail(), make_detail(code="X2")]
        fund_repo.list_all.return_value = funds

        result = await fund_service.list_funds()

        assert result == Ok(funds)

    @pytest.mark.asyncio
    async def test_database_error_propagates(self, fund_service, fund_repo):
        fund_repo.list_all.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(OperationalError):
            await fund_service.list_funds()


class TestGetFund:
    @pytest.mark.asyncio
    async def test_returns_fund_when_found(self, fund_service, fund_repo):
        expected = make_detail()
        fund_repo.find_by_code.return_value = expected

        result = await fund_service.get_fund(FUND_CODE)

        assert result == Ok(expected)
        fund_repo.find_by_code.assert_awaited_once_with(FUND_CODE)

    @pytest.mark.asyncio
    async def test_missing_fund_is_not_an_error(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None

        result = await fund_service.get_fund("UNKNOWN")

        assert result == Ok(None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["", "   "])
    async def test_blank_code_is_invalid(self, fund_service, fund_repo, code):
        result = await fund_service.get_fund(code)

        assert_err(result, ErrorKind.INVALID_INPUT)
        fund_repo.find_by_code.assert_not_awaited()


# ────────────────────────────────────────────────────────────────────────────
# create_fund
# ────────────────────────────────────────────────────────────────────────────


class TestCreateFund:
    @pytest.mark.asyncio
    async def test_creates_fund_successfully(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None
        created = make_detail()
        fund_repo.create.return_value = created

        result = await fund_service.create_fund(make_payload())

        assert result == Ok(created)
        (persisted,), _ = fund_repo.create.await_args
        assert isinstance(persisted, Fund)
        assert persisted.code == FUND_CODE
        assert persisted.tax_id == "00.000.000/0001-00"
        assert persisted.net_asset_value is None

    @pytest.mark.asyncio
    async def test_duplicate_code_is_conflict(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail(name="Original")

        result = await fund_service.create_fund(make_payload(name="Impostor"))

        assert_err(result, ErrorKind.CONFLICT)
        assert FUND_CODE in result.message
        fund_repo.create.assert_not_awaited()
        fund_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_integrity_error_is_conflict(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None
        fund_repo.create.side_effect = IntegrityError("INSERT", {}, Exception("FOREIGN KEY"))

        result = await fund_service.create_fund(make_payload(type_code=99))

        assert_err(result, ErrorKind.CONFLICT)

    @pytest.mark.asyncio
    async def test_invalid_input_never_reaches_repository(self, fund_service, fund_repo):
        result = await fund_service.create_fund(make_payload(name=" "))

        assert_err(result, ErrorKind.INVALID_INPUT)
        fund_repo.find_by_code.assert_not_awaited()
        fund_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_fund_is_invalid(self, fund_service):
        assert_err(await fund_service.create_fund(None), ErrorKind.INVALID_INPUT)

    @pytest.mark.asyncio
    async def test_operational_error_propagates(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None
        fund_repo.create.side_effect = OperationalError("INSERT", {}, Exception("locked"))

        with pytest.raises(OperationalError):
            await fund_service.create_fund(make_payload())


# ────────────────────────────────────────────────────────────────────────────
# update_fund / delete_fund
# ────────────────────────────────────────────────────────────────────────────


class TestUpdateFund:
    @pytest.mark.asyncio
    async def test_updates_fund_successfully(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail()
        fund_repo.update.return_value = 1

        result = await fund_service.update_fund(
            FUND_CODE, make_payload(name="Alpha II", net_asset_value=Decimal("10"))
        )

        assert result == Ok(None)
        code, fund = fund_repo.update.await_args.args
        assert code == FUND_CODE
        assert fund.name == "Alpha II"
        assert fund.net_asset_value == Decimal("10")

    @pytest.mark.asyncio
    async def test_path_code_wins_over_payload_code(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail()

        await fund_service.update_fund(FUND_CODE, make_payload(code="OTHER"))

        fund_repo.find_by_code.assert_awaited_once_with(FUND_CODE)
        assert fund_repo.update.await_args.args[0] == FUND_CODE

    @pytest.mark.asyncio
    async def test_not_found(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None

        result = await fund_service.update_fund("UNKNOWN", make_payload())

        assert_err(result, ErrorKind.NOT_FOUND)
        fund_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_code_is_invalid(self, fund_service, fund_repo):
        result = await fund_service.update_fund(" ", make_payload())

        assert_err(result, ErrorKind.INVALID_INPUT)
        fund_repo.find_by_code.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides", [{"code": ""}, {"name": ""}, {"tax_id": ""}, {"type_code": 0}]
    )
    async def test_invalid_payload(self, fund_service, fund_repo, overrides):
        result = await fund_service.update_fund(FUND_CODE, make_payload(**overrides))

        assert_err(result, ErrorKind.INVALID_INPUT)
        fund_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_integrity_error_is_conflict(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail()
        fund_repo.update.side_effect = IntegrityError("UPDATE", {}, Exception("FOREIGN KEY"))

        result = await fund_service.update_fund(FUND_CODE, make_payload(type_code=99))

        assert_err(result, ErrorKind.CONFLICT)


class TestDeleteFund:
    @pytest.mark.asyncio
    async def test_deletes_fund(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail()
        fund_repo.delete.return_value = 1

        result = await fund_service.delete_fund(FUND_CODE)

        assert result == Ok(None)
        fund_repo.delete.assert_awaited_once_with(FUND_CODE)

    @pytest.mark.asyncio
    async def test_not_found(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None

        result = await fund_service.delete_fund("UNKNOWN")

        assert_err(result, ErrorKind.NOT_FOUND)
        fund_repo.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_code_is_invalid(self, fund_service):
        assert_err(await fund_service.delete_fund(""), ErrorKind.INVALID_INPUT)


# ────────────────────────────────────────────────────────────────────────────
# move_net_asset_value
# ────────────────────────────────────────────────────────────────────────────


class TestMoveNetAssetValue:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "current,delta",
        [
            (None, Decimal("100.00")),
            (None, Decimal("0.01")),
            (Decimal("100.00"), Decimal("-100.00")),
            (Decimal("100.00"), Decimal("-40.50")),
            (Decimal("0"), Decimal("5")),
        ],
    )
    async def test_accepts_when_result_not_negative(
        self, fund_service, fund_repo, current, delta
    ):
        expected = (current or Decimal("0")) + delta
        fund_repo.find_by_code.side_effect = [
            make_detail(net_asset_value=current),
            make_detail(net_asset_value=expected),
        ]
        fund_repo.adjust_net_asset_value.return_value = 1

        result = await fund_service.move_net_asset_value(FUND_CODE, delta)

        assert isinstance(result, Ok)
        assert result.value.net_asset_value == expected
        fund_repo.adjust_net_asset_value.assert_awaited_once_with(FUND_CODE, delta)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "current,delta",
        [
            (None, Decimal("-0.01")),
            (Decimal("100.00"), Decimal("-150.00")),
            (Decimal("0"), Decimal("-1")),
        ],
    )
    async def test_rejects_negative_result(self, fund_service, fund_repo, current, delta):
        fund_repo.find_by_code.return_value = make_detail(net_asset_value=current)

        result = await fund_service.move_net_asset_value(FUND_CODE, delta)

        assert_err(result, ErrorKind.INVALID_OPERATION)
        fund_repo.adjust_net_asset_value.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_result_above_maximum(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail(net_asset_value=MAX_NET_ASSET_VALUE)

        result = await fund_service.move_net_asset_value(FUND_CODE, Decimal("0.01"))

        assert_err(result, ErrorKind.INVALID_OPERATION)
        fund_repo.adjust_net_asset_value.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_is_invalid_operation(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = make_detail(net_asset_value=Decimal("50"))
        fund_repo.adjust_net_asset_value.return_value = 0

        result = await fund_service.move_net_asset_value(FUND_CODE, Decimal("-50"))

        assert_err(result, ErrorKind.INVALID_OPERATION)

    @pytest.mark.asyncio
    async def test_not_found(self, fund_service, fund_repo):
        fund_repo.find_by_code.return_value = None

        result = await fund_service.move_net_asset_value("UNKNOWN", Decimal("1"))

        assert_err(result, ErrorKind.NOT_FOUND)
        fund_repo.adjust_net_asset_value.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_code_is_invalid(self, fund_service, fund_repo):
        result = await fund_service.move_net_asset_value("  ", Decimal("1"))

        assert_err(result, ErrorKind.INVALID_INPUT)
        fund_repo.find_by_code.assert_not_awaited()


# ────────────────────────────────────────────────────────────────────────────
# move_net_asset_value against the in-memory store
# ────────────────────────────────────────────────────────────────────────────


class TestMoveNetAssetValueOnStore:
    """Movements through the real repository keep exact cents."""

    @pytest.fixture()
    def store_service(self, session_factory):
        return FundService(FundRepository(session_factory))

    @pytest.mark.asyncio
    async def test_fractional_cents_drain_to_exactly_zero(self, store_service):
        await store_service.create_fund(make_payload(net_asset_value=Decimal("0.30")))

        first = await store_service.move_net_asset_value(FUND_CODE, Decimal("-0.10"))
        second = await store_service.move_net_asset_value(FUND_CODE, Decimal("-0.20"))

        assert isinstance(first, Ok)
        assert first.value.net_asset_value == Decimal("0.20")
        assert isinstance(second, Ok)
        assert second.value.net_asset_value == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_large_balance_keeps_its_cents(self, store_service):
        await store_service.create_fund(
            make_payload(net_asset_value=Decimal("9999999999999999.89"))
        )

        result = await store_service.move_net_asset_value(FUND_CODE, Decimal("0.01"))

        assert isinstance(result, Ok)
        assert result.value.net_asset_value == Decimal("9999999999999999.90")

    @pytest.mark.asyncio
    async def test_overdraw_by_one_cent_is_rejected(self, store_service):
        await store_service.create_fund(make_payload(net_asset_value=Decimal("0.30")))

        result = await store_service.move_net_asset_value(FUND_CODE, Decimal("-0.31"))

        assert_err(result, ErrorKind.INVALID_OPERATION)
        fetched = await store_service.get_fund(FUND_CODE)
        assert fetched.value.net_asset_value == Decimal("0.30")
