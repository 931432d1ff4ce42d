"""
Fund API endpoints.

- GET    /funds                       — List all funds
- GET    /funds/{code}                — Retrieve a specific fund
- POST   /funds                       — Create a new fund
- PUT    /funds/{code}                — Update an existing fund
- DELETE /funds/{code}                — Delete a fund
- PUT    /funds/{code}/netAssetValue  — Increase / decrease the net asset value

Handlers only unwrap service results: an ``Err`` is turned into its boundary
exception by :func:`_unwrap` and rendered by the global exception handlers.
"""

from typing import List, Optional, TypeVar

from fastapi import APIRouter, Depends, Request, Response, status

from app.core.exceptions import NotFoundException, raise_for_error
from app.core.results import Err, Result
from app.db.session import AsyncSessionLocal
from app.models.fund import FundDetail
from app.repositories.fund_repo import FundRepository
from app.schemas.common import ErrorResponse, ValidationErrorResponse
from app.schemas.fund import FundPayload, FundResponse
from app.schemas.movement import MovementRequest, MovementResponse
from app.services.fund_service import FundService

router = APIRouter()

T = TypeVar("T")


# ── Dependency injection ──
# Tests swap this dependency for a mocked service via ``dependency_overrides``.


def _get_fund_service() -> FundService:
    """Build a FundService whose repository opens one session per operation."""
    return FundService(FundRepository(AsyncSessionLocal))


def _unwrap(result: Result[T]) -> T:
    if isinstance(result, Err):
        raise_for_error(result)
    return result.value


_BAD_REQUEST = {"model": ValidationErrorResponse, "description": "Invalid input"}
_NOT_FOUND = {"model": ErrorResponse, "description": "Fund not found"}


# ── Endpoints ──


@router.get(
    "",
    response_model=List[FundResponse],
    summary="List all funds",
)
async def list_funds(
    service: FundService = Depends(_get_fund_service),
) -> List[FundDetail]:
    return _unwrap(await service.list_funds())


@router.get(
    "/{code}",
    response_model=FundResponse,
    summary="Get a specific fund",
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND},
)
async def get_fund(
    code: str,
    service: FundService = Depends(_get_fund_service),
) -> FundDetail:
    fund: Optional[FundDetail] = _unwrap(await service.get_fund(code))
    if fund is None:
        raise NotFoundException.for_fund(code)
    return fund


@router.post(
    "",
    response_model=FundResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new fund",
    responses={
        400: _BAD_REQUEST,
        409: {"model": ErrorResponse, "description": "Duplicate code or constraint violation"},
    },
)
async def create_fund(
    fund: FundPayload,
    request: Request,
    response: Response,
    service: FundService = Depends(_get_fund_service),
) -> FundDetail:
    created = _unwrap(await service.create_fund(fund))
    response.headers["Location"] = str(request.url_for("get_fund", code=created.code))
    return created


@router.put(
    "/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Update an existing fund",
    description=(
        "Full replacement of name, tax id, type code and net asset value. "
        "The fund code itself never changes."
    ),
    responses={
        400: _BAD_REQUEST,
        404: _NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Constraint violation"},
    },
)
async def update_fund(
    code: str,
    fund: FundPayload,
    service: FundService = Depends(_get_fund_service),
) -> Response:
    _unwrap(await service.update_fund(code, fund))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{code}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a fund",
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND},
)
async def delete_fund(
    code: str,
    service: FundService = Depends(_get_fund_service),
) -> Response:
    _unwrap(await service.delete_fund(code))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{code}/netAssetValue",
    response_model=MovementResponse,
    summary="Move a fund's net asset value",
    description=(
        "``ADD`` increases and ``SUB`` decreases the net asset value by "
        "``amount``.  A movement that would leave the value negative is "
        "rejected with 400."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid payload or negative result"},
        404: _NOT_FOUND,
    },
)
async def move_net_asset_value(
    code: str,
    movement: MovementRequest,
    service: FundService = Depends(_get_fund_service),
) -> MovementResponse:
    updated = _unwrap(await service.move_net_asset_value(code, movement.signed_amount))
    return MovementResponse(
        message=movement.describe(),
        updated_fund=FundResponse.model_validate(updated),
    )
