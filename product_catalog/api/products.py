"""REST-маршруты для товаров: /api/products."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from product_catalog.db.session import get_db_session
from product_catalog.schemas.product import (
    ErrorResponse,
    MessageResponse,
    ProductListResponse,
    ProductPayload,
    ProductRead,
    ProductResponse,
)
from product_catalog.services import product_service

router = APIRouter(prefix="/products", tags=["products"])

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
# Диапазон столбца INTEGER: большие значения драйвер БД не примет
ProductId = Annotated[int, Path(ge=1, le=2**31 - 1)]

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}
BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}


@router.get("", response_model=ProductListResponse)
async def list_products(session: SessionDep) -> ProductListResponse:
    """Все товары, новые первыми."""
    products = await product_service.get_all_products(session)
    data = [ProductRead.model_validate(product) for product in products]
    return ProductListResponse(count=len(data), data=data)


# Маршрут поиска объявлен до /{product_id}, иначе "search" разбирался бы как ID
@router.get("/search", response_model=ProductListResponse, responses=BAD_REQUEST)
async def search_products(
    session: SessionDep, q: Annotated[str | None, Query()] = None
) -> ProductListResponse:
    """Поиск по подстроке в названии или описании."""
    products = await product_service.search_products(session, q)
    data = [ProductRead.model_validate(product) for product in products]
    return ProductListResponse(count=len(data), data=data)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    response_model_exclude_none=True,
    responses=NOT_FOUND,
)
async def get_product(product_id: ProductId, session: SessionDep) -> ProductResponse:
    product = await product_service.get_product_by_id(session, product_id)
    return ProductResponse(data=ProductRead.model_validate(product))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
)
async def create_product(
    payload: ProductPayload, session: SessionDep
) -> ProductResponse:
    product = await product_service.create_product(session, payload)
    return ProductResponse(
        message="Product created successfully",
        data=ProductRead.model_validate(product),
    )


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={**NOT_FOUND, **BAD_REQUEST},
)
async def update_product(
    product_id: ProductId, payload: ProductPayload, session: SessionDep
) -> ProductResponse:
    product = await product_service.update_product(session, product_id, payload)
    return ProductResponse(
        message="Product updated successfully",
        data=ProductRead.model_validate(product),
    )


@router.delete("/{product_id}", response_model=MessageResponse, responses=NOT_FOUND)
async def delete_product(product_id: ProductId, session: SessionDep) -> MessageResponse:
    await product_service.delete_product(session, product_id)
    return MessageResponse(message="Product deleted successfully")
