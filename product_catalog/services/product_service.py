"""Сервисный слой для управления товарами каталога."""

import logging
import math
from collections.abc import Sequence
from typing import Any

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from product_catalog.core.exceptions import (
    BadRequestError,
    FieldError,
    ProductNotFoundError,
    ProductValidationError,
)
from product_catalog.db.models import Product, utc_now
from product_catalog.schemas.product import ProductPayload

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
NAME_LENGTH_MESSAGE = (
    f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
)


def coerce_price(value: Any) -> float | None:
    """
    Приводит цену к числу с плавающей точкой.

    Строки вида "19.99" превращаются в 19.99. Булевы значения, NaN,
    бесконечность и прочие нечисловые значения ценой не считаются.

    Args:
        value: Цена в том виде, в каком пришла в запросе.

    Returns:
        Число или None, если значение не удалось разобрать.
    """
    if isinstance(value, bool):
        return None
    if not isinstance(value, int | float | str):
        return None
    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        # OverflowError: целое, не помещающееся в float
        return None
    if not math.isfinite(price):
        return None
    return price


def _validate_name(value: Any) -> tuple[str | None, list[FieldError]]:
    if not isinstance(value, str) or not value.strip():
        # Пустое имя нарушает сразу два ограничения
        return None, [
            FieldError("name", "Product name is required"),
            FieldError("name", NAME_LENGTH_MESSAGE),
        ]
    name = value.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        return None, [FieldError("name", NAME_LENGTH_MESSAGE)]
    return name, []


def _validate_price(value: Any) -> tuple[float | None, list[FieldError]]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, [FieldError("price", "Price is required")]
    price = coerce_price(value)
    if price is None:
        return None, [FieldError("price", "Price must be a decimal number")]
    if price <= 0:
        return None, [FieldError("price", "Price must be greater than 0")]
    return price, []


def validate_product_fields(
    payload: ProductPayload, partial: bool = False
) -> dict[str, Any]:
    """
    Проверяет поля товара и возвращает очищенные значения.

    Args:
        payload: Тело запроса.
        partial: Если True, проверяются только переданные поля
                 (частичное обновление).

    Returns:
        Словарь с проверенными значениями: имя без пробелов по краям,
        цена в виде числа.

    Raises:
        ProductValidationError: Если хотя бы одно поле не прошло проверку.
                                Ошибки перечислены для всех полей сразу.
    """
    provided = payload.model_fields_set if partial else {"name", "price"}
    cleaned: dict[str, Any] = {}
    errors: list[FieldError] = []

    if "name" in provided:
        name, name_errors = _validate_name(payload.name)
        errors.extend(name_errors)
        cleaned["name"] = name

    if "price" in provided:
        price, price_errors = _validate_price(payload.price)
        errors.extend(price_errors)
        cleaned["price"] = price

    if "description" in payload.model_fields_set or not partial:
        description = payload.description
        if description is None:
            cleaned["description"] = ""
        elif isinstance(description, str):
            cleaned["description"] = description
        else:
            errors.append(FieldError("description", "Description must be a string"))

    if errors:
        raise ProductValidationError(errors)
    return cleaned


async def get_all_products(session: AsyncSession) -> Sequence[Product]:
    """
    Возвращает список всех товаров, новые первыми.

    Args:
        session: Сессия базы данных.

    Returns:
        Последовательность объектов Product.
    """
    statement = select(Product).order_by(
        col(Product.created_at).desc(), col(Product.id).desc()
    )
    result = await session.execute(statement)
    return result.scalars().all()


async def get_product_by_id(session: AsyncSession, product_id: int) -> Product:
    """
    Находит товар по ID.

    Args:
        session: Сессия базы данных.
        product_id: ID товара.

    Returns:
        Объект Product.

    Raises:
        ProductNotFoundError: Если товар не найден.
    """
    db_product = await session.get(Product, product_id)
    if not db_product:
        raise ProductNotFoundError(product_id)
    return db_product


async def create_product(session: AsyncSession, payload: ProductPayload) -> Product:
    """
    Создает новый товар в базе данных.

    Args:
        session: Сессия базы данных.
        payload: Название, цена и (необязательно) описание.

    Returns:
        Созданный объект товара с присвоенными ID и временными метками.

    Raises:
        ProductValidationError: Если данные не прошли проверку.
    """
    fields = validate_product_fields(payload)
    db_product = Product(**fields)
    session.add(db_product)
    await session.commit()
    await session.refresh(db_product)
    logger.info("Product %s created", db_product.id)
    return db_product


async def update_product(
    session: AsyncSession, product_id: int, payload: ProductPayload
) -> Product:
    """
    Частично обновляет товар: перезаписываются только переданные поля.

    Args:
        session: Сессия базы данных.
        product_id: ID товара для обновления.
        payload: Новые значения полей.

    Returns:
        Обновленный объект Product.

    Raises:
        ProductNotFoundError: Если товар не найден.
        ProductValidationError: Если данные не прошли проверку.
    """
    db_product = await get_product_by_id(session, product_id)
    fields = validate_product_fields(payload, partial=True)

    for field_name, value in fields.items():
        setattr(db_product, field_name, value)
    db_product.updated_at = utc_now()

    session.add(db_product)
    await session.commit()
    await session.refresh(db_product)
    logger.info("Product %s updated: %s", product_id, sorted(fields))
    return db_product


async def delete_product(session: AsyncSession, product_id: int) -> None:
    """
    Удаляет товар без возможности восстановления.

    Raises:
        ProductNotFoundError: Если товар не найден.
    """
    db_product = await get_product_by_id(session, product_id)
    await session.delete(db_product)
    await session.commit()
    logger.info("Product %s deleted", product_id)


async def search_products(
    session: AsyncSession, query: str | None
) -> Sequence[Product]:
    """
    Ищет товары по подстроке в названии или описании без учета регистра.

    Args:
        session: Сессия базы данных.
        query: Строка поиска.

    Returns:
        Найденные товары, новые первыми. Пустой результат не является ошибкой.

    Raises:
        BadRequestError: Если строка поиска пустая или не передана.
    """
    term = (query or "").strip()
    if not term:
        raise BadRequestError("Search term is required")

    statement = (
        select(Product)
        .where(
            or_(
                col(Product.name).icontains(term, autoescape=True),
                col(Product.description).icontains(term, autoescape=True),
            )
        )
        .order_by(col(Product.created_at).desc(), col(Product.id).desc())
    )
    result = await session.execute(statement)
    return result.scalars().all()

