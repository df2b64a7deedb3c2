"""Схемы запросов и ответов REST API."""

import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class ProductPayload(BaseModel):
    """
    Тело запроса на создание или изменение товара.

    Типы полей намеренно не сужены: цена может прийти строкой или числом,
    а все проверки с понятными сообщениями выполняет сервисный слой.
    Для частичного обновления учитываются только переданные поля
    (model_fields_set).
    """

    model_config = ConfigDict(extra="ignore")

    name: Any = None
    price: Any = None
    description: Any = None


class ProductRead(BaseModel):
    """Товар в ответе API. Цена всегда число."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    description: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class FieldErrorRead(BaseModel):
    field: str
    message: str


class ProductResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: ProductRead


class ProductListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[ProductRead]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: list[FieldErrorRead] | None = None
    error: str | None = None
