"""Модели базы данных проекта."""

import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class Product(SQLModel, table=True):
    """Модель товара каталога."""

    __tablename__ = "products"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=100)
    price: float
    description: str = Field(default="")
    created_at: datetime.datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True)
    )
    updated_at: datetime.datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True)
    )
