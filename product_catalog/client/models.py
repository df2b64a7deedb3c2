"""Модели данных клиента каталога."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class Product(BaseModel):
    """
    Товар, каким его видит клиент.

    Цена всегда приводится к float, даже если сервер прислал строку "19.99".
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    price: float
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, value: object) -> object:
        if isinstance(value, str):
            return float(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, value: object) -> object:
        return "" if value is None else value


class ProductFormData(BaseModel):
    """Проверенные данные формы создания или изменения товара."""

    name: str
    price: float
    description: str = ""
