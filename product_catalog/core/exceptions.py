"""Доменные исключения каталога товаров."""

from dataclasses import asdict, dataclass
from typing import Any


class ProductCatalogError(Exception):
    """
    Базовое исключение каталога.

    Атрибуты:
        status_code: HTTP-статус, в который транслируется ошибка.
        message: Человекочитаемое сообщение для клиента.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


@dataclass(frozen=True)
class FieldError:
    """Нарушение одного ограничения одного поля."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class ProductValidationError(ProductCatalogError):
    """Ошибка валидации полей товара (по одной записи на ограничение)."""

    status_code = 400
    default_message = "Validation error"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        self.errors = errors
        super().__init__(message)

    @property
    def fields(self) -> set[str]:
        return {error.field for error in self.errors}

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = [error.to_dict() for error in self.errors]
        return payload


class ProductNotFoundError(ProductCatalogError):
    status_code = 404
    default_message = "Product not found"

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__()


class BadRequestError(ProductCatalogError):
    """Некорректный запрос, например отсутствует обязательный параметр."""

    status_code = 400
    default_message = "Bad request"
