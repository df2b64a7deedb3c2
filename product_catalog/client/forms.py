"""Проверка пользовательского ввода в формах товара."""

from product_catalog.client.models import ProductFormData


class FormValidationError(ValueError):
    """Ввод в форме не прошел проверку; текст ошибки можно показать пользователю."""


def parse_price(raw: str) -> float:
    """
    Разбирает цену, введенную пользователем.

    Запятая принимается как десятичный разделитель.

    Raises:
        FormValidationError: Если цена не является положительным числом.
    """
    try:
        price = float(raw.strip().replace(",", "."))
    except ValueError:
        raise FormValidationError("Price must be a positive number") from None
    if not price > 0 or price == float("inf"):
        raise FormValidationError("Price must be a positive number")
    return price


def validate_name(raw: str) -> str:
    name = raw.strip()
    if not name:
        raise FormValidationError("Name is required")
    return name


def validate_product_form(
    name: str, price: str, description: str = ""
) -> ProductFormData:
    """
    Проверяет поля формы и собирает данные для отправки на сервер.

    Args:
        name: Название товара.
        price: Цена в виде введенной строки.
        description: Описание (необязательно).

    Returns:
        Данные формы с обрезанными пробелами и числовой ценой.

    Raises:
        FormValidationError: С первым найденным нарушением.
    """
    return ProductFormData(
        name=validate_name(name),
        price=parse_price(price),
        description=description.strip(),
    )
