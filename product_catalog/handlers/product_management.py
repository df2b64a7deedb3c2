"""Обработчики для FSM-сценариев управления товарами."""

import logging

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from product_catalog.client.api import ProductAPI, ProductAPIError
from product_catalog.client.forms import (
    FormValidationError,
    parse_price,
    validate_name,
    validate_product_form,
)
from product_catalog.client.view_model import ProductListViewModel
from product_catalog.fsm.product_states import ProductState
from product_catalog.handlers.formatting import format_price

router = Router()

# Ответ "-" оставляет поле пустым (при создании) или без изменений (при правке)
SKIP = "-"


def _parse_product_id(text: str | None) -> int | None:
    if not text or not text.strip().lstrip("#").isdigit():
        return None
    return int(text.strip().lstrip("#"))


# --- Универсальный отменщик FSM ---
@router.message(Command(commands=["cancel"]))
@router.message(F.text.casefold() == "cancel")
async def cancel_handler(
    message: Message, state: FSMContext, view_model: ProductListViewModel
) -> None:
    """
    Позволяет пользователю отменить любое действие FSM, включая режим поиска.
    """
    current_state = await state.get_state()
    if current_state is None:
        await message.answer("Nothing to cancel.")
        return

    logging.info("Cancelling state %r", current_state)
    view_model.close()
    await state.clear()
    await message.answer("Action cancelled.")


# --- Сценарий добавления товара ---
@router.message(Command(commands=["add"]))
async def handle_add_product_start(message: Message, state: FSMContext) -> None:
    """
    Начало сценария добавления товара.
    """
    await state.set_state(ProductState.add_waiting_for_name)
    await message.answer("Enter the new product name:")


@router.message(ProductState.add_waiting_for_name)
async def process_add_product_name(message: Message, state: FSMContext) -> None:
    """
    Обработка названия товара и запрос цены.
    """
    try:
        name = validate_name(message.text or "")
    except FormValidationError as e:
        await message.answer(f"{e}. Try again.")
        return
    await state.update_data(name=name)
    await state.set_state(ProductState.add_waiting_for_price)
    await message.answer("Now enter the price (e.g. 999.99):")


@router.message(ProductState.add_waiting_for_price)
async def process_add_product_price(message: Message, state: FSMContext) -> None:
    """
    Обработка цены и запрос описания.
    """
    try:
        parse_price(message.text or "")
    except FormValidationError as e:
        await message.answer(f"{e}. Try again.")
        return
    await state.update_data(price=(message.text or "").strip())
    await state.set_state(ProductState.add_waiting_for_description)
    await message.answer(f"Enter a description or '{SKIP}' to skip:")


@router.message(ProductState.add_waiting_for_description)
async def process_add_product_description(
    message: Message, state: FSMContext, view_model: ProductListViewModel
) -> None:
    """
    Обработка описания и создание товара.
    """
    description = (message.text or "").strip()
    user_data = await state.get_data()
    try:
        form = validate_product_form(
            user_data["name"],
            user_data["price"],
            "" if description == SKIP else description,
        )
        # Об успехе или ошибке API сообщит слушатель модели представления
        await view_model.create_product(form)
    except FormValidationError as e:
        await message.answer(str(e))
    except Exception:
        logging.exception("Error in process_add_product_description")
        await message.answer("An internal error occurred. Please try again later.")
    finally:
        await state.clear()


# --- Сценарий изменения товара ---
@router.message(Command(commands=["edit"]))
async def handle_edit_product_start(message: Message, state: FSMContext) -> None:
    """
    Начало сценария изменения товара.
    """
    await state.set_state(ProductState.edit_waiting_for_id)
    await message.answer("Enter the ID of the product to edit:")


@router.message(ProductState.edit_waiting_for_id)
async def process_edit_product_id(
    message: Message, state: FSMContext, api: ProductAPI
) -> None:
    """
    Загрузка товара по ID и запрос нового названия.
    """
    product_id = _parse_product_id(message.text)
    if product_id is None:
        await message.answer("Please enter a numeric product ID.")
        return

    try:
        product = await api.get(product_id)
    except ProductAPIError as e:
        await message.answer(f"Error: {e.message}")
        await state.clear()
        return

    await state.update_data(
        product_id=product.id,
        name=product.name,
        price=str(product.price),
        description=product.description,
    )
    await state.set_state(ProductState.edit_waiting_for_name)
    await message.answer(
        f"Editing #{product.id} {product.name} ({format_price(product.price)}).\n"
        f"Enter a new name or '{SKIP}' to keep it:"
    )


@router.message(ProductState.edit_waiting_for_name)
async def process_edit_product_name(message: Message, state: FSMContext) -> None:
    text = (message.text or "").strip()
    if text != SKIP:
        try:
            await state.update_data(name=validate_name(text))
        except FormValidationError as e:
            await message.answer(f"{e}. Try again.")
            return
    await state.set_state(ProductState.edit_waiting_for_price)
    await message.answer(f"Enter a new price or '{SKIP}' to keep it:")


@router.message(ProductState.edit_waiting_for_price)
async def process_edit_product_price(message: Message, state: FSMContext) -> None:
    text = (message.text or "").strip()
    if text != SKIP:
        try:
            parse_price(text)
        except FormValidationError as e:
            await message.answer(f"{e}. Try again.")
            return
        await state.update_data(price=text)
    await state.set_state(ProductState.edit_waiting_for_description)
    await message.answer(f"Enter a new description or '{SKIP}' to keep it:")


@router.message(ProductState.edit_waiting_for_description)
async def process_edit_product_description(
    message: Message, state: FSMContext, view_model: ProductListViewModel
) -> None:
    """
    Сохранение изменений. Локальный список обновляется сразу.
    """
    text = (message.text or "").strip()
    user_data = await state.get_data()
    description = user_data["description"] if text == SKIP else text
    try:
        form = validate_product_form(user_data["name"], user_data["price"], description)
        await view_model.update_product(user_data["product_id"], form)
    except FormValidationError as e:
        await message.answer(str(e))
    except Exception:
        logging.exception("Error in process_edit_product_description")
        await message.answer("An internal error occurred. Please try again later.")
    finally:
        await state.clear()


# --- Сценарий удаления товара ---
@router.message(Command(commands=["delete"]))
async def handle_delete_product_start(message: Message, state: FSMContext) -> None:
    """
    Начало сценария удаления товара.
    """
    await state.set_state(ProductState.delete_waiting_for_id)
    await message.answer("Enter the ID of the product to delete:")


@router.message(ProductState.delete_waiting_for_id)
async def process_delete_product_id(
    message: Message, state: FSMContext, view_model: ProductListViewModel
) -> None:
    """
    Удаление товара. Запись сразу убирается из локального списка.
    """
    product_id = _parse_product_id(message.text)
    if product_id is None:
        await message.answer("Please enter a numeric product ID.")
        return

    try:
        await view_model.delete_product(product_id)
    except Exception:
        logging.exception("Error in process_delete_product_id")
        await message.answer("An internal error occurred. Please try again later.")
    finally:
        await state.clear()
