"""Состояния (FSM) для форм товара и поиска."""

from aiogram.fsm.state import State, StatesGroup


class ProductState(StatesGroup):
    """
    Состояния для сценариев добавления, изменения и удаления товара.
    """

    # Состояния для добавления
    add_waiting_for_name = State()
    add_waiting_for_price = State()
    add_waiting_for_description = State()

    # Состояния для изменения
    edit_waiting_for_id = State()
    edit_waiting_for_name = State()
    edit_waiting_for_price = State()
    edit_waiting_for_description = State()

    # Состояние для удаления
    delete_waiting_for_id = State()


class SearchState(StatesGroup):
    """Режим поиска: каждое сообщение - новое значение строки поиска."""

    typing = State()
