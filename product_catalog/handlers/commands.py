"""Обработчики базовых команд бота: список, обновление, поиск."""

from aiogram import F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from product_catalog.client.view_model import ProductListViewModel
from product_catalog.fsm.product_states import SearchState

# Создаем "роутер" для наших хендлеров.
router = Router()

HELP_TEXT = (
    "Product catalog commands:\n"
    "/list - show all products\n"
    "/refresh - clear the search and reload the list\n"
    "/search - search mode: every message updates the search\n"
    "/add - add a product\n"
    "/edit - edit a product\n"
    "/delete - delete a product\n"
    "/cancel - cancel the current action"
)


@router.message(CommandStart())
@router.message(Command(commands=["help"]))
async def handle_start(message: Message) -> None:
    """
    Обработчик команд /start и /help.
    """
    await message.answer(HELP_TEXT)


@router.message(Command(commands=["list"]))
async def handle_list_products(
    message: Message, view_model: ProductListViewModel
) -> None:
    """
    Обработчик команды /list.
    Загружает полный список; модель сама отправит его в чат.

    Args:
        message: Объект сообщения от пользователя.
        view_model: Модель представления чата (передается через middleware).
    """
    await view_model.mount()


@router.message(Command(commands=["refresh"]))
async def handle_refresh(
    message: Message, state: FSMContext, view_model: ProductListViewModel
) -> None:
    """
    Обработчик команды /refresh: сбрасывает поиск и перезагружает список.
    """
    if await state.get_state() == SearchState.typing.state:
        await state.clear()
    await view_model.refresh()


@router.message(Command(commands=["search"]))
async def handle_search_start(
    message: Message,
    state: FSMContext,
    command: CommandObject,
    view_model: ProductListViewModel,
) -> None:
    """
    Включает режим поиска. Текст после команды сразу становится запросом.
    """
    await state.set_state(SearchState.typing)
    if command.args:
        view_model.on_query_change(command.args)
        return
    await message.answer("Search mode: send text to search, /cancel to stop.")


@router.message(SearchState.typing, F.text, ~F.text.startswith("/"))
async def process_search_text(
    message: Message, view_model: ProductListViewModel
) -> None:
    """
    Каждое сообщение в режиме поиска - новое значение строки поиска.
    Поиск выполнится после паузы во вводе.
    """
    view_model.on_query_change(message.text or "")
