"""Форматирование товаров для сообщений в чате."""

from collections.abc import Sequence

from product_catalog.client.models import Product

# Ограничение, чтобы не упереться в лимит длины сообщения Telegram
MAX_LISTED_PRODUCTS = 30


def format_price(price: float) -> str:
    return f"{price:.2f} €"


def format_product(product: Product) -> str:
    line = f"#{product.id} {product.name} - {format_price(product.price)}"
    if product.description.strip():
        line += f"\n    {product.description.strip()}"
    return line


def format_product_list(products: Sequence[Product], query: str = "") -> str:
    if not products:
        return f"No products match '{query}'." if query else "No products yet."

    count = len(products)
    title = f"{count} product{'s' if count != 1 else ''}"
    if query:
        title += f" for '{query}'"
    lines = [title + ":"]
    lines.extend(format_product(product) for product in products[:MAX_LISTED_PRODUCTS])
    if count > MAX_LISTED_PRODUCTS:
        lines.append(f"... and {count - MAX_LISTED_PRODUCTS} more")
    return "\n".join(lines)
