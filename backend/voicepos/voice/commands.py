"""Voice command sets: global navigation and per-page commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

from voicepos.pos.session import PosSession
from voicepos.schemas.product import Product
from voicepos.voice.matcher import VoiceCommand

POS_PAGES = ("/pos-session", "/pos-shop")

# (command, alternate phrases, route)
GLOBAL_ROUTES: list[tuple[str, list[str], str]] = [
    ("home", ["go home", "dashboard", "main page"], "/"),
    ("products", ["show products", "product list"], "/products"),
    ("orders", ["show orders", "order list"], "/orders"),
    ("customers", ["show customers", "customer list"], "/customers"),
    ("reports", ["show reports", "sales report"], "/reports"),
    ("settings", ["open settings", "preferences"], "/settings"),
    ("users", ["manage users", "user list"], "/users"),
    ("pos", ["point of sale", "open pos"], "/pos-session"),
    ("shop", ["open shop", "storefront"], "/pos-shop"),
]

HELP_TEXT = (
    "Voice commands: 'home', 'products', 'orders', 'customers', 'reports', "
    "'settings', 'users', 'pos', 'shop', 'logout', 'help'"
)


@dataclass
class PageHandlers:
    """Handlers page commands call into; UI-only effects go through callbacks."""
    navigate: Callable[[str], Any]
    notify: Callable[[str], Any]
    open_dialog: Callable[[str], Any]
    session: PosSession | None = None
    products: list[Product] = field(default_factory=list)


def global_commands(navigate: Callable[[str], Any], logout: Callable[[], Any]) -> list[VoiceCommand]:
    commands = [
        VoiceCommand(command=name, action=partial(navigate, route), phrases=list(phrases))
        for name, phrases, route in GLOBAL_ROUTES
    ]
    commands.append(VoiceCommand(command="logout", action=logout, phrases=["log out", "sign out"]))
    return commands


def is_pos_page(page: str) -> bool:
    return any(page == p or page.startswith(p + "/") for p in POS_PAGES)


def pos_commands(session: PosSession, products: list[Product]) -> list[VoiceCommand]:
    commands = [
        VoiceCommand("checkout", session.begin_checkout, ["pay now", "process payment"]),
        VoiceCommand("clear cart", session.clear_cart, ["empty cart", "remove items"]),
        VoiceCommand("confirm payment", session.confirm_payment, ["complete payment", "finish sale"]),
        VoiceCommand("cancel checkout", session.cancel_checkout, ["cancel payment", "back to cart"]),
    ]
    commands += [
        VoiceCommand(f"add {product.name.lower()}", partial(session.add_product, product.id))
        for product in products
    ]
    return commands


def page_commands(page: str, handlers: PageHandlers) -> list[VoiceCommand]:
    commands = [
        VoiceCommand("help", partial(handlers.notify, HELP_TEXT), ["show help", "what can i say"]),
    ]
    if page == "/":
        commands.append(VoiceCommand(
            "new sale", partial(handlers.navigate, "/pos-session"),
            ["start sale", "begin sale", "open register"],
        ))
    elif page == "/products":
        commands.append(VoiceCommand(
            "add product", partial(handlers.open_dialog, "add-product"),
            ["new product", "create product"],
        ))
    elif page == "/customers":
        commands.append(VoiceCommand(
            "add customer", partial(handlers.open_dialog, "add-customer"),
            ["new customer", "create customer"],
        ))
    elif is_pos_page(page) and handlers.session is not None:
        commands += pos_commands(handlers.session, handlers.products)
    return commands
