from decimal import Decimal
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from sortie.core.config import settings
from sortie.core.i18n import get_language, translator

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

FLASH_CATEGORIES = ("success", "error", "warning")


def i18n_context(request: Request) -> dict:
    lang = get_language(request)
    return {"lang": lang, "t": translator(lang)}


def flash_context(request: Request) -> dict:
    messages = []
    for category in FLASH_CATEGORIES:
        message = request.cookies.get(f"flash_{category}")
        if message:
            messages.append({"category": category, "message": message})
    return {"flash_messages": messages}


def format_money(value) -> str:
    if value is None:
        return "-"
    amount = Decimal(str(value)).quantize(Decimal("0.01"))
    return f"{amount:,} {settings.CURRENCY}"


templates = Jinja2Templates(
    directory=str(TEMPLATES_DIR),
    context_processors=[i18n_context, flash_context],
)
templates.env.filters["money"] = format_money
