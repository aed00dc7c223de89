"""Transient visual feedback: field highlighting and toast notifications."""

from __future__ import annotations

import logging

from bs4 import Tag

from services.form_document import FormDocument, get_style_property, set_style_property
from webformfiller.utils import render_style

logger = logging.getLogger(__name__)

HIGHLIGHT_COLOR = "#e6f7ff"
HIGHLIGHT_SECONDS = 2.0
NOTIFICATION_SECONDS = 3.0
NOTIFICATION_FADE_SECONDS = 0.5

_NOTIFICATION_STYLE = {
    "position": "fixed",
    "top": "20px",
    "right": "20px",
    "padding": "12px 20px",
    "background-color": "#1890ff",
    "color": "white",
    "border-radius": "4px",
    "z-index": "9999",
    "box-shadow": "0 2px 8px rgba(0, 0, 0, 0.15)",
    "font-size": "14px",
}


def highlight_filled_field(document: FormDocument, element: Tag) -> None:
    """Tint ``element`` and restore its previous background after a short delay.

    Purely cosmetic: failures are logged and never reach the caller.
    """

    try:
        original = get_style_property(element, "background-color")
        set_style_property(element, "background-color", HIGHLIGHT_COLOR)

        def _restore() -> None:
            with document.lock:
                set_style_property(element, "background-color", original)

        document.scheduler.call_later(HIGHLIGHT_SECONDS, _restore)
    except Exception:
        logger.warning("Could not highlight filled control <%s>", element.name, exc_info=True)


def show_notification(document: FormDocument, message: str) -> Tag:
    """Append a toast to the page body; it fades after 3s and is removed 0.5s later."""

    with document.lock:
        notification = document.soup.new_tag("div")
        notification.string = message
        notification["class"] = ["webformfiller-notification"]
        notification["style"] = render_style(_NOTIFICATION_STYLE)
        document.body().append(notification)
    logger.info("Notification: %s", message)

    def _remove() -> None:
        with document.lock:
            if notification.parent is not None:
                notification.extract()

    def _fade() -> None:
        with document.lock:
            set_style_property(notification, "opacity", "0")
            set_style_property(notification, "transition", "opacity 0.5s ease")
        document.scheduler.call_later(NOTIFICATION_FADE_SECONDS, _remove)

    document.scheduler.call_later(NOTIFICATION_SECONDS, _fade)
    return notification


__all__ = ["HIGHLIGHT_COLOR", "HIGHLIGHT_SECONDS", "highlight_filled_field", "show_notification"]
