"""Write field values into live HTML form controls."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from bs4 import Tag
from dateutil import parser as date_parser

from services.field_detector import STAR_SELECTOR, resolve_kind
from services.form_document import (
    FormDocument,
    class_list,
    option_text,
    option_value,
    set_class_list,
)
from services.notifications import highlight_filled_field
from webformfiller.models import ControlKind
from webformfiller.utils import format_number, parse_float_prefix, parse_int_prefix

logger = logging.getLogger(__name__)

TRUTHY_VALUES = {"yes", "true", "1", "on", "y"}
CONTINUOUS_KINDS = {
    ControlKind.TEXT,
    ControlKind.TEXTAREA,
    ControlKind.RANGE,
    ControlKind.DATE,
    ControlKind.DATETIME,
    ControlKind.RATING,
}
STAR_ACTIVE_CLASSES = ("selected", "active", "ant-rate-star-full")
STAR_EMPTY_CLASS = "ant-rate-star-zero"
RANGE_DEFAULT_MIN = 0.0
RANGE_DEFAULT_MAX = 100.0
# Missing date parts are taken from here, never from the current day.
DATE_DEFAULT = datetime(1970, 1, 1)

Handler = Callable[[Tag, str], bool]


class HTMLFiller:
    """Coerce string values into controls of a :class:`FormDocument`.

    Each handler returns True when it changed the control. Only then are the
    ``input``/``change`` events fired and the control highlighted.
    """

    def __init__(self, document: FormDocument) -> None:
        self.document = document
        self._handlers: Dict[ControlKind, Handler] = {
            ControlKind.TEXT: self._fill_text,
            ControlKind.TEXTAREA: self._fill_text,
            ControlKind.SELECT: self._fill_select,
            ControlKind.MULTISELECT: self._fill_multiselect,
            ControlKind.CHECKBOX: self._fill_checkbox,
            ControlKind.RADIO: self._fill_radio,
            ControlKind.RANGE: self._fill_range,
            ControlKind.DATE: self._fill_date,
            ControlKind.DATETIME: self._fill_datetime,
            ControlKind.RATING: self._fill_rating,
        }
        missing = set(ControlKind) - set(self._handlers)
        if missing:
            raise TypeError(f"No fill handler for control kinds: {sorted(kind.value for kind in missing)}")

    def fill(self, element: Tag, value: str, kind: Optional[ControlKind] = None) -> bool:
        """Write ``value`` into ``element`` and notify listeners as a user edit would."""

        resolved = kind or resolve_kind(element)
        text = "" if value is None else str(value)
        try:
            applied = self._handlers[resolved](element, text)
        except Exception:
            logger.exception("Error filling <%s id=%r> with %r", element.name, element.get("id"), text)
            return False

        if not applied:
            logger.debug("Value %r left <%s id=%r> unchanged", text, element.name, element.get("id"))
            return False

        if resolved in CONTINUOUS_KINDS:
            self.document.dispatch_event(element, "input")
        self.document.dispatch_event(element, "change")
        highlight_filled_field(self.document, element)
        return True

    def _fill_text(self, element: Tag, value: str) -> bool:
        if element.name == "textarea":
            element.string = value
        else:
            element["value"] = value
        return True

    def _fill_select(self, element: Tag, value: str) -> bool:
        target = value.lower()
        if not target:
            return False
        for option in element.find_all("option"):
            if _option_matches(option, target):
                for other in element.find_all("option"):
                    other.attrs.pop("selected", None)
                option["selected"] = "selected"
                return True
        return False

    def _fill_multiselect(self, element: Tag, value: str) -> bool:
        if "," not in value:
            return self._fill_select(element, value)

        tokens = [token.strip().lower() for token in value.split(",")]
        tokens = [token for token in tokens if token]
        options = element.find_all("option")
        for option in options:
            option.attrs.pop("selected", None)
        for option in options:
            text = option_text(option).lower()
            option_val = option_value(option).lower()
            if any(token in text or token in option_val for token in tokens):
                option["selected"] = "selected"
        return True

    def _fill_checkbox(self, element: Tag, value: str) -> bool:
        _set_checked(element, value.strip().lower() in TRUTHY_VALUES)
        return True

    def _fill_radio(self, element: Tag, value: str) -> bool:
        own = (element.get("value") if element.has_attr("value") else "on").lower()
        target = value.lower()
        should_check = own == target or target in own or own in target
        if should_check:
            for radio in self.document.radio_group(element):
                if radio is not element:
                    _set_checked(radio, False)
        _set_checked(element, should_check)
        return True

    def _fill_range(self, element: Tag, value: str) -> bool:
        numeric = parse_float_prefix(value)
        if numeric is None:
            return False
        minimum = parse_float_prefix(element.get("min"))
        maximum = parse_float_prefix(element.get("max"))
        minimum = RANGE_DEFAULT_MIN if minimum is None else minimum
        maximum = RANGE_DEFAULT_MAX if maximum is None else maximum
        clamped = min(max(numeric, minimum), maximum)
        element["value"] = format_number(clamped)
        return True

    def _fill_date(self, element: Tag, value: str) -> bool:
        parsed = _parse_datetime(value)
        if parsed is None:
            return False
        element["value"] = parsed.strftime("%Y-%m-%d")
        return True

    def _fill_datetime(self, element: Tag, value: str) -> bool:
        parsed = _parse_datetime(value)
        if parsed is None:
            return False
        element["value"] = parsed.strftime("%Y-%m-%dT%H:%M")
        return True

    def _fill_rating(self, element: Tag, value: str) -> bool:
        level = parse_int_prefix(value)
        if level is None:
            return False
        element["value"] = str(level)

        container = element.parent
        if isinstance(container, Tag):
            self._paint_stars(container.select(STAR_SELECTOR), level)
        return True

    @staticmethod
    def _paint_stars(stars: List[Tag], level: int) -> None:
        for index, star in enumerate(stars):
            classes = class_list(star)
            if index < level:
                classes = [cls for cls in classes if cls != STAR_EMPTY_CLASS]
                classes.extend(cls for cls in STAR_ACTIVE_CLASSES if cls not in classes)
            else:
                classes = [cls for cls in classes if cls not in STAR_ACTIVE_CLASSES]
                if STAR_EMPTY_CLASS not in classes:
                    classes.append(STAR_EMPTY_CLASS)
            set_class_list(star, classes)


def _option_matches(option: Tag, target: str) -> bool:
    for candidate in (option_text(option).lower(), option_value(option).lower()):
        if target in candidate:
            return True
        if candidate and candidate in target:
            return True
    return False


def _set_checked(element: Tag, checked: bool) -> None:
    if checked:
        element["checked"] = "checked"
    else:
        element.attrs.pop("checked", None)


def _parse_datetime(value: str):
    try:
        parsed = date_parser.parse(value, default=DATE_DEFAULT)
    except (ValueError, OverflowError) as exc:
        logger.warning("Failed to parse date %r: %s", value, exc)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed


__all__ = ["HTMLFiller", "TRUTHY_VALUES"]
