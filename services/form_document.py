"""In-memory HTML document with DOM-like event dispatch for form controls."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from webformfiller.utils import collapse_whitespace, parse_style, render_style

logger = logging.getLogger(__name__)

Listener = Callable[["FormEvent"], None]

NON_FILLABLE_INPUT_TYPES = {"hidden", "submit", "button", "reset", "image", "file"}


@dataclass(frozen=True)
class FormEvent:
    """An event dispatched on a control, mirroring a bubbling DOM ``Event``."""

    type: str
    target: Tag
    bubbles: bool = True


class TimerScheduler:
    """Run callbacks after a delay on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()


class ImmediateScheduler:
    """Run callbacks synchronously; used when rendering a document for output."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        callback()


class FormDocument:
    """Wrap a parsed HTML page and expose the operations the filler needs.

    Listeners registered with :meth:`add_event_listener` receive events fired
    on the element itself or any of its descendants, as with bubbling events
    in a browser.
    """

    def __init__(self, html: str, *, scheduler=None) -> None:
        self.soup = BeautifulSoup(html or "", "lxml")
        self.scheduler = scheduler or TimerScheduler()
        self.lock = threading.RLock()
        self.dispatched: List[FormEvent] = []
        self._listeners: Dict[int, List[Tuple[str, Listener]]] = defaultdict(list)

    @classmethod
    def from_path(cls, path: str, *, scheduler=None) -> "FormDocument":
        html_path = Path(path)
        if not html_path.exists():
            raise FileNotFoundError(f"HTML page not found: {path}")
        return cls(html_path.read_text(encoding="utf-8"), scheduler=scheduler)

    def controls(self) -> List[Tag]:
        """Return every fillable control in document order."""

        controls: List[Tag] = []
        for element in self.soup.find_all(["input", "select", "textarea"]):
            if element.name == "input" and input_type(element) in NON_FILLABLE_INPUT_TYPES:
                continue
            controls.append(element)
        return controls

    def get_element_by_id(self, element_id: str) -> Optional[Tag]:
        if not element_id:
            return None
        return self.soup.find(id=element_id)

    def body(self) -> Tag:
        body = self.soup.body
        if body is None:
            body = self.soup.new_tag("body")
            html = self.soup.html
            if html is None:
                html = self.soup.new_tag("html")
                self.soup.append(html)
            html.append(body)
        return body

    def add_event_listener(self, element: Tag, event_type: str, listener: Listener) -> None:
        self._listeners[id(element)].append((event_type, listener))

    def dispatch_event(self, element: Tag, event_type: str, *, bubbles: bool = True) -> FormEvent:
        event = FormEvent(type=event_type, target=element, bubbles=bubbles)
        self.dispatched.append(event)

        node: Optional[Tag] = element
        while node is not None:
            for registered_type, listener in list(self._listeners.get(id(node), ())):
                if registered_type != event_type:
                    continue
                try:
                    listener(event)
                except Exception:
                    logger.exception("Listener for '%s' raised", event_type)
            if not bubbles:
                break
            node = node.parent if isinstance(node.parent, Tag) else None
        return event

    def events_for(self, element: Tag) -> List[str]:
        return [event.type for event in self.dispatched if event.target is element]

    def radio_group(self, element: Tag) -> List[Tag]:
        """Return the radios sharing ``element``'s name inside the same form."""

        name = element.get("name")
        if not name:
            return [element]
        scope = element.find_parent("form") or self.soup
        return [
            radio
            for radio in scope.find_all("input")
            if input_type(radio) == "radio" and radio.get("name") == name
        ]

    def render(self) -> str:
        return str(self.soup)


def input_type(element: Tag) -> str:
    return (element.get("type") or "text").strip().lower()


def class_list(element: Tag) -> List[str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def set_class_list(element: Tag, classes: List[str]) -> None:
    if classes:
        element["class"] = classes
    else:
        element.attrs.pop("class", None)


def option_text(option: Tag) -> str:
    return collapse_whitespace(option.get_text())


def option_value(option: Tag) -> str:
    if option.has_attr("value"):
        return option.get("value") or ""
    return option_text(option)


def control_value(element: Tag) -> str:
    """Read the value a browser would report for ``element``."""

    if element.name == "textarea":
        return element.get_text()
    if element.name == "select":
        options = element.find_all("option")
        selected = [option for option in options if option.has_attr("selected")]
        if selected:
            return option_value(selected[0])
        if options and not element.has_attr("multiple"):
            return option_value(options[0])
        return ""
    if input_type(element) in {"checkbox", "radio"}:
        return element.get("value", "on")
    return element.get("value", "")


def selected_options(element: Tag) -> List[str]:
    return [option_text(option) for option in element.find_all("option") if option.has_attr("selected")]


def get_style_property(element: Tag, prop: str) -> Optional[str]:
    return parse_style(element.get("style")).get(prop)


def set_style_property(element: Tag, prop: str, value: Optional[str]) -> None:
    declarations = parse_style(element.get("style"))
    if value:
        declarations[prop] = value
    else:
        declarations.pop(prop, None)
    style = render_style(declarations)
    if style:
        element["style"] = style
    else:
        element.attrs.pop("style", None)


__all__ = [
    "FormDocument",
    "FormEvent",
    "ImmediateScheduler",
    "TimerScheduler",
    "class_list",
    "control_value",
    "get_style_property",
    "input_type",
    "option_text",
    "option_value",
    "selected_options",
    "set_class_list",
    "set_style_property",
]
