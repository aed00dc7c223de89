"""HTML form control extraction utilities."""

from __future__ import annotations

from typing import List, Optional

from bs4 import Tag

from services.form_document import FormDocument, class_list, input_type, option_text
from webformfiller.models import ControlDescriptor, ControlKind

RATING_CLASSES = {"rate", "stars"}
STAR_SELECTOR = ".star, .ant-rate-star"

_INPUT_KINDS = {
    "checkbox": ControlKind.CHECKBOX,
    "radio": ControlKind.RADIO,
    "range": ControlKind.RANGE,
    "date": ControlKind.DATE,
    "datetime-local": ControlKind.DATETIME,
    "datetime": ControlKind.DATETIME,
}


def is_rating_input(element: Tag) -> bool:
    """Return True for inputs marked up as star-rating widgets."""

    if element.name != "input":
        return False
    if (element.get("role") or "").lower() == "rate":
        return True
    return any(cls in RATING_CLASSES for cls in class_list(element))


def resolve_kind(element: Tag) -> ControlKind:
    if is_rating_input(element):
        return ControlKind.RATING
    if element.name == "select":
        return ControlKind.MULTISELECT if element.has_attr("multiple") else ControlKind.SELECT
    if element.name == "textarea":
        return ControlKind.TEXTAREA
    return _INPUT_KINDS.get(input_type(element), ControlKind.TEXT)


class FieldDetector:
    """Describe the fillable controls of a :class:`FormDocument`."""

    def extract_controls(self, document: FormDocument) -> List[ControlDescriptor]:
        """Return one descriptor per fillable control, in document order."""

        elements = document.controls()
        taken = {element.get("id") for element in elements if element.get("id")}
        descriptors: List[ControlDescriptor] = []
        seen_ids = set()
        for index, element in enumerate(elements):
            element_id = element.get("id") or ""
            key = element_id
            if not element_id or element_id in seen_ids:
                key = _synthetic_key(index, taken)
                taken.add(key)
            seen_ids.add(element_id)
            descriptors.append(self.describe(element, index, document, key=key))
        return descriptors

    def describe(
        self,
        element: Tag,
        index: int = 0,
        document: Optional[FormDocument] = None,
        *,
        key: str = "",
    ) -> ControlDescriptor:
        kind = resolve_kind(element)
        options = None
        if kind in {ControlKind.SELECT, ControlKind.MULTISELECT}:
            options = [option_text(option) for option in element.find_all("option")]
        return ControlDescriptor(
            kind=kind,
            name=element.get("name") or "",
            id=element.get("id") or "",
            placeholder=element.get("placeholder") or "",
            label=self.resolve_label(element, document) or "",
            options=options,
            index=index,
            key=key,
            element=element,
        )

    def resolve_label(self, element: Tag, document: Optional[FormDocument] = None) -> Optional[str]:
        """Find the label text for ``element``.

        An explicit ``<label for=...>`` wins over a wrapping ``<label>``. No
        positional guessing is attempted.
        """

        element_id = element.get("id")
        if element_id:
            root = document.soup if document is not None else _root_of(element)
            label_tag = root.find("label", attrs={"for": element_id})
            if label_tag:
                text = label_tag.get_text().strip()
                if text:
                    return text

        parent = element.parent
        while isinstance(parent, Tag):
            if parent.name == "label":
                text = parent.get_text().strip()
                if text:
                    return text
            parent = parent.parent
        return None


def _synthetic_key(index: int, taken) -> str:
    key = f"control-{index}"
    suffix = 1
    while key in taken:
        key = f"control-{index}-{suffix}"
        suffix += 1
    return key


def _root_of(element: Tag) -> Tag:
    node = element
    while isinstance(node.parent, Tag):
        node = node.parent
    return node


__all__ = ["FieldDetector", "STAR_SELECTOR", "is_rating_input", "resolve_kind"]
