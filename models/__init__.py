"""Domain models shared across the web form filler."""

from .form_data import FormData

__all__ = ["FormData"]
