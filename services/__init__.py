"""Service-layer utilities for the web form filler."""

from .form_document import FormDocument, FormEvent, ImmediateScheduler, TimerScheduler
from .field_detector import FieldDetector
from .html_filler import HTMLFiller
from .fill_orchestrator import FillOrchestrator
from .notifications import show_notification
from .pipeline import FormFillPipeline

__all__ = [
	"FormDocument",
	"FormEvent",
	"ImmediateScheduler",
	"TimerScheduler",
	"FieldDetector",
	"HTMLFiller",
	"FillOrchestrator",
	"show_notification",
	"FormFillPipeline",
]
