"""webformfiller package."""

from .config import FillerConfig, load_config
from .errors import FormFillerError, SemanticMatchError, StorageError
from .llm import GeminiFieldMatcher, build_request, parse_field_mappings
from .matching import FieldMatcher, RuleMatcher
from .models import (
	ControlDescriptor,
	ControlKind,
	FieldEntry,
	FieldMapping,
	FillOutcome,
	normalize_fields,
)
from .storage import SecureStorage, get_storage

__all__ = [
	"ControlDescriptor",
	"ControlKind",
	"FieldEntry",
	"FieldMapping",
	"FillOutcome",
	"normalize_fields",
	"FieldMatcher",
	"RuleMatcher",
	"GeminiFieldMatcher",
	"build_request",
	"parse_field_mappings",
	"FillerConfig",
	"load_config",
	"FormFillerError",
	"SemanticMatchError",
	"StorageError",
	"SecureStorage",
	"get_storage",
]
