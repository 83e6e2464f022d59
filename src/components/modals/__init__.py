"""
Modals component - dialog lifecycle orchestration and content-type forms.
"""

from ._impl import (
    coerce_record_id,
    extract_number,
    is_truthy,
    join_list,
    normalize_date,
    record_title,
    split_list,
)
from .component import ModalOrchestrator
from .content_types import (
    BLOG_POST,
    BUILTIN_CONTENT_TYPES,
    PROJECT,
    SERVICE,
    TEAM_MEMBER,
    TESTIMONIAL,
    ContentTypeForm,
    FormCatalog,
)
from .models import (
    UNSAVED_CHANGES_PROMPT,
    FormData,
    SaveOutcome,
    validation_key,
    validation_prefix,
)
from .registry import DialogRegistry

__all__ = [
    # Entry points
    "ModalOrchestrator",
    "DialogRegistry",
    # Content types
    "ContentTypeForm",
    "FormCatalog",
    "BUILTIN_CONTENT_TYPES",
    "PROJECT",
    "BLOG_POST",
    "TEAM_MEMBER",
    "TESTIMONIAL",
    "SERVICE",
    # Mapping helpers
    "coerce_record_id",
    "extract_number",
    "is_truthy",
    "join_list",
    "normalize_date",
    "record_title",
    "split_list",
    # Models
    "FormData",
    "SaveOutcome",
    "UNSAVED_CHANGES_PROMPT",
    "validation_key",
    "validation_prefix",
]
