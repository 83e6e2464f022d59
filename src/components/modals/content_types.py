"""
Content types edited through modal dialogs.

Each ContentTypeForm declares the fields of one dialog and how a stored
record maps onto them and back. Stored records may use legacy key names
(e.g. "name" for a project title); reads try the form field name first and
then each alias in order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from src.domain.form import FieldSpec
from src.ports.records import Record

from ._impl import extract_number, is_truthy, join_list, normalize_date, split_list
from .models import FormData

logger = logging.getLogger(__name__)

FormHook = Callable[[Record, FormData], None]
RecordHook = Callable[[FormData, Record], None]
DefaultsHook = Callable[[], FormData]


@dataclass(frozen=True)
class ContentTypeForm:
    type_tag: str
    dialog_id: str
    label: str
    fields: tuple[FieldSpec, ...]
    # field name -> editor element id
    rich_text: Mapping[str, str] = field(default_factory=dict)
    # field name -> legacy record keys, read in order
    aliases: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    list_fields: tuple[str, ...] = ()
    numeric_fields: tuple[str, ...] = ()
    id_field: str = "id"
    form_hook: FormHook | None = None
    record_hook: RecordHook | None = None
    # values written into a freshly opened add dialog
    add_defaults: DefaultsHook | None = None
    # select field name -> type tag whose record titles become its options
    option_sources: Mapping[str, str] = field(default_factory=dict)

    def spec(self, name: str) -> FieldSpec | None:
        return next((f for f in self.fields if f.name == name), None)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def image_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.kind == "file"]

    @property
    def date_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.kind == "date"]

    def read(self, record: Record, name: str) -> Any:
        for key in (name, *self.aliases.get(name, ())):
            value = record.get(key)
            if value is not None and value != "" and value != []:
                return value
        return None

    def to_form(self, record: Record) -> FormData:
        """Map a stored record to dialog field values."""
        data: FormData = {}
        for spec in self.fields:
            data[spec.name] = self._form_value(spec, self.read(record, spec.name))
        if self.form_hook is not None:
            self.form_hook(record, data)
        return data

    def _form_value(self, spec: FieldSpec, raw: Any) -> Any:
        if spec.kind == "checkbox":
            return is_truthy(raw) if raw is not None else False
        if spec.multiple:
            return split_list(raw)
        if raw is None:
            return spec.default
        if spec.name in self.list_fields:
            return join_list(raw)
        if spec.kind == "date":
            return normalize_date(raw)
        if spec.name in self.numeric_fields:
            return extract_number(raw)
        return str(raw)

    def to_record(self, form_data: FormData) -> Record:
        """Map extracted dialog values to the record payload handed to the store."""
        record: Record = {}
        for spec in self.fields:
            if spec.name == self.id_field:
                continue
            value = form_data.get(spec.name)
            if spec.name in self.list_fields:
                value = split_list(value)
            record[spec.name] = value
        if self.record_hook is not None:
            self.record_hook(form_data, record)
        return record


# --- Built-in content types ---


def _today(*field_names: str) -> DefaultsHook:
    def defaults() -> FormData:
        today = date.today().isoformat()
        return {name: today for name in field_names}

    return defaults


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else ""
    return value


def _int_or_zero(value: Any) -> int:
    try:
        return int(str(value).strip() or 0)
    except ValueError:
        return 0


def _active_from_record(record: Record, data: FormData) -> None:
    if "active" not in record and "status" in record:
        data["active"] = str(record["status"]).lower() == "active"


def _active_to_record(data: FormData, record: Record) -> None:
    record["displayOrder"] = _int_or_zero(data.get("displayOrder"))
    record["status"] = "Active" if data.get("active") else "Inactive"


def _project_form(record: Record, data: FormData) -> None:
    status = str(record.get("status") or "")
    data["status"] = status.lower().replace(" ", "-")
    raw_size = str(record.get("size") or "")
    number = extract_number(raw_size)
    unit = raw_size.partition(number)[2].strip() if number else ""
    if unit and not record.get("sizeUnit"):
        data["sizeUnit"] = unit


def _project_record(data: FormData, record: Record) -> None:
    category = _first(data.get("category"))
    record["name"] = data.get("title")
    record["category"] = category
    record["type"] = category
    record["startDate"] = data.get("completionDate")
    size = data.get("size")
    record["size"] = f"{size} {data.get('sizeUnit') or ''}".strip() if size else ""
    cost = data.get("cost")
    record["cost"] = f"${cost}" if cost else ""
    record["budget"] = record["cost"]
    record.pop("sizeUnit", None)


PROJECT = ContentTypeForm(
    type_tag="project",
    dialog_id="projectModal",
    label="Project",
    fields=(
        FieldSpec("id", kind="hidden", element_id="projectId"),
        FieldSpec("title", element_id="projectTitle", label="Project Title"),
        FieldSpec(
            "status",
            kind="select",
            element_id="projectStatus",
            options=("planning", "in-progress", "completed", "on-hold"),
        ),
        FieldSpec("description", kind="editor", element_id="projectDescriptionEditor"),
        FieldSpec(
            "category",
            kind="select",
            element_id="projectCategory",
            multiple=True,
            options=("residential", "commercial", "industrial", "renovation"),
        ),
        FieldSpec("location", element_id="projectLocation"),
        FieldSpec("completionDate", kind="date", element_id="projectCompletionDate"),
        FieldSpec("size", element_id="projectSize"),
        FieldSpec(
            "sizeUnit",
            kind="select",
            element_id="projectSizeUnit",
            options=("sq ft", "sq m", "acres"),
            default="sq ft",
        ),
        FieldSpec("cost", kind="number", element_id="projectCost"),
        FieldSpec("client", element_id="projectClient"),
        FieldSpec("featuredImage", kind="file", element_id="projectFeaturedImage"),
        FieldSpec("galleryImages", kind="file", element_id="projectGalleryImages", multiple=True),
    ),
    rich_text={"description": "projectDescriptionEditor"},
    aliases={
        "title": ("name",),
        "category": ("type",),
        "completionDate": ("startDate",),
        "cost": ("budget",),
        "featuredImage": ("image",),
    },
    numeric_fields=("size", "cost"),
    form_hook=_project_form,
    record_hook=_project_record,
)


def _blog_record(data: FormData, record: Record) -> None:
    record["date"] = data.get("publishDate")


BLOG_POST = ContentTypeForm(
    type_tag="blogPost",
    dialog_id="blogPostModal",
    label="Blog post",
    fields=(
        FieldSpec("id", kind="hidden", element_id="blogPostId"),
        FieldSpec("title", element_id="blogPostTitle"),
        FieldSpec("author", element_id="blogPostAuthor"),
        FieldSpec("publishDate", kind="date", element_id="blogPostPublishDate"),
        FieldSpec(
            "category",
            kind="select",
            element_id="blogPostCategory",
            options=("news", "tips", "projects", "industry"),
        ),
        FieldSpec(
            "status",
            kind="select",
            element_id="blogPostStatus",
            options=("draft", "published", "scheduled"),
            default="draft",
        ),
        FieldSpec("tags", element_id="blogPostTags"),
        FieldSpec("excerpt", kind="textarea", element_id="blogPostExcerpt"),
        FieldSpec("content", kind="editor", element_id="blogPostContentEditor"),
        FieldSpec("featured", kind="checkbox", element_id="blogPostFeatured"),
        FieldSpec("featuredImage", kind="file", element_id="blogPostFeaturedImage"),
    ),
    rich_text={"content": "blogPostContentEditor"},
    aliases={"publishDate": ("date",), "featuredImage": ("image",)},
    list_fields=("tags",),
    record_hook=_blog_record,
    add_defaults=_today("publishDate"),
)


def _team_record(data: FormData, record: Record) -> None:
    record["linkedin"] = data.get("linkedinUrl") or ""
    record["twitter"] = data.get("twitterUrl") or ""
    _active_to_record(data, record)


TEAM_MEMBER = ContentTypeForm(
    type_tag="teamMember",
    dialog_id="teamMemberModal",
    label="Team member",
    fields=(
        FieldSpec("id", kind="hidden", element_id="teamMemberId"),
        FieldSpec("name", element_id="teamMemberName"),
        FieldSpec("position", element_id="teamMemberPosition"),
        FieldSpec("bio", kind="editor", element_id="teamMemberBioEditor"),
        FieldSpec("email", kind="email", element_id="teamMemberEmail"),
        FieldSpec("phone", element_id="teamMemberPhone"),
        FieldSpec("linkedinUrl", kind="url", element_id="teamMemberLinkedIn"),
        FieldSpec("twitterUrl", kind="url", element_id="teamMemberTwitter"),
        FieldSpec("displayOrder", kind="number", element_id="teamMemberDisplayOrder", default="0"),
        FieldSpec("active", kind="checkbox", element_id="teamMemberActive"),
        FieldSpec("photo", kind="file", element_id="teamMemberPhoto"),
    ),
    rich_text={"bio": "teamMemberBioEditor"},
    aliases={"linkedinUrl": ("linkedin",), "twitterUrl": ("twitter",)},
    form_hook=_active_from_record,
    record_hook=_team_record,
)


def _testimonial_record(data: FormData, record: Record) -> None:
    record["rating"] = _int_or_zero(data.get("rating")) or 5
    record["photo"] = data.get("clientPhoto")


TESTIMONIAL = ContentTypeForm(
    type_tag="testimonial",
    dialog_id="testimonialModal",
    label="Testimonial",
    fields=(
        FieldSpec("id", kind="hidden", element_id="testimonialId"),
        FieldSpec("clientName", element_id="testimonialClientName"),
        FieldSpec("company", element_id="testimonialCompany"),
        FieldSpec("position", element_id="testimonialPosition"),
        FieldSpec("testimonialText", kind="editor", element_id="testimonialTextEditor"),
        FieldSpec(
            "rating",
            kind="radio",
            element_id="testimonialRating",
            options=("1", "2", "3", "4", "5"),
            default="5",
        ),
        FieldSpec("projectRef", kind="select", element_id="testimonialProjectRef"),
        FieldSpec("dateReceived", kind="date", element_id="testimonialDate"),
        FieldSpec("featured", kind="checkbox", element_id="testimonialFeatured"),
        FieldSpec("displayHomepage", kind="checkbox", element_id="testimonialDisplayHomepage"),
        FieldSpec("clientPhoto", kind="file", element_id="testimonialClientPhoto"),
    ),
    rich_text={"testimonialText": "testimonialTextEditor"},
    aliases={"dateReceived": ("date",), "clientPhoto": ("photo",)},
    record_hook=_testimonial_record,
    add_defaults=_today("dateReceived"),
    option_sources={"projectRef": "project"},
)


def _service_record(data: FormData, record: Record) -> None:
    record["name"] = data.get("serviceName")
    record["description"] = data.get("shortDescription")
    record["details"] = data.get("fullDescription")
    record["price"] = data.get("pricing")
    record["timeline"] = data.get("duration")
    _active_to_record(data, record)


SERVICE = ContentTypeForm(
    type_tag="service",
    dialog_id="serviceModal",
    label="Service",
    fields=(
        FieldSpec("id", kind="hidden", element_id="serviceId"),
        FieldSpec("serviceName", element_id="serviceName"),
        FieldSpec("shortDescription", kind="textarea", element_id="serviceShortDescription"),
        FieldSpec("fullDescription", kind="editor", element_id="serviceFullDescriptionEditor"),
        FieldSpec("features", element_id="serviceFeatures"),
        FieldSpec("pricing", element_id="servicePricing"),
        FieldSpec("duration", element_id="serviceDuration"),
        FieldSpec("icon", element_id="serviceIcon"),
        FieldSpec("displayOrder", kind="number", element_id="serviceDisplayOrder", default="0"),
        FieldSpec("active", kind="checkbox", element_id="serviceActive"),
    ),
    rich_text={"fullDescription": "serviceFullDescriptionEditor"},
    aliases={
        "serviceName": ("name",),
        "shortDescription": ("description",),
        "fullDescription": ("details",),
        "pricing": ("price",),
        "duration": ("timeline",),
    },
    list_fields=("features",),
    form_hook=_active_from_record,
    record_hook=_service_record,
)

BUILTIN_CONTENT_TYPES: tuple[ContentTypeForm, ...] = (
    PROJECT,
    BLOG_POST,
    TEAM_MEMBER,
    TESTIMONIAL,
    SERVICE,
)


class FormCatalog:
    """Content types by type tag and by dialog id."""

    def __init__(self, forms: tuple[ContentTypeForm, ...] = BUILTIN_CONTENT_TYPES) -> None:
        self._by_type: dict[str, ContentTypeForm] = {}
        self._by_dialog: dict[str, ContentTypeForm] = {}
        for form in forms:
            self.register(form)

    def register(self, form: ContentTypeForm) -> None:
        if form.dialog_id in self._by_dialog and self._by_dialog[form.dialog_id] is not form:
            logger.warning("Dialog %s re-registered by %s", form.dialog_id, form.type_tag)
        self._by_type[form.type_tag] = form
        self._by_dialog[form.dialog_id] = form

    def get(self, type_tag: str) -> ContentTypeForm:
        try:
            return self._by_type[type_tag]
        except KeyError:
            raise KeyError(f"Unknown content type: {type_tag}") from None

    def for_dialog(self, dialog_id: str) -> ContentTypeForm | None:
        return self._by_dialog.get(dialog_id)

    def __iter__(self) -> Iterator[ContentTypeForm]:
        return iter(self._by_type.values())

    def __len__(self) -> int:
        return len(self._by_type)
