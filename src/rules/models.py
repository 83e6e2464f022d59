from typing import Literal

from pydantic import BaseModel, Field

RuleKind = Literal["required", "minLength", "maxLength", "pattern", "email", "url"]


class RuleSpec(BaseModel):
    kind: RuleKind
    message: str
    value: int | str | None = None


class ValidationRules(BaseModel):
    debounce_ms: int = 300
    # dialog id -> field name -> ordered rules
    dialogs: dict[str, dict[str, list[RuleSpec]]] = Field(default_factory=dict)
    # dialog id -> dialog id whose rules it shares
    aliases: dict[str, str] = Field(default_factory=dict)


class ImageRules(BaseModel):
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: [
            "image/jpeg",
            "image/jpg",
            "image/png",
            "image/gif",
            "image/webp",
        ]
    )
    max_bytes: int = 5 * 1024 * 1024
    min_bytes: int = 100


class CompressionTierRule(BaseModel):
    name: str
    # tier applies when size > min_ratio * target_max_bytes
    min_ratio: float
    quality: float
    max_dimension: int


class CompressionRules(BaseModel):
    target_max_bytes: int = 1024 * 1024
    skip_ratio: float = 0.8
    success_reduction: float = 0.1
    convert_png_over_bytes: int = 5_000_000
    default_quality: float = 0.8
    default_max_dimension: int = 1920
    tiers: list[CompressionTierRule] = Field(default_factory=list)


class NotificationRules(BaseModel):
    success_ms: int = 5000
    error_ms: int = 7000
    warning_ms: int = 6000
    info_ms: int = 5000


class RichTextRules(BaseModel):
    allow_tags: list[str] = Field(default_factory=list)
    allow_attrs: dict[str, list[str]] = Field(default_factory=dict)
    forbid_protocols: list[str] = Field(default_factory=list)
    paste_formats: list[str] = Field(default_factory=list)


class ModalRules(BaseModel):
    validation: ValidationRules = Field(default_factory=ValidationRules)
    images: ImageRules = Field(default_factory=ImageRules)
    compression: CompressionRules = Field(default_factory=CompressionRules)
    notifications: NotificationRules = Field(default_factory=NotificationRules)
    richtext: RichTextRules = Field(default_factory=RichTextRules)
