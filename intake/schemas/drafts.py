"""Draft Pydantic schemas: wire contract shared with the draft store."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class DraftStatus(str, Enum):
    """Draft lifecycle states. Monotonic: submitted never returns to draft."""

    DRAFT = "draft"
    SUBMITTED = "submitted"


class FormData(BaseModel):
    """All intake answers. Unset fields are empty strings; no field is ever removed.

    Field names are snake_case in Python and camelCase on the wire
    (``full_name`` <-> ``fullName``); either spelling is accepted on input.
    Keys the store holds beyond the known fields are kept as extras and sent
    back unchanged, since a save replaces the whole stored form.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    full_name: str = ""
    email: str = ""
    main_concern: str = ""
    goals: str = ""
    background: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """Stored drafts may carry nulls for fields never touched."""
        return "" if v is None else v

    @classmethod
    def field_name(cls, key: str) -> str:
        """Resolve a field name or its wire alias to the field name.

        Raises:
            ValueError: If ``key`` is not a form field
        """
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        raise ValueError(f"Unknown form field: {key!r}")

    def merged(self, patch: dict[str, str]) -> "FormData":
        """Return a copy with ``patch`` overwriting only the named fields."""
        updates = {self.field_name(key): value for key, value in patch.items()}
        return type(self).model_validate({**self.model_dump(), **updates})

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class DraftRecord(BaseModel):
    """A draft as returned by fetch, patch and submit."""

    id: str
    data: FormData = FormData()
    step: int = 0
    status: DraftStatus = DraftStatus.DRAFT
    created_at: str = ""
    updated_at: str = ""


class NewDraft(BaseModel):
    """Response for draft creation."""

    id: str
    resume_url: str | None = None


class PatchDraft(BaseModel):
    """Full-snapshot save: ``data`` replaces the stored form, ``step`` the stored pointer."""

    data: FormData
    step: int | None = None
