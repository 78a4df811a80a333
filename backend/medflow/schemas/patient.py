from enum import Enum
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Literal, Optional


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


GENDER_FILTER_ALL = "all"
GenderFilter = Literal["all", "Male", "Female", "Other"]

MAX_AGE = 150


class PatientBase(BaseModel):
    """Editable patient fields. The store accepts these without validation."""
    name: str
    age: int
    gender: Gender
    diagnosis: str
    prescription: str = ""


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class PatientCreate(PatientBase):
    """Form-level rules applied to records entered through the API."""
    age: int = Field(..., ge=1, le=MAX_AGE)

    @field_validator("name", "diagnosis", "prescription")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class PatientUpdate(BaseModel):
    name: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=1, le=MAX_AGE)
    gender: Optional[Gender] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None

    @field_validator("name", "age", "gender", "diagnosis", "prescription", mode="before")
    @classmethod
    def not_null(cls, v):
        # omit a field to leave it unchanged
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("name", "diagnosis", "prescription")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v)


class Patient(PatientBase):
    """Persisted patient record; serialized with the camelCase storage keys."""
    id: str
    created_by: str = Field(alias="createdBy")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    class Config:
        populate_by_name = True
        from_attributes = True


class PatientFilters(BaseModel):
    search: Optional[str] = None
    gender: Optional[GenderFilter] = None


class PatientListResponse(BaseModel):
    patients: list[Patient]
    total: int
    search: str
    gender: GenderFilter
    has_active_filters: bool


class ImportPreviewResponse(BaseModel):
    patients: list[PatientBase]
    total: int


class ImportResponse(BaseModel):
    imported: int
    patients: list[Patient]
