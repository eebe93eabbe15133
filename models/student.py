# models/student.py
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError
from datetime import datetime
from typing import Any, Optional
import math

NAME_MAX_LENGTH = 100
CLASS_MAX_LENGTH = 10
REGISTRATION_NUMBER_MAX_LENGTH = 20
MIN_AGE = 5
MAX_AGE = 25

# (key, options) pairs, created on first connect
STUDENT_INDEXES = [
    ("registrationNumber", {"unique": True}),
    ("name", {}),
    ("class", {}),
    ("createdAt", {}),
]


def _required_text(value: Any, label: str, max_length: int) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError("required", f"{label} is required")
    if not isinstance(value, str):
        raise PydanticCustomError("string_type", f"{label} must be text")
    value = value.strip()
    if len(value) > max_length:
        raise PydanticCustomError(
            "max_length", f"{label} cannot exceed {max_length} characters"
        )
    return value


class StudentRecord(BaseModel):
    """Schema every stored student document must satisfy.

    Fields default to None so that a missing value reaches the validators
    and is reported with a readable message instead of pydantic's generic one.
    Errors are reported in field order; the first one is what clients see.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, validate_default=True)
    age: Optional[int] = Field(default=None, validate_default=True)
    class_: Optional[str] = Field(default=None, alias="class", validate_default=True)
    registrationNumber: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        return _required_text(value, "Name", NAME_MAX_LENGTH)

    @field_validator("age", mode="before")
    @classmethod
    def check_age_present(cls, value):
        if value is None or value == "":
            raise PydanticCustomError("required", "Age is required")
        return value

    @field_validator("age")
    @classmethod
    def check_age_range(cls, value):
        if value < MIN_AGE:
            raise PydanticCustomError("min", f"Age must be at least {MIN_AGE}")
        if value > MAX_AGE:
            raise PydanticCustomError("max", f"Age must be at most {MAX_AGE}")
        return value

    @field_validator("class_", mode="before")
    @classmethod
    def check_class(cls, value):
        return _required_text(value, "Class", CLASS_MAX_LENGTH)

    @field_validator("registrationNumber", mode="before")
    @classmethod
    def check_registration_number(cls, value):
        return _required_text(value, "Registration number", REGISTRATION_NUMBER_MAX_LENGTH)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class StudentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    age: Optional[int] = None
    class_: Optional[str] = Field(default=None, alias="class")
    registrationNumber: Optional[str] = None

    def is_complete(self) -> bool:
        return all([self.name, self.age, self.class_, self.registrationNumber])

    def trimmed(self) -> dict:
        return {
            "name": self.name.strip(),
            "age": self.age,
            "class": self.class_.strip(),
            "registrationNumber": self.registrationNumber.strip(),
        }


class StudentUpdatePayload(StudentPayload):
    # older clients send the Mongo-style "_id" key
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))

    def is_complete(self) -> bool:
        return bool(self.id) and super().is_complete()


class StudentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    age: int
    class_: str = Field(alias="class")
    registrationNumber: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def serialize_student(doc: dict) -> dict:
    return StudentOut(
        id=str(doc["_id"]),
        name=doc["name"],
        age=doc["age"],
        class_=doc["class"],
        registrationNumber=doc["registrationNumber"],
        createdAt=doc.get("createdAt"),
        updatedAt=doc.get("updatedAt"),
    ).model_dump(by_alias=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

    @classmethod
    def of(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit))


class ApiResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None
