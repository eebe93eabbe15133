# client/form.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict

from models.student import MAX_AGE, MIN_AGE


class StudentForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    age: int = 0
    class_: str = Field(default="", alias="class")
    registrationNumber: str = ""

    @classmethod
    def from_student(cls, student: dict) -> "StudentForm":
        return cls(
            name=student["name"],
            age=student["age"],
            class_=student["class"],
            registrationNumber=student["registrationNumber"],
        )

    def field_errors(self) -> Dict[str, str]:
        """Checks run before anything is sent; an empty dict means submittable."""
        errors = {}
        if not self.name.strip():
            errors["name"] = "Name is required"
        if not self.registrationNumber.strip():
            errors["registrationNumber"] = "Registration number is required"
        if not self.class_.strip():
            errors["class"] = "Class is required"
        if not self.age or self.age < MIN_AGE or self.age > MAX_AGE:
            errors["age"] = f"Age must be between {MIN_AGE} and {MAX_AGE}"
        return errors

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)
