# routes/students.py
from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Optional
import logging
import re

import config
from database import Database, DuplicateKey, ValidationFailure
from errors import (
    ApiError,
    ConflictError,
    InputValidationError,
    NotFoundError,
    StorageValidationError,
    UnexpectedError,
)
from models.student import (
    MAX_AGE,
    MIN_AGE,
    ApiResponse,
    Pagination,
    StudentPayload,
    StudentUpdatePayload,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["students"])

ALL_FIELDS_REQUIRED = "All fields are required"
AGE_OUT_OF_RANGE = f"Age must be between {MIN_AGE} and {MAX_AGE}"
REGISTRATION_TAKEN = "Registration number is already registered"
REGISTRATION_TAKEN_BY_OTHER = "Registration number is already registered to another student"
STUDENT_NOT_FOUND = "Student not found"


def respond(status_code: int = 200, data=None, message: str = None, error: str = None) -> JSONResponse:
    body = ApiResponse(success=error is None, data=data, message=message, error=error)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body, exclude_none=True))


async def get_database(request: Request) -> Database:
    return request.app.state.database


def check_age(age: int) -> None:
    if age < MIN_AGE or age > MAX_AGE:
        raise InputValidationError(AGE_OUT_OF_RANGE)


def search_filter(search: str) -> dict:
    if not search:
        return {}
    pattern = {"$regex": re.escape(search), "$options": "i"}
    return {
        "$or": [
            {"name": pattern},
            {"registrationNumber": pattern},
            {"class": pattern},
        ]
    }


@router.post("/add", status_code=201)
async def add_student(payload: StudentPayload, database: Database = Depends(get_database)):
    logger.info(f"Adding student with registration number: {payload.registrationNumber}")
    try:
        if not payload.is_complete():
            raise InputValidationError(ALL_FIELDS_REQUIRED)
        check_age(payload.age)

        fields = payload.trimmed()
        students = await database.students()
        if await students.find_one({"registrationNumber": fields["registrationNumber"]}):
            logger.warning(f"Registration number already exists: {fields['registrationNumber']}")
            raise ConflictError(REGISTRATION_TAKEN)

        student = await students.insert(fields)
        return respond(201, data=student, message="Student added successfully")
    except ApiError:
        raise
    except ValidationFailure as e:
        raise StorageValidationError(e.message)
    except DuplicateKey:
        raise ConflictError(REGISTRATION_TAKEN)
    except Exception:
        logger.exception("Error adding student")
        raise UnexpectedError("Failed to add student")


@router.get("/get")
async def get_students(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = config.DEFAULT_PAGE_LIMIT,
    database: Database = Depends(get_database),
):
    search = (search or "").strip()
    page = min(max(page, 1), config.MAX_PAGE)
    if limit < 1:
        limit = config.DEFAULT_PAGE_LIMIT
    limit = min(limit, config.MAX_PAGE_LIMIT)
    logger.info(f"Fetching students with search={search!r}, page={page}, limit={limit}")
    try:
        students = await database.students()
        records, total = await students.find_many(
            search_filter(search),
            sort=[("createdAt", -1), ("_id", -1)],
            skip=(page - 1) * limit,
            limit=limit,
        )
        return respond(data={
            "students": records,
            "pagination": Pagination.of(page, limit, total).model_dump(),
        })
    except Exception:
        logger.exception("Error fetching students")
        raise UnexpectedError("Failed to fetch students")


@router.put("/edit")
async def update_student(payload: StudentUpdatePayload, database: Database = Depends(get_database)):
    logger.info(f"Updating student {payload.id}")
    try:
        if not payload.is_complete():
            raise InputValidationError(ALL_FIELDS_REQUIRED)
        check_age(payload.age)

        students = await database.students()
        existing = await students.find_by_id(payload.id)
        if not existing:
            logger.warning(f"Student not found for update: {payload.id}")
            raise NotFoundError(STUDENT_NOT_FOUND)

        fields = payload.trimmed()
        if existing["registrationNumber"] != fields["registrationNumber"]:
            holder = await students.find_one({"registrationNumber": fields["registrationNumber"]})
            if holder and holder["id"] != existing["id"]:
                logger.warning(f"Registration number {fields['registrationNumber']} held by {holder['id']}")
                raise ConflictError(REGISTRATION_TAKEN_BY_OTHER)

        student = await students.update_by_id(payload.id, fields)
        if not student:
            raise NotFoundError(STUDENT_NOT_FOUND)
        return respond(data=student, message="Student updated successfully")
    except ApiError:
        raise
    except ValidationFailure as e:
        raise StorageValidationError(e.message)
    except DuplicateKey:
        raise ConflictError(REGISTRATION_TAKEN)
    except Exception:
        logger.exception("Error updating student")
        raise UnexpectedError("Failed to update student")


@router.delete("/delete")
async def delete_student(id: Optional[str] = None, database: Database = Depends(get_database)):
    logger.info(f"Deleting student {id}")
    try:
        if not id:
            raise InputValidationError("Student ID is required")

        students = await database.students()
        if not await students.find_by_id(id):
            logger.warning(f"Student not found for delete: {id}")
            raise NotFoundError(STUDENT_NOT_FOUND)

        if not await students.delete_by_id(id):
            raise NotFoundError(STUDENT_NOT_FOUND)
        return respond(message="Student deleted successfully")
    except ApiError:
        raise
    except Exception:
        logger.exception("Error deleting student")
        raise UnexpectedError("Failed to delete student")


@router.get("/health")
async def health():
    return respond(message="ok")
