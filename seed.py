# seed.py
# Adds sample students through the running API: python seed.py [base_url]
import asyncio
import logging
import sys

import httpx

import config
from client.api import StudentApi

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_STUDENTS = [
    {"name": "Ahmad Rizky Pratama", "age": 16, "class": "10A", "registrationNumber": "2024001"},
    {"name": "Siti Nurhaliza Putri", "age": 17, "class": "11B", "registrationNumber": "2024002"},
    {"name": "Budi Santoso", "age": 18, "class": "12C", "registrationNumber": "2024003"},
    {"name": "Dewi Maharani", "age": 16, "class": "10B", "registrationNumber": "2024004"},
    {"name": "Eko Prasetyo", "age": 17, "class": "11A", "registrationNumber": "2024005"},
]


async def add_sample_students(api: StudentApi) -> int:
    added = 0
    for student in SAMPLE_STUDENTS:
        try:
            result = await api.add_student(student)
        except httpx.HTTPError as e:
            logger.error(f"Error adding {student['name']}: {e}")
            continue
        if result.get("success"):
            added += 1
            logger.info(f"Adding {student['name']}: SUCCESS")
        else:
            logger.info(f"Adding {student['name']}: FAILED ({result.get('error')})")
    return added


async def main(base_url: str):
    async with StudentApi(base_url) as api:
        added = await add_sample_students(api)
    logger.info(f"Seeded {added} of {len(SAMPLE_STUDENTS)} students")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else config.API_BASE_URL))
