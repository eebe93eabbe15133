# config.py
import os
from dotenv import load_dotenv

load_dotenv()

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "student_admin_db")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Used by the client controller and seed script
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
# keeps skip well inside BSON int64
MAX_PAGE = 1_000_000
