"""Shared config for the API server."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root (interviewace/)
PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(PROJECT_ROOT / ".env")

DATA_DIR = Path(os.environ.get("INTERVIEWACE_DATA_DIR") or PROJECT_ROOT / "data")
PREPARATIONS_FILE = DATA_DIR / "preparations.json"

JWT_SECRET = os.environ.get("SUPABASE_JWT_SECRET") or os.environ.get("JWT_SECRET") or ""
JWT_ALGORITHMS = ["HS256"]

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

MAX_UPLOAD_BYTES = int(os.environ.get("MAX_FILE_SIZE", str(10 * 1024 * 1024)))
