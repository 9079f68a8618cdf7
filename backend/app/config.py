"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

# Temporary files (inputs, converted outputs, zips). Empty means the system temp dir.
_temp_dir = os.getenv("CONVERTER_TEMP_DIR", "").strip()
TEMP_DIR: Optional[Path] = Path(_temp_dir) if _temp_dir else None
if TEMP_DIR is not None:
    TEMP_DIR.mkdir(parents=True, exist_ok=True)

# External converter: invoked as `<binary> -y -i <input> <output>`
CONVERTER_BINARY = os.getenv("CONVERTER_BINARY", "ffmpeg")
# Seconds per file; 0 disables the timeout
CONVERTER_TIMEOUT = int(os.getenv("CONVERTER_TIMEOUT", "300"))

# Limits (env)
MAX_FILES_PER_BATCH = int(os.getenv("MAX_FILES_PER_BATCH", "5"))
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

# Concurrency: files converted at once within one batch (1 = sequential)
MAX_WORKERS = max(1, int(os.getenv("MAX_WORKERS", "1")))

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
# CORS: comma-separated origins, e.g. "http://localhost:5173,http://127.0.0.1:5173"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("converter")
