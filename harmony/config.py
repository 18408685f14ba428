import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

TIMEZONE: str = os.getenv("TIMEZONE", "UTC")
RESET_HOUR: int = int(os.getenv("RESET_HOUR", "0"))
RESET_MINUTE: int = int(os.getenv("RESET_MINUTE", "5"))
WEBAPP_HOST: str = os.getenv("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT: int = int(os.getenv("WEBAPP_PORT", "8081"))
SEED_SAMPLE_DATA: bool = os.getenv("SEED_SAMPLE_DATA", "1").lower() not in ("0", "false", "no")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)
DB_PATH = Path(os.getenv("DB_PATH", str(DATA_DIR / "harmony.db")))
