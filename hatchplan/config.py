import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "true") -> bool:
    return os.environ.get(name, default).strip().lower() not in ("0", "false", "no", "off", "")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///hatchplan.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JSON list of species; unset uses the built-in table
    SPECIES_FILE = os.environ.get("SPECIES_FILE")

    # Daily reminder digest
    SCHEDULER_ENABLED = _env_flag("SCHEDULER_ENABLED")
    SCHEDULER_TIMEZONE = os.environ.get("SCHEDULER_TIMEZONE", "UTC")
