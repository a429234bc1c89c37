# backend/academy/config.py

import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def _seed_default(app_env: str) -> str:
    # Demo accounts are only loaded by default on local and dev setups.
    return "true" if app_env in {"local", "dev"} else "false"


APP_ENV = os.getenv("APP_ENV", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ---------------------------
# Storage
# ---------------------------
# "memory" or "sql"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory").lower()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./academy.db")
SQL_ECHO = _flag("SQL_ECHO", "false")
SEED_SAMPLE_DATA = _flag("SEED_SAMPLE_DATA", _seed_default(APP_ENV))

# ---------------------------
# Auth
# ---------------------------
SECRET_KEY = os.getenv("SECRET_KEY")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# ---------------------------
# AI advisor
# ---------------------------
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.0-flash")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "2"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")]
