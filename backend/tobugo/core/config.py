import os
import re

from dotenv import find_dotenv, load_dotenv


# Load environment variables with .env, .env.dev/.env.prod support
def _load_env_files() -> None:
    """
    Load .env files with this precedence:
    1) Base .env (if present)
    2) Explicit file via ENV_FILE (e.g., .env.dev or ./config/.env.prod)
    3) Environment-specific file inferred from ENVIRONMENT/ENV/PYTHON_ENV
        - Supports aliases like dev/development, prod/production, stage/staging
    Note: Existing OS environment variables are never overridden.
    """
    base_path = find_dotenv(".env", usecwd=True)
    if base_path:
        load_dotenv(base_path, override=False)

    explicit = os.environ.get("ENV_FILE")
    if explicit:
        explicit_path = explicit if os.path.isabs(explicit) else find_dotenv(explicit, usecwd=True)
        if explicit_path:
            load_dotenv(explicit_path, override=False)
            return

    env_name = (
        os.environ.get("ENVIRONMENT") or os.environ.get("ENV") or os.environ.get("PYTHON_ENV")
    )
    if env_name:
        slug = str(env_name).strip().lower()
        alias = {
            "dev": "development",
            "prod": "production",
            "stg": "staging",
            "test": "test",
        }
        resolved = alias.get(slug, slug)
        for candidate in (f".env.{resolved}", f".env.{slug}"):
            path = find_dotenv(candidate, usecwd=True)
            if path:
                load_dotenv(path, override=False)
                break


_load_env_files()

# === Environment Configuration ===
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")  # development, staging, production

# === Server Configuration ===
SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")


def _get_int_env(var_name: str, default_value: int) -> int:
    """
    Parse an integer environment variable robustly.
    - Trims whitespace and trailing semicolons.
    - Falls back to the first integer found in the string.
    - Returns the provided default if parsing fails.
    """
    raw = os.environ.get(var_name, str(default_value))
    text = str(raw).strip().rstrip(";")
    try:
        return int(text)
    except ValueError:
        match = re.search(r"[-+]?\d+", text or "")
        if match:
            return int(match.group(0))
    return int(default_value)


def _get_float_env(var_name: str, default_value: float) -> float:
    """Same rules as _get_int_env, for decimal values."""
    raw = os.environ.get(var_name, str(default_value))
    text = str(raw).strip().rstrip(";")
    try:
        return float(text)
    except ValueError:
        match = re.search(r"[-+]?\d+(?:\.\d+)?", text or "")
        if match:
            return float(match.group(0))
    return float(default_value)


SERVER_PORT = _get_int_env("SERVER_PORT", 8060)
DEBUG = os.environ.get("DEBUG", "true").lower() == "true"


# === CORS Configuration ===
def _get_cors_origins() -> list[str]:
    """
    Return CORS origins from env or a safe default.
    Example env format:
      CORS_ORIGINS="http://localhost:5173,https://tobugo.app"
    """
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


CORS_ORIGINS = _get_cors_origins()

# === Database Configuration ===
# Without a URI the app falls back to the in-memory store
MONGODB_URI = os.environ.get("MONGODB_URI")
DATABASE_NAME = os.environ.get("DATABASE_NAME", "tobugo")

# === JWT Configuration ===
# Tokens are minted by the identity provider; we only verify them
JWT_SECRET = os.environ.get("JWT_SECRET", "your-secret-key-change-this-in-production")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")

# === AI/LLM Configuration ===
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "google").strip().lower()  # google, openai

# Google AI (Gemini)
GOOGLE_AI_API_KEY = os.environ.get("GOOGLE_AI_API_KEY") or os.environ.get("GEMINI_API_KEY")

# OpenAI
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")

# Itinerary synthesis/optimization wants the stronger model, chat the faster one
ITINERARY_MODEL = os.environ.get("ITINERARY_MODEL", "gemini-2.5-pro")
CHAT_MODEL = os.environ.get("CHAT_MODEL", "gemini-2.5-flash")
LLM_TEMPERATURE = _get_float_env("LLM_TEMPERATURE", 0.7)

# === Retry/Backoff ===
RETRY_MAX_ATTEMPTS = _get_int_env("RETRY_MAX_ATTEMPTS", 3)
RETRY_BASE_SECONDS = _get_float_env("RETRY_BASE_SECONDS", 2.0)

# === Trip Defaults ===
DEFAULT_TRIP_DURATION_DAYS = _get_int_env("DEFAULT_TRIP_DURATION_DAYS", 7)
DEFAULT_LEAD_DAYS = _get_int_env("DEFAULT_LEAD_DAYS", 7)

# === Application Settings ===
APP_NAME = "TobuGo API"
APP_VERSION = "1.0.0"
