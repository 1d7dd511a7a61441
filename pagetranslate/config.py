import os
from dotenv import load_dotenv
from openai import AsyncOpenAI

from .errors import ConfigurationError
from .models import CoordinateOrigin, LayoutThresholds

# Load environment variables from .env file
load_dotenv()


def _env_number(name: str, default, cast=float):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"Environment variable {name} must be a number, got '{raw}'.", variable=name) from e


# --- Translation service (any OpenAI-compatible chat completions endpoint) ---
TRANSLATE_API_KEY = os.getenv("TRANSLATE_API_KEY") or os.getenv("DEEPSEEK_API_KEY")
TRANSLATE_BASE_URL = os.getenv("TRANSLATE_BASE_URL", "https://api.deepseek.com")
TRANSLATE_MODEL = os.getenv("TRANSLATE_MODEL", "deepseek-chat")
TARGET_LANGUAGE = os.getenv("TARGET_LANGUAGE", "Simplified Chinese")
REQUEST_TIMEOUT = _env_number("REQUEST_TIMEOUT", 60.0) # seconds per request

# --- Pipeline limits ---
MAX_FILE_SIZE = _env_number("MAX_FILE_SIZE", 50 * 1024 * 1024, int) # 50MB
MAX_RETRY_ATTEMPTS = _env_number("MAX_RETRY_ATTEMPTS", 3, int)
RETRY_BASE_DELAY = _env_number("RETRY_BASE_DELAY", 1.0) # seconds, doubled after each failure

# --- Layout reconstruction (page units, tuned empirically) ---
LAYOUT_SORT_TOLERANCE = _env_number("LAYOUT_SORT_TOLERANCE", 5.0)
LAYOUT_LINE_TOLERANCE = _env_number("LAYOUT_LINE_TOLERANCE", 8.0)
LAYOUT_PARAGRAPH_GAP = _env_number("LAYOUT_PARAGRAPH_GAP", 20.0)


def load_layout_thresholds(origin: CoordinateOrigin = CoordinateOrigin.BOTTOM_LEFT) -> LayoutThresholds:
    """Builds the layout thresholds from the environment for a given coordinate origin."""
    try:
        return LayoutThresholds(
            sort_tolerance=LAYOUT_SORT_TOLERANCE,
            line_tolerance=LAYOUT_LINE_TOLERANCE,
            paragraph_gap=LAYOUT_PARAGRAPH_GAP,
            origin=origin
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid layout thresholds: {e}") from e


# --- OpenAI Client Initialization ---
def get_openai_client(api_key: str | None = None,
                      base_url: str | None = None,
                      timeout: float | None = None) -> AsyncOpenAI:
    """Initializes and returns the async OpenAI-compatible client."""
    api_key = api_key or TRANSLATE_API_KEY
    if not api_key:
        raise ConfigurationError("Translation API key is missing. Set TRANSLATE_API_KEY (or DEEPSEEK_API_KEY) in your .env file.")

    client = AsyncOpenAI(
        api_key=api_key,
        base_url=base_url or TRANSLATE_BASE_URL,
        timeout=timeout if timeout is not None else REQUEST_TIMEOUT,
        max_retries=0 # retries are owned by the RetryScheduler
    )
    return client


# --- Validation ---
def validate_config(require_api_key: bool = True):
    """Checks that the loaded configuration is usable before any page is attempted."""
    if require_api_key and not TRANSLATE_API_KEY:
        raise ConfigurationError("Translation API key is missing. Set TRANSLATE_API_KEY (or DEEPSEEK_API_KEY) in your .env file.")
    if MAX_RETRY_ATTEMPTS < 1:
        raise ConfigurationError("MAX_RETRY_ATTEMPTS must be at least 1.")
    if RETRY_BASE_DELAY < 0:
        raise ConfigurationError("RETRY_BASE_DELAY must not be negative.")
    if MAX_FILE_SIZE <= 0:
        raise ConfigurationError("MAX_FILE_SIZE must be positive.")
    if REQUEST_TIMEOUT <= 0:
        raise ConfigurationError("REQUEST_TIMEOUT must be positive.")
    load_layout_thresholds()
