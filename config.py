"""
Central configuration — reads from .env file.

Every value is a module-level constant read once at import time.
Code that needs a setting reads config.X at call time, so tests (and
callers embedding the engine) can override a value by assigning to it.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(env_key: str, default: bool) -> bool:
    raw = os.getenv(env_key, "true" if default else "false")
    return raw.strip().lower() not in ("false", "0", "no")


# ── Label + text detection (Google Cloud Vision) ──────────────────────────────
# Label detection is the only required collaborator: without a key the engine
# refuses to start (see collaborators/manager.py).
GOOGLE_API_KEY: str | None = os.getenv("GOOGLE_API_KEY")
GOOGLE_VISION_URL: str     = os.getenv(
    "GOOGLE_VISION_URL", "https://vision.googleapis.com/v1/images:annotate"
)
LABEL_MAX_RESULTS: int     = int(os.getenv("LABEL_MAX_RESULTS", "20"))

# ── Background removal (rembg, runs locally) ──────────────────────────────────
BACKGROUND_REMOVAL_ENABLED: bool = _flag("BACKGROUND_REMOVAL_ENABLED", True)
REMBG_MODEL: str                 = os.getenv("REMBG_MODEL", "u2net")

# ── Processed image storage (MinIO / any S3-compatible store) ─────────────────
MINIO_ENDPOINT: str | None   = os.getenv("MINIO_ENDPOINT")
MINIO_ACCESS_KEY: str | None = os.getenv("MINIO_ACCESS_KEY")
MINIO_SECRET_KEY: str | None = os.getenv("MINIO_SECRET_KEY")
MINIO_BUCKET: str            = os.getenv("MINIO_BUCKET", "garment-images")
MINIO_SECURE: bool           = _flag("MINIO_SECURE", False)
# Public base URL of the bucket host, e.g. https://cdn.example.com
# Leave blank to hand out presigned GET URLs instead.
MINIO_PUBLIC_BASE_URL: str | None = os.getenv("MINIO_PUBLIC_BASE_URL", "").strip() or None
MINIO_URL_EXPIRY_HOURS: int       = int(os.getenv("MINIO_URL_EXPIRY_HOURS", "24"))

# ── Custom classifier ─────────────────────────────────────────────────────────
#   auto      → HTTP endpoint if CLASSIFIER_ENDPOINT_URL is set, otherwise none
#   endpoint  → custom model served behind CLASSIFIER_ENDPOINT_URL
#   openai    → OpenAI vision model prompted for the classifier JSON
#   gemini    → Google Gemini prompted for the classifier JSON
#   none      → labels and text only
CLASSIFIER_BACKEND: str               = os.getenv("CLASSIFIER_BACKEND", "auto").strip().lower()
CLASSIFIER_ENDPOINT_URL: str | None   = os.getenv("CLASSIFIER_ENDPOINT_URL", "").strip() or None
CLASSIFIER_ENDPOINT_TOKEN: str | None = os.getenv("CLASSIFIER_ENDPOINT_TOKEN") or None
OPENAI_API_KEY: str | None            = os.getenv("OPENAI_API_KEY")
OPENAI_CLASSIFIER_MODEL: str          = os.getenv("OPENAI_CLASSIFIER_MODEL", "gpt-4o-mini")
GEMINI_CLASSIFIER_MODEL: str          = os.getenv("GEMINI_CLASSIFIER_MODEL", "gemini-2.0-flash")

# ── Inference policy ──────────────────────────────────────────────────────────
# Upper bound for every single collaborator call. A timeout counts as that
# collaborator failing (fatal for labels, degraded for everything else).
COLLABORATOR_TIMEOUT_S: float = float(os.getenv("COLLABORATOR_TIMEOUT_S", "30"))

# Domain used when neither the classifier nor any label decides it.
DEFAULT_DOMAIN: str = os.getenv("DEFAULT_DOMAIN", "APPAREL").strip().upper()

# Optional JSON file overriding the keyword tables in vocabulary.py
VOCABULARY_FILE: str | None = os.getenv("VOCABULARY_FILE", "").strip() or None
