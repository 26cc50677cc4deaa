"""
Environment settings loaded from .env file.
"""
import os
from dotenv import load_dotenv

load_dotenv()


# --- NLP Models ---
SPACY_MODEL: str = os.getenv("SPACY_MODEL", "en_core_web_sm")
NER_ENABLED: bool = os.getenv("NER_ENABLED", "true").lower() == "true"

# --- Parsing ---
CONFLICT_SCOPE: str = os.getenv("CONFLICT_SCOPE", "global")   # "global" | "type"
PARSE_MIN_LENGTH: int = int(os.getenv("PARSE_MIN_LENGTH", "1"))

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
MAX_TEXT_LOG_CHARS: int = int(os.getenv("MAX_TEXT_LOG_CHARS", "200"))
