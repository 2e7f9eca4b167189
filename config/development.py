import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Local durable store (one JSON file per collection)
DATA_DIR = os.getenv("DATA_DIR", "data")

# Remote bin (JSONBin v3)
JSONBIN_BASE_URL = os.getenv("JSONBIN_BASE_URL", "https://api.jsonbin.io/v3/b")
PUSH_DEBOUNCE_SECONDS = float(os.getenv("PUSH_DEBOUNCE_SECONDS", "2.0"))
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "3.0"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

# AI commentary (optional)
GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
LLM_MODEL = os.getenv("LLM_MODEL", "llama-3.1-8b-instant")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
