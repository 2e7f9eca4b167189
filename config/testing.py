import os

SECRET_KEY = "test-secret"

DATA_DIR = os.getenv("DATA_DIR", "data-test")

JSONBIN_BASE_URL = "http://127.0.0.1:9/v3/b"
PUSH_DEBOUNCE_SECONDS = 0.05
POLL_INTERVAL_SECONDS = 0.1
REQUEST_TIMEOUT_SECONDS = 2

# Never call the LLM from tests
GROQ_API_KEY = ""
LLM_MODEL = "llama-3.1-8b-instant"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
