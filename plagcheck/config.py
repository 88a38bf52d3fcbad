import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, default))


# ───── Sentence segmentation ─────
MIN_SENTENCE_LENGTH = _env_int("MIN_SENTENCE_LENGTH", 20)
MAX_SENTENCES = _env_int("MAX_SENTENCES", 20)
MIN_TOKEN_LENGTH = 3

# ───── Similarity thresholds ─────
NGRAM_SIZE = _env_int("NGRAM_SIZE", 5)
RELEVANCE_THRESHOLD = _env_float("RELEVANCE_THRESHOLD", 0.15)
PLAGIARISM_THRESHOLD = _env_float("PLAGIARISM_THRESHOLD", 0.5)
MIN_DOCUMENT_LENGTH = _env_int("MIN_DOCUMENT_LENGTH", 100)

# ───── Search providers ─────
DUCKDUCKGO_ENDPOINT = os.getenv("DUCKDUCKGO_ENDPOINT", "https://html.duckduckgo.com/html/")
CROSSREF_ENDPOINT = os.getenv("CROSSREF_ENDPOINT", "https://api.crossref.org/works")
WEB_QUERY_MAX_CHARS = 200
ACADEMIC_QUERY_MAX_CHARS = 150
WEB_RESULTS_LIMIT = 8
ACADEMIC_ROWS = 5
MAX_CANDIDATE_URLS = 10
SEARCH_TIMEOUT = _env_float("SEARCH_TIMEOUT", 10)

# ───── Fetching & scheduling ─────
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 8)
MAX_DOCUMENT_CHARS = _env_int("MAX_DOCUMENT_CHARS", 5000)
MAX_URLS_PER_SENTENCE = _env_int("MAX_URLS_PER_SENTENCE", 5)
MAX_FETCH_WORKERS = _env_int("MAX_FETCH_WORKERS", 5)
FETCH_POOL_SIZE = _env_int("FETCH_POOL_SIZE", 32)
BATCH_SIZE = _env_int("BATCH_SIZE", 3)
BATCH_DELAY = _env_float("BATCH_DELAY", 0.5)

# ───── API ─────
MIN_TEXT_LENGTH = _env_int("MIN_TEXT_LENGTH", 100)
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "https://judol.netlify.app,http://localhost:5173"
).split(",")

# ───── File support ─────
ALLOWED_EXTENSIONS = {"txt", "pdf", "docx"}
MAX_FILE_SIZE_MB = 5

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")
