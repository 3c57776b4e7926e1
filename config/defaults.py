"""greenaudit: All default threshold values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via AssessmentConfig at runtime.
"""

# ── Score thresholds ───────────────────────────────────────────────────────────
# Scores at or above this value are "Compliant" / "Low Risk"
COMPLIANT_THRESHOLD: int = 75

# Scores at or above this value (and below COMPLIANT_THRESHOLD) are
# "Needs Attention" / "Medium Risk"; everything lower is "High Risk"
NEEDS_ATTENTION_THRESHOLD: int = 50

# Minimum criterion score for a result to be reported as a key strength
STRENGTH_THRESHOLD: int = 80

# Neutral score used for zero-claim, fallback, and degenerate-weight cases
NEUTRAL_SCORE: int = 50

# Weight assigned to a criterion when none (or an invalid one) is configured
DEFAULT_CRITERION_WEIGHT: float = 1.0

# ── Report caps ────────────────────────────────────────────────────────────────
MAX_STRENGTHS: int = 3
MAX_CRITICAL_ISSUES: int = 10
MAX_HIGH_FINDINGS_PER_CRITERION: int = 2
MAX_PRIORITY_ACTIONS: int = 5

# Characters of a criterion rationale carried into a strength description
STRENGTH_DESCRIPTION_CHARS: int = 200

# Characters of a finding carried into a critical-issue title
ISSUE_TITLE_CHARS: int = 100

# ── Concurrency and retry ──────────────────────────────────────────────────────
# Maximum simultaneous outstanding oracle calls
MAX_CONCURRENCY: int = 10

# Retries after the first attempt (3 attempts total)
MAX_RETRIES: int = 2

# Base seconds for exponential backoff: sleeps 1s, 2s, 4s, ...
BACKOFF_BASE_SECONDS: float = 1.0

# ── Oracle request budgets ─────────────────────────────────────────────────────
# Claim extraction reads the whole document and gets the larger budget
EXTRACTION_TIMEOUT_SECONDS: float = 60.0
ASSESSMENT_TIMEOUT_SECONDS: float = 30.0

EXTRACTION_MAX_TOKENS: int = 8000
ASSESSMENT_MAX_TOKENS: int = 2000

# Maximum claims serialized into a single criterion prompt
MAX_PROMPT_CLAIMS: int = 40

# Characters of document context included in a criterion prompt
MAX_CONTEXT_CHARS: int = 2500

# Characters of document text used as shared context when none is supplied
DOCUMENT_CONTEXT_CHARS: int = 5000

# Maximum paged text chunks combined into the extraction input
MAX_DOCUMENT_CHUNKS: int = 100

# Below this many characters of extracted text the vision fallback is used
VISION_FALLBACK_MIN_CHARS: int = 100

# ── LLM backends ──────────────────────────────────────────────────────────────
# Default active LLM backend: "anthropic", "ollama", or "openai"
LLM_BACKEND: str = "ollama"

# Anthropic model identifier
ANTHROPIC_MODEL: str = "claude-sonnet-4-6"

# Ollama model identifier
OLLAMA_MODEL: str = "gemma3:27b"

# Default Ollama server base URL.
# Override via the OLLAMA_HOST environment variable or AssessmentConfig(ollama_host=...).
OLLAMA_HOST: str = "http://localhost:11434"

# Ollama Cloud API key for Bearer token authentication; empty disables auth headers.
OLLAMA_API_KEY: str = ""

# OpenAI-compatible chat completions endpoint and model
OPENAI_BASE_URL: str = "https://api.openai.com/v1"
OPENAI_MODEL: str = "gpt-4.1-mini"

# Minimum max_tokens for structured extraction calls
LLM_MIN_MAX_TOKENS: int = 256

# Default temperature for oracle calls
LLM_TEMPERATURE: float = 0.1

# ── Output paths ──────────────────────────────────────────────────────────────
# Root directory for job records and reports
OUTPUT_ROOT: str = "outputs/jobs"

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
