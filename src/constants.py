"""Constants used in business logic."""

# Life-balance categories (pillars), in the order the client sends them
CATEGORY_FINANCIAL = "financial"
CATEGORY_HEALTH = "health"
CATEGORY_RELATIONSHIPS = "relationships"
CATEGORY_GROWTH = "growth"
CATEGORY_PURPOSE = "purpose"
CATEGORIES = (
    CATEGORY_FINANCIAL,
    CATEGORY_HEALTH,
    CATEGORY_RELATIONSHIPS,
    CATEGORY_GROWTH,
    CATEGORY_PURPOSE,
)
NUMBER_OF_PILLARS = len(CATEGORIES)

UNABLE_TO_PROCESS_RESPONSE = "Failed to get AI response"

# Document store
# Google Docs plain text export, the identifier is the document ID
DEFAULT_DOCUMENT_URL_TEMPLATE = (
    "https://docs.google.com/document/d/{document_id}/export?format=txt"
)
DEFAULT_FETCH_TIMEOUT = 30.0
# separator placed between texts of two sources in the same category
SOURCE_DELIMITER = "\n\n--- source: {document_id} ---\n\n"

# Document cache
DEFAULT_CACHE_TTL_SECONDS = 3600
REFRESH_MODE_WAIT = "wait"
REFRESH_MODE_SERVE_STALE = "serve_stale"

# Content extraction
EXTRACTION_STRATEGY_HEURISTIC = "heuristic"
EXTRACTION_STRATEGY_MODEL = "model"
DEFAULT_EXTRACTION_MAX_LENGTH = 4000
DEFAULT_MARKER_KEYWORDS = ("Key", "Step", "Method")
# longest line still considered as a "Title:" heading
MAX_TITLE_HEADING_LENGTH = 60
# words that may stay lower-case in a "Title:" heading
TITLE_MINOR_WORDS = frozenset(
    "a an and as at but by for in of on or the to with".split()
)
DEFAULT_SUMMARIZE_THRESHOLD = 3000
DEFAULT_SUMMARIZE_PREFIX_LENGTH = 10000
DEFAULT_SUMMARY_FALLBACK_LENGTH = 3000
TRUNCATION_MARKER = "\n\n[... content truncated ...]"
DEFAULT_SUMMARY_MAX_TOKENS = 1000
DEFAULT_SUMMARY_TEMPERATURE = 0.3

SUMMARIZATION_SYSTEM_PROMPT = (
    "You extract key actionable points from coaching documents. "
    "Keep numbered steps, tools, percentages and named methods exactly as written."
)

SUMMARIZATION_PROMPT = """Extract the key actionable points from this {category} document.
Preserve every numbered list and step-by-step procedure verbatim.

Document:
{text}
"""

# Search
DEFAULT_MAX_MATCHES_PER_CATEGORY = 5

# Inference
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 800
DEFAULT_TOP_P = 0.95
DEFAULT_COMPLETION_TIMEOUT = 60.0

# Prompt composition
DEFAULT_DETAIL_TRIGGER_PHRASES = (
    "step by step",
    "guide",
    "how to",
    "how do i",
    "steps",
    "process",
    "method",
    "blueprint",
)
DEFAULT_ECOMMERCE_TRIGGER_PHRASES = (
    "dropshipping",
    "e-commerce",
    "ecommerce",
    "online store",
)
DEFAULT_STRUCTURED_GUIDE_LIMIT = 10

# Default role framing used only when no other system prompt is specified in
# configuration file
DEFAULT_SYSTEM_PROMPT = (
    "You are a direct AI coach. When users ask for guides or step-by-step "
    "instructions, you MUST use the EXACT structure from the documents."
)

BEHAVIORAL_DIRECTIVES = (
    "If documents contain a step-by-step guide, USE IT EXACTLY - don't create your own",
    "If documents contain a numbered guide or blueprint, reproduce it verbatim",
    "Include ALL specific details: percentages, tools and named methods",
    "Quote exact strategies, not generic advice",
    "If asking for a guide and one exists in documents, provide it in FULL",
)

ECOMMERCE_DIRECTIVE = (
    'For e-commerce questions, use "The E-Commerce Success Blueprint" '
    "structure if available"
)

CLOSING_DIRECTIVE = (
    "NEVER give generic advice when specific strategies exist in the documents."
)
