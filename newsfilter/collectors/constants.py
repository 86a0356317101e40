"""Constants for plan building and pagination."""

# Quotas
DEFAULT_MAX_ITEMS_PER_ACCOUNT = 10
MAX_ITEMS_PER_PLAN = 200

# Page sizes
MIN_RESULTS_PER_PAGE = 10
MAX_RESULTS_PER_PAGE = 100
DEGRADED_PAGE_SIZES: tuple[int, ...] = (50, 40, 30, 20, 10)

# Query defaults
DEFAULT_QUERY_SUFFIX = "-is:retweet"
DEFAULT_FALLBACK_QUERIES: tuple[str, ...] = (
    "AI",
    "Artificial Intelligence",
    "大模型",
    "AIGC",
)
FALLBACK_PLAN_LABEL = "Fallback Keywords"

# Recent-search API only covers the last seven days
MAX_SINCE_HOURS = 168
