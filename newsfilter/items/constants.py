"""Field bounds for item validation."""

TITLE_MIN_LENGTH = 1
TITLE_MAX_LENGTH = 500

SUMMARY_MIN_LENGTH = 10
SUMMARY_MAX_LENGTH = 2000

URL_SCHEMES = frozenset({"http", "https"})
