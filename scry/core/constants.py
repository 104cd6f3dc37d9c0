"""Core constants for scry sessions."""

# Log buffer
DEFAULT_BUFFER_CAPACITY = 2000
DEFAULT_INGEST_QUEUE_SIZE = 1000

# Input handling
DEFAULT_POLL_INTERVAL_MS = 50
DEFAULT_ESCAPE_TIMEOUT_MS = 30
DEFAULT_PAGE_SIZE = 10

# Classifier
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_SAMPLE_LINES = 100
DEFAULT_MAX_LINE_CHARS = 500
DEFAULT_MAX_MESSAGE_CHARS = 10000
ANALYSIS_QUEUE_SIZE = 10

# Display
MAX_DISPLAY_CHARS = 1000
MAX_TOKEN_CHARS = 100

__all__ = [
    "DEFAULT_BUFFER_CAPACITY",
    "DEFAULT_INGEST_QUEUE_SIZE",
    "DEFAULT_POLL_INTERVAL_MS",
    "DEFAULT_ESCAPE_TIMEOUT_MS",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_MODEL",
    "DEFAULT_SAMPLE_LINES",
    "DEFAULT_MAX_LINE_CHARS",
    "DEFAULT_MAX_MESSAGE_CHARS",
    "ANALYSIS_QUEUE_SIZE",
    "MAX_DISPLAY_CHARS",
    "MAX_TOKEN_CHARS",
]
