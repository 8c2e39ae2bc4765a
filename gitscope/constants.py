"""
Centralized constants for gitscope.

Hardcoded strings and magic numbers shared across the graph, diff and
backend modules live here so they are easy to find and tune.
"""

# Commit graph
DEFAULT_PAGE_SIZE = 100
DEFAULT_PALETTE_SIZE = 12
SHORT_HASH_LENGTH = 7

# Ref label prefixes as reported by the repository service
HEAD_REF = "HEAD"
TAG_REF_PREFIX = "tag: "

# Diff / hunks
DEFAULT_CONTEXT_LINES = 3
DEFAULT_REFETCH_DELAY = 0.3  # seconds to wait before re-fetching after a hunk action
HUNK_PREVIEW_LENGTH = 80
NO_NEWLINE_MARKER = "\\ No newline at end of file"

# Settings
SETTINGS_ENV_VAR = "GITSCOPE_CONFIG"
