"""Constants used throughout Trakit."""

# Version
VERSION = "0.1.0"

# Directory names
TRAKIT_DIR = ".trakit"
OBJECTS_DIR = "objects"
COMMITS_DIR = "commits"

# File names
HEAD_FILE = "HEAD"
INDEX_FILE = "index.json"
COMMIT_EXT = ".json"
IGNORE_FILE = ".trakitignore"

# Directories never walked when collecting the working set
DEFAULT_IGNORE_DIRS = frozenset({
    TRAKIT_DIR,
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    ".pytest_cache",
    ".mypy_cache",
})

# Commit defaults
DEFAULT_MESSAGE = "no message"

# Index format
INDEX_VERSION = 1

# Hash algorithm
HASH_ALGORITHM = "sha256"
HASH_LENGTH = 64  # SHA-256 produces 64 hex characters
SHORT_HASH_LENGTH = 7

# Environment variable that overrides the workspace root
ENV_REPO_ROOT = "TRAKIT_DIR"

# Exit codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_DATA_ERROR = 3
EXIT_INTERRUPTED = 130
