"""Constants for fastcheck."""

# Configuration file looked up when --config is not given
CONFIG_FILE = "config.toml"

# Snapshot written when save_snapshot is enabled
SNAPSHOT_FILE = "fastcheck.snapshot"

# Per-root gitignore-style exclusion file
IGNORE_FILE = ".fastcheckignore"

# Digest sizes in bytes
FAST_DIGEST_SIZE = 8
SHA256_DIGEST_SIZE = 32

# Printed when there is nothing to fingerprint
ZERO_OUTPUT = f"{0:X}"

# Upper bound on symlink hops while resolving a followed link
MAX_SYMLINK_DEPTH = 40

# Scratch buffer starting size for workers
INITIAL_BUFFER_SIZE = 64 * 1024

# Version
FASTCHECK_VERSION = "0.1.0"
