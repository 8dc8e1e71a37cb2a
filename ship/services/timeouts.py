from __future__ import annotations

# GitHub API calls through gh
GH_TIMEOUT_SECONDS = 60.0

# Asset uploads can be large
GH_UPLOAD_TIMEOUT_SECONDS = 15 * 60.0

# GitVersion walks the history; large repos are slow on a cold cache
GITVERSION_TIMEOUT_SECONDS = 5 * 60.0

# Idempotent GH read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
