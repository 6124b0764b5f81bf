from __future__ import annotations

# gh API operations (auth status, release create)
GH_TIMEOUT_SECONDS = 60.0

# Asset uploads can be large
GH_UPLOAD_TIMEOUT_SECONDS = 30 * 60.0
