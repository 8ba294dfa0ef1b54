"""Standard logging tags for consistent log filtering.

These tags prefix log lines so timeline output can be grepped or routed.

Usage:
    from tweenline.logging.tags import TAG_RENDER
    logger.info("%s rendering started", TAG_RENDER)
"""

# =============================================================================
# Performance and Metrics
# =============================================================================

TAG_PERF = "[PERF]"
"""Performance metrics, only emitted when perf metrics are enabled."""

# =============================================================================
# Engine Tags
# =============================================================================

TAG_TIMELINE = "[TIMELINE]"
"""Timeline lifecycle and state changes."""

TAG_RENDER = "[RENDER]"
"""Frame-counted rendering and frame persistence."""

TAG_BINDING = "[BINDING]"
"""Target binding resolution and writes."""

TAG_EASING = "[EASING]"
"""Easing selector lookups."""

TAG_CONFIG = "[CONFIG]"
"""Configuration changes and rejected setter calls."""

TAG_NOTIFY = "[NOTIFY]"
"""Finished / loop-end listener dispatch."""
