# core/limits.py - SINGLE SOURCE OF TRUTH for timeouts, thresholds and bounds
"""
All numeric limits, timeouts, and thresholds MUST be defined here.
No other module may define these values.
"""


class Limits:
    """Operational limits and thresholds."""

    # ==========================================================================
    # Progress bounds (percent)
    # ==========================================================================

    PROGRESS_MIN = 0.0
    PROGRESS_MAX = 100.0

    # ==========================================================================
    # Timeouts (seconds)
    # ==========================================================================

    # tpm2_unseal invocation
    TPM_UNSEAL_TIMEOUT = 30

    # Synchronous D-Bus calls to the daemon (milliseconds, Qt convention)
    DBUS_CALL_TIMEOUT_MS = 5000

    # ==========================================================================
    # Timing windows (seconds)
    # ==========================================================================

    # Progress ticks for a key this soon after its terminal result are stale
    STALE_PROGRESS_WINDOW = 2.0

    # ==========================================================================
    # Logging
    # ==========================================================================

    # Maximum log file size before rotation (bytes)
    MAX_LOG_FILE_SIZE = 5 * 1024 * 1024  # 5 MB
    LOG_BACKUP_COUNT = 3
