"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["SettingsPort"]


@dataclass
class SettingsPort:
    """Runtime settings for the request scheduler.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        poll_interval_sec: Seconds between run-state checks of the supervisory loop.
        error_backoff_sec: Seconds to wait after a pass failed unexpectedly.
        request_timeout_sec: Total timeout of one outbound request.
    """

    poll_interval_sec: float = 1.0
    error_backoff_sec: float = 5.0
    request_timeout_sec: float = 30.0
