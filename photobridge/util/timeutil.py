"""Utility functions for time operations."""


def format_duration(seconds: float) -> str:
    """Format an elapsed time as ``12.3s``, ``4m 05s`` or ``1h 02m``."""
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes, secs = divmod(int(round(seconds)), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"

    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"
