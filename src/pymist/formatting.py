"""Human-readable formatting of counters, rates and durations."""

from __future__ import annotations

_BANDWIDTH_UNITS: tuple[str, ...] = ("bps", "Kbps", "Mbps", "Gbps")
_BYTE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB")


def _scale(value: float, base: float, units: tuple[str, ...]) -> str:
    index = 0
    while abs(value) >= base and index < len(units) - 1:
        value /= base
        index += 1
    return f"{value:.1f} {units[index]}"


def format_bandwidth(bps: int) -> str:
    """Format bits per second with decimal (1000-based) units."""
    return _scale(float(bps), 1000.0, _BANDWIDTH_UNITS)


def format_bytes(count: int) -> str:
    """Format a byte count with binary (1024-based) units."""
    return _scale(float(count), 1024.0, _BYTE_UNITS)


def format_duration(seconds: int) -> str:
    """Format seconds as ``m:ss`` or ``h:mm:ss``.  Negative input clamps to 0."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_status_line(
    *,
    running: bool,
    active_streams: int,
    pushes: int,
    viewers: int,
    server_type: str | None = None,
) -> str:
    """Build the one-line server summary shown by status consumers."""
    if not running:
        return "MistServer: Stopped"

    status = f"MistServer ({server_type}): Running" if server_type else "MistServer: Running"

    details: list[str] = []
    if active_streams:
        details.append(f"{active_streams} streams")
    if pushes:
        details.append(f"{pushes} pushes")
    if viewers and details:
        details.append(f"{viewers} viewers")
    if details:
        status += f" ({', '.join(details)})"
    return status
