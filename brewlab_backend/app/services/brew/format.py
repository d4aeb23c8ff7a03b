from __future__ import annotations
import math

__all__ = ["round_half_up", "format_seconds", "to_ratio_label"]

# Half-up rounding; Python's round() would send 2.5 to 2
def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def format_seconds(total_sec: float) -> str:
    """Seconds -> "MM:SS". Negative input reads as zero."""
    safe = max(0, int(math.floor(total_sec)))
    minutes, seconds = divmod(safe, 60)
    return f"{minutes:02d}:{seconds:02d}"

def to_ratio_label(water_grams: float, dose_grams: float) -> str:
    if dose_grams <= 0:
        return "-"
    return f"1:{water_grams / dose_grams:.1f}"
