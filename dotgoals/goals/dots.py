"""Dot grid arithmetic for progress displays."""

from typing import Optional

from dotgoals.config import settings


def dot_capacity(width: float, height: float, dot_size: Optional[int] = None) -> int:
    """
    Number of dots that fit in an area.

    Args:
        width: Area width in pixels
        height: Area height in pixels
        dot_size: Footprint of one dot including margins (defaults to settings)

    Returns:
        Dots per row times dots per column
    """
    size = dot_size if dot_size is not None else settings.dot_size
    if size <= 0 or width <= 0 or height <= 0:
        return 0

    dots_per_row = int(width // size)
    dots_per_column = int(height // size)
    return dots_per_row * dots_per_column


def completed_dots(total_dots: int, percentage: int) -> int:
    """Number of dots to show as filled for a completion percentage."""
    if total_dots <= 0:
        return 0
    percentage = min(100, max(0, percentage))
    return (total_dots * percentage) // 100
