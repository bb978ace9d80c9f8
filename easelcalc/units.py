"""Unit conversion and rounding utilities.

This module handles:
- Length conversions (inches ↔ millimeters, inches → PDF points)
- Coordinate system transforms (top-left inches → ReportLab bottom-left points)
- Precision rounding and quarter-inch checks used by border suggestions
"""

import math

from easelcalc.config import DECIMAL_PLACES, MM_PER_INCH, POINTS_PER_INCH, QUARTER_INCH, ROUNDING_MULTIPLIER


def inches_to_mm(inches: float) -> float:
    """Convert inches to millimeters.

    Args:
        inches: Length in inches

    Returns:
        Length in millimeters
    """
    return inches * MM_PER_INCH


def mm_to_inches(mm: float) -> float:
    """Convert millimeters to inches.

    Args:
        mm: Length in millimeters

    Returns:
        Length in inches
    """
    return mm / MM_PER_INCH


def inches_to_points(inches: float) -> float:
    """Convert inches to PDF points (1pt = 1/72 inch)."""
    return inches * POINTS_PER_INCH


def inches_to_pdf_coords(x_in: float, y_in: float, page_height_in: float) -> tuple[float, float]:
    """Convert top-left inch coordinates to ReportLab bottom-left points.

    Args:
        x_in: X coordinate in inches from the left paper edge
        y_in: Y coordinate in inches from the top paper edge
        page_height_in: Total paper height in inches

    Returns:
        Tuple of (x_pt, y_pt) in ReportLab points

    Note:
        ReportLab uses bottom-left origin, so Y axis is flipped.
    """
    x_pt = inches_to_points(x_in)
    y_pt = inches_to_points(page_height_in - y_in)
    return x_pt, y_pt


def round_to_precision(value: float, places: int = DECIMAL_PLACES) -> float:
    """Round to a fixed number of decimal places (halves round up)."""
    multiplier = 10**places
    return math.floor(value * multiplier + 0.5) / multiplier


def round_to_standard_precision(value: float) -> float:
    """Round using the application-wide rounding multiplier (hundredths of an inch)."""
    return math.floor(value * ROUNDING_MULTIPLIER + 0.5) / ROUNDING_MULTIPLIER


def is_quarter_increment(value: float) -> bool:
    """Check whether a length lies on the quarter-inch grid.

    Args:
        value: Length in inches

    Returns:
        True if value is within 0.001 quarter-steps of a whole quarter inch
    """
    if not math.isfinite(value):
        return False
    scaled = value / QUARTER_INCH
    return abs(scaled - round(scaled)) < 0.001


def format_length(inches: float, unit: str = "in") -> str:
    """Format an inch value for display in the requested unit.

    Args:
        inches: Length in inches
        unit: "in" | "mm" | "cm"

    Returns:
        Display string such as '1.25"' or '31.8 mm'

    Raises:
        ValueError: If unit is not supported
    """
    if unit == "in":
        return f'{round_to_precision(inches, 3):g}"'
    if unit == "mm":
        return f"{inches_to_mm(inches):.1f} mm"
    if unit == "cm":
        return f"{inches_to_mm(inches) / 10:.2f} cm"
    raise ValueError(f"Unsupported unit: {unit}")
