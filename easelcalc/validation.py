"""Schema validation using Pydantic models.

This module defines:
- Pydantic models for calculator settings, full calculator state and calculation results
- TypedDicts for the intermediate geometry values passed between pipeline stages
- Minimum-border validation with last-known-good fallback
- Parsing of free-text numeric input for custom dimensions
"""

import math
from typing import TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from easelcalc.config import (
    ASPECT_RATIO_MAP,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_CUSTOM_ASPECT_HEIGHT,
    DEFAULT_CUSTOM_ASPECT_WIDTH,
    DEFAULT_CUSTOM_PAPER_HEIGHT,
    DEFAULT_CUSTOM_PAPER_WIDTH,
    DEFAULT_MIN_BORDER,
    DEFAULT_PAPER_SIZE,
    PAPER_SIZE_MAP,
)


class Dimensions(TypedDict):
    """Width/height pair in inches (paper) or ratio units (aspect ratio)."""

    w: float
    h: float


class OrientedDimensions(TypedDict):
    """Paper and aspect ratio after landscape/flip transforms."""

    paper: Dimensions
    ratio: Dimensions


class MinBorderData(TypedDict):
    """Outcome of minimum-border validation."""

    min_border: float
    warning: str | None
    last_valid: float


class PrintSize(TypedDict):
    """Solved print rectangle in inches."""

    print_w: float
    print_h: float


class OffsetData(TypedDict):
    """Half-gaps between print and paper edges plus the offsets actually applied."""

    half_w: float
    half_h: float
    clamped_h: float
    clamped_v: float
    warning: str | None


class Borders(TypedDict):
    """Per-side measurements in inches."""

    left: float
    right: float
    top: float
    bottom: float


class BladeData(TypedDict):
    """Blade readings with the reported blade thickness and an optional warning."""

    readings: Borders
    blade_thickness: float
    warning: str | None


class SlotSize(TypedDict):
    """Easel size or slot in inches."""

    width: float
    height: float


class EaselFit(TypedDict):
    """Easel chosen for a paper size."""

    easel_size: SlotSize
    effective_slot: SlotSize
    is_non_standard_paper_size: bool


class PaperShift(TypedDict):
    """Centering shift of the paper relative to the easel slot, in inches."""

    sp_x: float
    sp_y: float


class CalculatorSettings(BaseModel):
    """User-editable calculator settings (the persisted subset)."""

    model_config = ConfigDict(frozen=True)

    aspect_ratio: str = Field(default=DEFAULT_ASPECT_RATIO, description="Aspect ratio selector")
    paper_size: str = Field(default=DEFAULT_PAPER_SIZE, description="Paper size selector")
    custom_aspect_width: float = Field(default=DEFAULT_CUSTOM_ASPECT_WIDTH, description="Custom ratio width")
    custom_aspect_height: float = Field(default=DEFAULT_CUSTOM_ASPECT_HEIGHT, description="Custom ratio height")
    custom_paper_width: float = Field(default=DEFAULT_CUSTOM_PAPER_WIDTH, description="Custom paper width (in)")
    custom_paper_height: float = Field(default=DEFAULT_CUSTOM_PAPER_HEIGHT, description="Custom paper height (in)")
    min_border: float = Field(default=DEFAULT_MIN_BORDER, description="Requested minimum border (in)")
    enable_offset: bool = False
    ignore_min_border: bool = False
    horizontal_offset: float = Field(default=0.0, description="Horizontal print offset (in)")
    vertical_offset: float = Field(default=0.0, description="Vertical print offset (in)")
    show_blades: bool = False
    show_blade_readings: bool = False
    is_landscape: bool = True
    is_ratio_flipped: bool = False

    @field_validator("aspect_ratio")
    @classmethod
    def check_aspect_ratio(cls, v: str) -> str:
        """Validate aspect ratio selector is a known preset, custom or even-borders."""
        if v not in ASPECT_RATIO_MAP:
            raise ValueError(f"Unknown aspect ratio: {v}")
        return v

    @field_validator("paper_size")
    @classmethod
    def check_paper_size(cls, v: str) -> str:
        """Validate paper size selector is a known preset or custom."""
        if v not in PAPER_SIZE_MAP:
            raise ValueError(f"Unknown paper size: {v}")
        return v


class ImageSize(BaseModel):
    """Pixel dimensions of a loaded preview image."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class CropOffset(BaseModel):
    """Crop offset of the preview image."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class CalculatorState(CalculatorSettings):
    """Full reducer state: settings, last-valid tracking, visible warnings and image data."""

    last_valid_custom_aspect_width: float = Field(default=DEFAULT_CUSTOM_ASPECT_WIDTH, gt=0)
    last_valid_custom_aspect_height: float = Field(default=DEFAULT_CUSTOM_ASPECT_HEIGHT, gt=0)
    last_valid_custom_paper_width: float = Field(default=DEFAULT_CUSTOM_PAPER_WIDTH, gt=0)
    last_valid_custom_paper_height: float = Field(default=DEFAULT_CUSTOM_PAPER_HEIGHT, gt=0)
    last_valid_min_border: float = Field(default=DEFAULT_MIN_BORDER, ge=0)

    offset_warning: str | None = None
    blade_warning: str | None = None
    min_border_warning: str | None = None
    paper_size_warning: str | None = None

    selected_image_uri: str | None = None
    image_dimensions: ImageSize = ImageSize()
    is_cropping: bool = False
    crop_offset: CropOffset = CropOffset()
    crop_scale: float = Field(default=1.0, gt=0)


class CalculationResult(BaseModel):
    """Complete result of a border calculation."""

    model_config = ConfigDict(frozen=True)

    left_border: float
    right_border: float
    top_border: float
    bottom_border: float
    print_width: float
    print_height: float
    paper_width: float
    paper_height: float
    has_valid_print: bool = Field(description="False when the print area degenerates to zero")

    print_width_percent: float
    print_height_percent: float
    left_border_percent: float
    right_border_percent: float
    top_border_percent: float
    bottom_border_percent: float

    left_blade_reading: float
    right_blade_reading: float
    top_blade_reading: float
    bottom_blade_reading: float
    blade_thickness: float

    is_non_standard_paper_size: bool
    easel_size: dict[str, float] = Field(description="Easel dimensions: width, height in inches")
    effective_slot: dict[str, float] = Field(
        description="Slot holding the paper: the easel as stored (landscape) for standard sizes, "
        "otherwise the slot in the paper's orientation"
    )
    easel_size_label: str

    offset_warning: str | None = None
    blade_warning: str | None = None
    min_border_warning: str | None = None
    paper_size_warning: str | None = None
    last_valid_min_border: float
    clamped_horizontal_offset: float
    clamped_vertical_offset: float

    preview_scale: float
    preview_width: float
    preview_height: float

    def warnings(self) -> dict[str, str | None]:
        """Return the four warning fields keyed by state field name."""
        return {
            "offset_warning": self.offset_warning,
            "blade_warning": self.blade_warning,
            "min_border_warning": self.min_border_warning,
            "paper_size_warning": self.paper_size_warning,
        }


def _format_inches(value: float) -> str:
    return f"{value:g}"


def validate_min_border(
    requested: float,
    paper_w: float,
    paper_h: float,
    last_valid: float | None = None,
) -> MinBorderData:
    """Validate a requested minimum border against the oriented paper.

    Args:
        requested: Minimum border the user asked for (inches)
        paper_w: Oriented paper width (inches)
        paper_h: Oriented paper height (inches)
        last_valid: Last accepted minimum border, or None if nothing was accepted yet

    Returns:
        MinBorderData with the border to use, a warning (None when accepted)
        and the updated last-valid value

    Note:
        Accepted range is 0 <= requested < min(paper_w, paper_h) / 2. Anything
        else (negative, NaN/inf, too large) falls back to last_valid, or to
        DEFAULT_MIN_BORDER when there is no prior valid value. On a paper with
        no usable area the border passes through without a warning and
        last_valid is left alone.
    """
    fallback = DEFAULT_MIN_BORDER if last_valid is None else last_valid
    max_border = min(paper_w, paper_h) / 2

    if not isinstance(requested, (int, float)) or not math.isfinite(requested):
        warning = f"Border must be a number; using {_format_inches(fallback)}."
    elif requested < 0:
        warning = f"Border cannot be negative; using {_format_inches(fallback)}."
    elif max_border <= 0:
        # Degenerate paper: the solver reports no valid print instead
        return MinBorderData(min_border=float(requested), warning=None, last_valid=fallback)
    elif requested >= max_border:
        warning = f"Minimum border too large; using {_format_inches(fallback)}."
    else:
        return MinBorderData(min_border=float(requested), warning=None, last_valid=float(requested))

    return MinBorderData(min_border=fallback, warning=warning, last_valid=fallback)


def parse_number(raw: str | float | int | None) -> float | None:
    """Parse free-text numeric input.

    Args:
        raw: Text or number typed by the user

    Returns:
        Finite float, or None for empty, partial ("-", "."), or non-finite input
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = raw.strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


def parse_dimension(raw: str | float | int | None) -> float | None:
    """Parse a custom paper or ratio dimension, accepting only positive finite numbers."""
    value = parse_number(raw)
    if value is None or value <= 0:
        return None
    return value
