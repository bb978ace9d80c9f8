"""Print geometry: print size, offsets, borders and blade readings.

This module handles:
- Solving the largest print rectangle that keeps the aspect ratio inside the min-border area
- Clamping print-position offsets so the print stays on the paper
- Converting print position into border widths and easel blade readings
- Suggesting minimum borders that land on a quarter-inch grid
"""

import math

from easelcalc.config import (
    BASE_PAPER_AREA,
    BLADE_MARKING_THRESHOLD_IN,
    BLADE_THICKNESS,
    BORDER_SEARCH_DIVISOR,
    BORDER_SEARCH_SPAN,
    BORDER_SEARCH_STEP,
    BORDER_SNAP,
    EPSILON,
    MAX_BLADE_SCALE_FACTOR,
    QUARTER_INCH,
)
from easelcalc.units import is_quarter_increment, round_to_standard_precision
from easelcalc.validation import BladeData, Borders, OffsetData, PaperShift, PrintSize

NEGATIVE_BLADE_WARNING = "Negative blade reading – use opposite side of scale."
SMALL_BLADE_WARNING = "Many easels have no markings below about {threshold:g} in."
OFFSET_MIN_BORDER_WARNING = "Offset adjusted to honour min-border."
OFFSET_PAPER_EDGE_WARNING = "Offset adjusted to keep print on paper."


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def compute_print_size(
    paper_w: float,
    paper_h: float,
    ratio_w: float,
    ratio_h: float,
    min_border: float,
) -> PrintSize:
    """Compute the largest print that fits inside the min-border area.

    Args:
        paper_w: Oriented paper width (inches)
        paper_h: Oriented paper height (inches)
        ratio_w: Oriented aspect ratio width
        ratio_h: Oriented aspect ratio height
        min_border: Validated minimum border (inches)

    Returns:
        PrintSize; both sides are 0 when no valid print exists

    Note:
        If the available area is wider than the ratio, height binds;
        otherwise width binds. The print is never cropped.
    """
    if not _all_finite(paper_w, paper_h, ratio_w, ratio_h, min_border):
        return PrintSize(print_w=0.0, print_h=0.0)
    if ratio_w <= 0 or ratio_h <= 0 or paper_w <= 0 or paper_h <= 0 or min_border < 0:
        return PrintSize(print_w=0.0, print_h=0.0)

    available_w = paper_w - 2 * min_border
    available_h = paper_h - 2 * min_border
    if available_w <= 0 or available_h <= 0:
        return PrintSize(print_w=0.0, print_h=0.0)

    target_ratio = ratio_w / ratio_h
    if available_w / available_h > target_ratio:
        print_h = available_h
        return PrintSize(print_w=print_h * target_ratio, print_h=print_h)

    print_w = available_w
    return PrintSize(print_w=print_w, print_h=print_w / target_ratio)


def clamp_offsets(
    paper_w: float,
    paper_h: float,
    print_w: float,
    print_h: float,
    min_border: float,
    horizontal_offset: float,
    vertical_offset: float,
    ignore_min_border: bool,
    enable_offset: bool = True,
) -> OffsetData:
    """Clamp requested print offsets so the print stays within the allowed area.

    Args:
        paper_w: Oriented paper width (inches)
        paper_h: Oriented paper height (inches)
        print_w: Print width (inches)
        print_h: Print height (inches)
        min_border: Validated minimum border (inches)
        horizontal_offset: Requested horizontal shift (positive moves the print right)
        vertical_offset: Requested vertical shift (positive moves the print down)
        ignore_min_border: Allow borders below the minimum (down to exactly 0)
        enable_offset: When False, offsets are forced to 0

    Returns:
        OffsetData with half-gaps, applied offsets and a warning when clamping occurred
    """
    half_w = (paper_w - print_w) / 2
    half_h = (paper_h - print_h) / 2

    requested_h = horizontal_offset if enable_offset else 0.0
    requested_v = vertical_offset if enable_offset else 0.0

    if ignore_min_border:
        max_h = max(0.0, half_w)
        max_v = max(0.0, half_h)
    else:
        max_h = max(0.0, min(half_w - min_border, half_w))
        max_v = max(0.0, min(half_h - min_border, half_h))

    # + 0.0 normalizes -0.0
    clamped_h = max(-max_h, min(max_h, requested_h)) + 0.0 if math.isfinite(requested_h) else 0.0
    clamped_v = max(-max_v, min(max_v, requested_v)) + 0.0 if math.isfinite(requested_v) else 0.0

    warning = None
    if clamped_h != requested_h or clamped_v != requested_v:
        warning = OFFSET_PAPER_EDGE_WARNING if ignore_min_border else OFFSET_MIN_BORDER_WARNING

    return OffsetData(half_w=half_w, half_h=half_h, clamped_h=clamped_h, clamped_v=clamped_v, warning=warning)


def borders_from_gaps(half_w: float, half_h: float, offset_h: float, offset_v: float) -> Borders:
    """Convert half-gaps and applied offsets into the four border widths."""
    return Borders(
        left=half_w + offset_h,
        right=half_w - offset_h,
        top=half_h + offset_v,
        bottom=half_h - offset_v,
    )


def blade_readings(
    borders: Borders,
    shift: PaperShift,
    marking_threshold: float = BLADE_MARKING_THRESHOLD_IN,
) -> BladeData:
    """Compute four-blade easel readings and their warnings.

    Args:
        borders: Border widths in inches
        shift: Paper centering shift relative to the easel slot
        marking_threshold: Readings below this (and non-zero) trigger a warning

    Returns:
        BladeData; the warning joins both messages with a newline when both apply
    """
    readings = Borders(
        left=borders["left"] + shift["sp_x"],
        right=borders["right"] + shift["sp_x"],
        top=borders["top"] + shift["sp_y"],
        bottom=borders["bottom"] + shift["sp_y"],
    )

    messages: list[str] = []
    values = list(readings.values())
    if any(v < 0 for v in values):
        messages.append(NEGATIVE_BLADE_WARNING)
    if any(abs(v) < marking_threshold and v != 0 for v in values):
        messages.append(SMALL_BLADE_WARNING.format(threshold=marking_threshold))

    return BladeData(
        readings=readings,
        blade_thickness=BLADE_THICKNESS,
        warning="\n".join(messages) if messages else None,
    )


def validate_print_fits(
    paper_w: float,
    paper_h: float,
    print_w: float,
    print_h: float,
    offset_h: float,
    offset_v: float,
) -> bool:
    """Check that an offset print keeps every border non-negative."""
    borders = borders_from_gaps((paper_w - print_w) / 2, (paper_h - print_h) / 2, offset_h, offset_v)
    return all(v >= 0 for v in borders.values())


def calculate_blade_thickness(paper_w: float, paper_h: float) -> int:
    """Scale the drawn blade thickness for previews by paper area.

    Smaller papers get proportionally thicker blades, capped at
    MAX_BLADE_SCALE_FACTOR times the base thickness.
    """
    if paper_w <= 0 or paper_h <= 0:
        return BLADE_THICKNESS
    area = paper_w * paper_h
    scale = min(BASE_PAPER_AREA / max(area, EPSILON), MAX_BLADE_SCALE_FACTOR)
    return round(BLADE_THICKNESS * scale)


def _even_borders(paper_w: float, paper_h: float, ratio: float, min_border: float) -> tuple[float, ...] | None:
    available_w = paper_w - 2 * min_border
    available_h = paper_h - 2 * min_border
    if available_w <= 0 or available_h <= 0:
        return None

    if available_w / available_h > ratio:
        print_w, print_h = available_h * ratio, available_h
    else:
        print_w, print_h = available_w, available_w / ratio

    border_w = (paper_w - print_w) / 2
    border_h = (paper_h - print_h) / 2
    return border_w, border_w, border_h, border_h


def calculate_optimal_min_border(
    paper_w: float,
    paper_h: float,
    ratio_w: float,
    ratio_h: float,
    start: float,
) -> float:
    """Search near a starting border for one whose borders sit on the quarter-inch grid.

    Args:
        paper_w: Oriented paper width (inches)
        paper_h: Oriented paper height (inches)
        ratio_w: Oriented ratio width
        ratio_h: Oriented ratio height
        start: Current minimum border (inches)

    Returns:
        Suggested minimum border rounded to hundredths; start itself when nothing scores better
    """
    if ratio_h == 0:
        return start

    ratio = ratio_w / ratio_h
    lower = max(0.01, start - BORDER_SEARCH_SPAN)
    upper = start + BORDER_SEARCH_SPAN
    step = max(BORDER_SEARCH_STEP, (upper - lower) / BORDER_SEARCH_DIVISOR)

    best = start
    best_score = math.inf
    index = 0
    candidate = lower
    while candidate <= upper + EPSILON:
        borders = _even_borders(paper_w, paper_h, ratio, candidate)
        if borders is not None:
            score = 0.0
            for border in borders:
                remainder = border % BORDER_SNAP
                score += min(remainder, BORDER_SNAP - remainder)
                if score >= best_score:
                    break
            if score < best_score - EPSILON:
                best_score = score
                best = candidate
                if best_score < EPSILON:
                    break
        index += 1
        candidate = lower + index * step

    return round_to_standard_precision(best)


def calculate_quarter_inch_min_border(
    paper_w: float,
    paper_h: float,
    ratio_w: float,
    ratio_h: float,
    current_min_border: float,
    print_w: float,
    print_h: float,
) -> float | None:
    """Find a minimum border that makes the print a whole number of quarter inches.

    Args:
        paper_w: Oriented paper width (inches)
        paper_h: Oriented paper height (inches)
        ratio_w: Oriented ratio width
        ratio_h: Oriented ratio height
        current_min_border: Border in use now; suggestions never go below it
        print_w: Current print width (inches)
        print_h: Current print height (inches)

    Returns:
        Suggested border rounded to hundredths, or None when the print is already
        quarter-aligned or no candidate exists
    """
    if min(paper_w, paper_h, ratio_w, ratio_h, print_w, print_h) <= 0:
        return None
    if is_quarter_increment(print_w) and is_quarter_increment(print_h):
        return None

    unit_w = ratio_w * QUARTER_INCH
    unit_h = ratio_h * QUARTER_INCH
    tolerance = 0.0001

    def evaluate(candidate: float) -> float | None:
        if not math.isfinite(candidate) or candidate < current_min_border - tolerance:
            return None
        size = compute_print_size(paper_w, paper_h, ratio_w, ratio_h, candidate)
        if (
            size["print_w"] <= 0
            or size["print_h"] <= 0
            or size["print_w"] > print_w + QUARTER_INCH
            or size["print_h"] > print_h + QUARTER_INCH
        ):
            return None
        if not (is_quarter_increment(size["print_w"]) and is_quarter_increment(size["print_h"])):
            return None
        rounded = round_to_standard_precision(max(candidate, 0.0))
        if abs(rounded - current_min_border) < tolerance:
            return None
        return rounded

    multiplier = min(math.floor((print_w + tolerance) / unit_w), math.floor((print_h + tolerance) / unit_h))
    while multiplier > 0:
        width_candidate = (paper_w - unit_w * multiplier) / 2
        found = evaluate(width_candidate)
        if found is not None:
            return found

        height_candidate = (paper_h - unit_h * multiplier) / 2
        if abs(height_candidate - width_candidate) > tolerance:
            found = evaluate(height_candidate)
            if found is not None:
                return found

        multiplier -= 1

    return None
