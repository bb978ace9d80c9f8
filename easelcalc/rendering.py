"""Preview images and printable easel templates.

This module handles:
- Drawing a scaled preview PNG of paper, print area and easel blades with Pillow
- Generating a true-scale template PDF with ReportLab
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw
from reportlab.pdfgen import canvas

from easelcalc.geometry import calculate_blade_thickness, validate_print_fits
from easelcalc.units import format_length, inches_to_pdf_coords, inches_to_points
from easelcalc.validation import CalculationResult

logger = logging.getLogger(__name__)

PAPER_COLOR = (255, 255, 255)
PRINT_COLOR = (40, 40, 40)
BLADE_COLOR = (160, 160, 160)
BACKGROUND_COLOR = (24, 24, 24)
OUTLINE_COLOR = (200, 200, 200)

CROP_MARK_LENGTH_IN = 0.25
CAPTION_FONT_SIZE = 8


def _print_box_px(result: CalculationResult, width_px: int, height_px: int) -> tuple[int, int, int, int]:
    """Print rectangle in preview pixels as (left, top, right, bottom)."""
    left = round(result.left_border_percent / 100 * width_px)
    top = round(result.top_border_percent / 100 * height_px)
    right = round((result.left_border_percent + result.print_width_percent) / 100 * width_px)
    bottom = round((result.top_border_percent + result.print_height_percent) / 100 * height_px)
    return left, top, right, bottom


def render_preview(result: CalculationResult, output_path: str, show_blades: bool = False) -> tuple[int, int]:
    """Draw a preview of the paper and print area.

    Args:
        result: Calculation to draw
        output_path: PNG destination
        show_blades: Draw easel blades along the print edges

    Returns:
        (width, height) of the written image in pixels

    Note:
        Image size is the result's preview box. Blade width scales with paper
        area so small papers still show visible blades.
    """
    width_px = max(1, round(result.preview_width))
    height_px = max(1, round(result.preview_height))

    image = Image.new("RGB", (width_px, height_px), PAPER_COLOR)
    draw = ImageDraw.Draw(image)
    draw.rectangle((0, 0, width_px - 1, height_px - 1), outline=OUTLINE_COLOR)

    if result.has_valid_print:
        left, top, right, bottom = _print_box_px(result, width_px, height_px)
        draw.rectangle((left, top, max(left, right - 1), max(top, bottom - 1)), fill=PRINT_COLOR)

        if show_blades:
            # Scaled down from screen units so blades stay inside the border on small previews
            blade = max(1, calculate_blade_thickness(result.paper_width, result.paper_height) // 5)
            strips = [
                (max(0, left - blade), 0, left - 1, height_px - 1),
                (right, 0, min(width_px - 1, right + blade - 1), height_px - 1),
                (0, max(0, top - blade), width_px - 1, top - 1),
                (0, bottom, width_px - 1, min(height_px - 1, bottom + blade - 1)),
            ]
            for x0, y0, x1, y1 in strips:
                # Zero-width border leaves no room for a blade
                if x1 >= x0 and y1 >= y0:
                    draw.rectangle((x0, y0, x1, y1), fill=BLADE_COLOR)
    else:
        logger.info("No valid print area; preview shows paper only")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    image.save(output, "PNG")
    logger.info(f"Saved preview {width_px}x{height_px}px to {output}")
    return width_px, height_px


def _caption_lines(result: CalculationResult) -> list[str]:
    lines = [
        f"Paper {format_length(result.paper_width)} x {format_length(result.paper_height)}"
        f"  Print {format_length(result.print_width)} x {format_length(result.print_height)}",
        f"Borders L {format_length(result.left_border)}  R {format_length(result.right_border)}"
        f"  T {format_length(result.top_border)}  B {format_length(result.bottom_border)}",
        f"Blades L {format_length(result.left_blade_reading)}  R {format_length(result.right_blade_reading)}"
        f"  T {format_length(result.top_blade_reading)}  B {format_length(result.bottom_blade_reading)}"
        f"  Easel {result.easel_size_label}",
    ]
    return lines


def render_template_pdf(result: CalculationResult, output_path: str) -> None:
    """Generate a 1:1 template of the paper for checking blade positions on the easel.

    Args:
        result: Calculation to draw
        output_path: PDF destination

    Raises:
        ValueError: If the result has no valid print area or the print runs off the paper

    Note:
        - Page size equals the oriented paper size (72 pt per inch)
        - Geometry is computed in top-left inches and converted to ReportLab's bottom-left points
        - Crop marks sit at the print corners, outside the print area
    """
    if not result.has_valid_print:
        raise ValueError("Cannot render a template without a valid print area")
    if not validate_print_fits(
        result.paper_width,
        result.paper_height,
        result.print_width,
        result.print_height,
        result.clamped_horizontal_offset,
        result.clamped_vertical_offset,
    ):
        raise ValueError("Print area does not fit on the paper")

    page_w_in = result.paper_width
    page_h_in = result.paper_height

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    c = canvas.Canvas(str(output), pagesize=(inches_to_points(page_w_in), inches_to_points(page_h_in)))
    c.setTitle(f"Easel template {result.easel_size_label}")

    # Print rectangle: its top-left corner in inches, then flipped to the PDF origin
    x_pt, y_top_pt = inches_to_pdf_coords(result.left_border, result.top_border, page_h_in)
    width_pt = inches_to_points(result.print_width)
    height_pt = inches_to_points(result.print_height)
    c.setLineWidth(0.5)
    c.rect(x_pt, y_top_pt - height_pt, width_pt, height_pt, stroke=1, fill=0)

    mark = inches_to_points(CROP_MARK_LENGTH_IN)
    corners = [
        (x_pt, y_top_pt, -1, 1),
        (x_pt + width_pt, y_top_pt, 1, 1),
        (x_pt, y_top_pt - height_pt, -1, -1),
        (x_pt + width_pt, y_top_pt - height_pt, 1, -1),
    ]
    for cx, cy, dx, dy in corners:
        c.line(cx, cy, cx + dx * mark, cy)
        c.line(cx, cy, cx, cy + dy * mark)

    c.setFont("Helvetica", CAPTION_FONT_SIZE)
    text_y = y_top_pt - height_pt / 2 + CAPTION_FONT_SIZE * 1.5
    for line in _caption_lines(result):
        c.drawCentredString(x_pt + width_pt / 2, text_y, line)
        text_y -= CAPTION_FONT_SIZE * 1.5

    c.save()
    logger.info(f"Saved template {page_w_in:g}x{page_h_in:g}in to {output}")
