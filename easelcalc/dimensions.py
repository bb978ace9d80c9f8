"""Paper and aspect ratio resolution.

This module handles:
- Resolving paper-size and aspect-ratio selectors into concrete width/height pairs
- Applying landscape and ratio-flip transforms
- Warning when a custom paper size exceeds every standard easel
"""

from easelcalc.config import ASPECT_RATIO_MAP, CUSTOM, EVEN_BORDERS, MAX_EASEL_DIMENSION, PAPER_SIZE_MAP
from easelcalc.validation import CalculatorSettings, Dimensions, OrientedDimensions


def resolve_paper(paper_size: str, custom_width: float, custom_height: float) -> Dimensions:
    """Resolve a paper-size selector into base (portrait-table) dimensions.

    Args:
        paper_size: Preset value from config.PAPER_SIZES or "custom"
        custom_width: Custom paper width in inches (used only for "custom")
        custom_height: Custom paper height in inches (used only for "custom")

    Returns:
        Dimensions in inches, not yet oriented

    Raises:
        KeyError: If paper_size is not a known selector
    """
    if paper_size == CUSTOM:
        return Dimensions(w=custom_width, h=custom_height)
    if paper_size not in PAPER_SIZE_MAP:
        raise KeyError(f"Unknown paper size: {paper_size}")
    preset = PAPER_SIZE_MAP[paper_size]
    return Dimensions(w=preset["width"], h=preset["height"])


def resolve_ratio(aspect_ratio: str, custom_width: float, custom_height: float) -> Dimensions | None:
    """Resolve an aspect-ratio selector into base ratio units.

    Args:
        aspect_ratio: Preset value from config.ASPECT_RATIOS, "custom" or "even-borders"
        custom_width: Custom ratio width (used only for "custom")
        custom_height: Custom ratio height (used only for "custom")

    Returns:
        Ratio dimensions, or None for "even-borders" (the ratio follows the oriented paper)

    Raises:
        KeyError: If aspect_ratio is not a known selector
    """
    if aspect_ratio == EVEN_BORDERS:
        return None
    if aspect_ratio == CUSTOM:
        return Dimensions(w=custom_width, h=custom_height)
    if aspect_ratio not in ASPECT_RATIO_MAP:
        raise KeyError(f"Unknown aspect ratio: {aspect_ratio}")
    preset = ASPECT_RATIO_MAP[aspect_ratio]
    return Dimensions(w=preset["width"], h=preset["height"])


def orient_dimensions(
    paper: Dimensions,
    ratio: Dimensions | None,
    is_landscape: bool,
    is_ratio_flipped: bool,
) -> OrientedDimensions:
    """Apply landscape and flip transforms.

    Args:
        paper: Base paper dimensions
        ratio: Base ratio, or None for even borders
        is_landscape: Swap paper width and height
        is_ratio_flipped: Swap ratio width and height (ignored for even borders)

    Returns:
        OrientedDimensions

    Note:
        Zero or negative dimensions pass through untouched; the print-size
        solver turns them into a zero-size print.
    """
    oriented_paper = Dimensions(w=paper["h"], h=paper["w"]) if is_landscape else Dimensions(w=paper["w"], h=paper["h"])

    if ratio is None:
        oriented_ratio = Dimensions(w=oriented_paper["w"], h=oriented_paper["h"])
    elif is_ratio_flipped:
        oriented_ratio = Dimensions(w=ratio["h"], h=ratio["w"])
    else:
        oriented_ratio = Dimensions(w=ratio["w"], h=ratio["h"])

    return OrientedDimensions(paper=oriented_paper, ratio=oriented_ratio)


def resolve_dimensions(settings: CalculatorSettings) -> OrientedDimensions:
    """Resolve settings straight into oriented paper and ratio dimensions."""
    paper = resolve_paper(settings.paper_size, settings.custom_paper_width, settings.custom_paper_height)
    ratio = resolve_ratio(settings.aspect_ratio, settings.custom_aspect_width, settings.custom_aspect_height)
    return orient_dimensions(paper, ratio, settings.is_landscape, settings.is_ratio_flipped)


def paper_size_warning(paper_size: str, paper: Dimensions) -> str | None:
    """Warn when a custom paper exceeds the largest standard easel.

    Args:
        paper_size: Paper selector
        paper: Base paper dimensions in inches

    Returns:
        Warning text, or None for presets and custom sizes that fit an easel
    """
    if paper_size != CUSTOM:
        return None
    if paper["w"] > MAX_EASEL_DIMENSION or paper["h"] > MAX_EASEL_DIMENSION:
        return f'Custom paper ({paper["w"]:g}×{paper["h"]:g}) exceeds largest standard easel (20×24").'
    return None
