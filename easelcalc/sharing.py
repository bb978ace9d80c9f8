"""Shareable preset codes.

This module handles:
- Encoding a named preset into a compact URL-safe string
- Decoding and validating shared codes
- Built-in default presets

Code layout before base64url (padding stripped), fields joined by "-":
    name, ratio index, paper index, min border * 100,
    horizontal offset * 100 + 10000, vertical offset * 100 + 10000, flag bitmask,
    then custom ratio w/h * 100 (custom ratio only) and custom paper w/h * 100 (custom paper only).
The name is percent-encoded, "-" included.
"""

import base64
import logging
import re
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field

from easelcalc.config import ASPECT_RATIOS, CUSTOM, PAPER_SIZES
from easelcalc.validation import CalculatorSettings

logger = logging.getLogger(__name__)

OFFSET_BIAS = 10000
SCALE = 100

FLAG_BITS = {
    "enable_offset": 1,
    "ignore_min_border": 2,
    "show_blades": 4,
    "is_landscape": 8,
    "is_ratio_flipped": 16,
    "show_blade_readings": 32,
}

_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_RATIO_VALUES = [entry["value"] for entry in ASPECT_RATIOS]
_PAPER_VALUES = [entry["value"] for entry in PAPER_SIZES]


class BorderPreset(BaseModel):
    """A named set of calculator settings."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    settings: CalculatorSettings


DEFAULT_BORDER_PRESETS = [
    BorderPreset(
        name="35mm on 8x10, 6x9in",
        settings=CalculatorSettings(aspect_ratio="3:2", paper_size="8x10", min_border=0.5, is_landscape=True),
    ),
]


def _bitmask(settings: CalculatorSettings) -> int:
    mask = 0
    for field_name, bit in FLAG_BITS.items():
        if getattr(settings, field_name):
            mask |= bit
    return mask


def _scaled(value: float) -> int:
    return round(value * SCALE)


def encode_preset(preset: BorderPreset) -> str:
    """Encode a preset as a URL-safe share code.

    Args:
        preset: Named settings to share

    Returns:
        base64url string without padding

    Raises:
        ValueError: If a numeric field would be negative, which the field separator cannot carry
    """
    settings = preset.settings
    parts: list[str | int] = [
        quote(preset.name, safe="!*'()").replace("-", "%2D"),
        _RATIO_VALUES.index(settings.aspect_ratio),
        _PAPER_VALUES.index(settings.paper_size),
        _scaled(settings.min_border),
        _scaled(settings.horizontal_offset) + OFFSET_BIAS,
        _scaled(settings.vertical_offset) + OFFSET_BIAS,
        _bitmask(settings),
    ]
    if settings.aspect_ratio == CUSTOM:
        parts += [_scaled(settings.custom_aspect_width), _scaled(settings.custom_aspect_height)]
    if settings.paper_size == CUSTOM:
        parts += [_scaled(settings.custom_paper_width), _scaled(settings.custom_paper_height)]

    negative = [p for p in parts[1:] if isinstance(p, int) and p < 0]
    if negative:
        raise ValueError(f"Cannot encode negative values {negative} in preset '{preset.name}'")

    raw = "-".join(str(p) for p in parts)
    return base64.urlsafe_b64encode(raw.encode("ascii")).decode("ascii").rstrip("=")


def _lookup(values: list[str], index: int, kind: str) -> str:
    if not 0 <= index < len(values):
        raise ValueError(f"Invalid {kind} index: {index}")
    return values[index]


def decode_preset(code: str) -> BorderPreset | None:
    """Decode a share code.

    Args:
        code: String produced by encode_preset

    Returns:
        BorderPreset, or None if the code is malformed (logged at WARNING)
    """
    try:
        padded = code + "=" * (-len(code) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("ascii")
        name_part, *number_parts = raw.split("-")
        numbers = [int(p) for p in number_parts]
        if len(numbers) < 6:
            raise ValueError(f"Expected at least 6 numeric fields, got {len(numbers)}")

        ratio_index, paper_index, min_border, h_offset, v_offset, mask = numbers[:6]
        extras = iter(numbers[6:])
        values: dict[str, object] = {
            "aspect_ratio": _lookup(_RATIO_VALUES, ratio_index, "aspect ratio"),
            "paper_size": _lookup(_PAPER_VALUES, paper_index, "paper size"),
            "min_border": min_border / SCALE,
            "horizontal_offset": (h_offset - OFFSET_BIAS) / SCALE,
            "vertical_offset": (v_offset - OFFSET_BIAS) / SCALE,
        }
        values.update({field_name: bool(mask & bit) for field_name, bit in FLAG_BITS.items()})
        if values["aspect_ratio"] == CUSTOM:
            values["custom_aspect_width"] = next(extras) / SCALE
            values["custom_aspect_height"] = next(extras) / SCALE
        if values["paper_size"] == CUSTOM:
            values["custom_paper_width"] = next(extras) / SCALE
            values["custom_paper_height"] = next(extras) / SCALE

        return BorderPreset(name=unquote(name_part), settings=CalculatorSettings.model_validate(values))
    except (ValueError, StopIteration) as e:
        logger.warning(f"Failed to decode preset code: {e}")
        return None


def is_valid_encoded_preset(code: str) -> bool:
    """Quick check that a string is a decodable share code."""
    if not code or not isinstance(code, str) or not _CODE_PATTERN.match(code):
        return False
    return decode_preset(code) is not None
