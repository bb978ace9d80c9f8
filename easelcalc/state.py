"""Calculator state container.

This module defines:
- Reducer actions as small frozen dataclasses
- The reducer: (state, action) -> new state, never mutating its input
- Initial state and the persistable subset written to durable storage
- Conversion from state to the settings the calculator consumes
"""

from dataclasses import dataclass, field
from typing import Any

from easelcalc.config import CUSTOM
from easelcalc.validation import CalculatorSettings, CalculatorState, CropOffset, ImageSize

SETTINGS_FIELDS = tuple(CalculatorSettings.model_fields)

PERSISTABLE_FIELDS = SETTINGS_FIELDS + (
    "last_valid_custom_aspect_width",
    "last_valid_custom_aspect_height",
    "last_valid_custom_paper_width",
    "last_valid_custom_paper_height",
    "last_valid_min_border",
)

WARNING_FIELDS = ("offset_warning", "blade_warning", "min_border_warning", "paper_size_warning")

INTERNAL_FIELDS = WARNING_FIELDS + ("last_valid_min_border",)

IMAGE_FIELDS = ("selected_image_uri", "image_dimensions", "is_cropping", "crop_offset", "crop_scale")


@dataclass(frozen=True)
class SetField:
    key: str
    value: Any


@dataclass(frozen=True)
class SetPaperSize:
    value: str


@dataclass(frozen=True)
class SetAspectRatio:
    value: str


@dataclass(frozen=True)
class SetImageField:
    key: str
    value: Any


@dataclass(frozen=True)
class SetImageDimensions:
    width: int
    height: int


@dataclass(frozen=True)
class SetCropOffset:
    x: float
    y: float


@dataclass(frozen=True)
class SetImageCropData:
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class InternalUpdate:
    """Warnings and last-valid min border fed back from calculations."""

    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchUpdate:
    """Several fields at once, e.g. restoring persisted settings or applying a preset."""

    payload: dict[str, Any] = field(default_factory=dict)


def initial_state() -> CalculatorState:
    """Fresh default state."""
    return CalculatorState()


def _update(state: CalculatorState, changes: dict[str, Any]) -> CalculatorState:
    unknown = set(changes) - set(CalculatorState.model_fields)
    if unknown:
        raise KeyError(f"Unknown state fields: {sorted(unknown)}")
    return CalculatorState.model_validate({**state.model_dump(), **changes})


def reducer(state: CalculatorState, action: object) -> CalculatorState:
    """Apply an action to the state.

    Args:
        state: Current state (left untouched)
        action: One of the action dataclasses in this module

    Returns:
        New CalculatorState

    Raises:
        KeyError: If an action names a field that does not exist
        TypeError: If the action type is unknown
        pydantic.ValidationError: If a value fails model validation
    """
    if isinstance(action, SetField):
        return _update(state, {action.key: action.value})

    if isinstance(action, SetPaperSize):
        return _update(
            state,
            {"paper_size": action.value, "is_landscape": action.value != CUSTOM, "is_ratio_flipped": False},
        )

    if isinstance(action, SetAspectRatio):
        return _update(state, {"aspect_ratio": action.value, "is_ratio_flipped": False})

    if isinstance(action, SetImageField):
        if action.key not in IMAGE_FIELDS:
            raise KeyError(f"Not an image field: {action.key}")
        return _update(state, {action.key: action.value})

    if isinstance(action, SetImageDimensions):
        return _update(state, {"image_dimensions": ImageSize(width=action.width, height=action.height)})

    if isinstance(action, SetCropOffset):
        return _update(state, {"crop_offset": CropOffset(x=action.x, y=action.y)})

    if isinstance(action, SetImageCropData):
        unknown = set(action.payload) - set(IMAGE_FIELDS)
        if unknown:
            raise KeyError(f"Not image fields: {sorted(unknown)}")
        return _update(state, action.payload)

    if isinstance(action, Reset):
        return initial_state()

    if isinstance(action, InternalUpdate):
        unknown = set(action.payload) - set(INTERNAL_FIELDS)
        if unknown:
            raise KeyError(f"Not internal fields: {sorted(unknown)}")
        return _update(state, action.payload)

    if isinstance(action, BatchUpdate):
        return _update(state, action.payload)

    raise TypeError(f"Unknown action: {type(action).__name__}")


def persistable(state: CalculatorState) -> dict[str, Any]:
    """Subset of state written to storage (no warnings, no image data)."""
    return state.model_dump(include=set(PERSISTABLE_FIELDS))


def restorable(blob: dict[str, Any]) -> dict[str, Any]:
    """Keep only persistable keys from a stored blob."""
    return {k: v for k, v in blob.items() if k in PERSISTABLE_FIELDS}


def settings_from_state(state: CalculatorState) -> CalculatorSettings:
    """Settings for the calculator, with custom dimensions taken from their last valid values."""
    values = state.model_dump(include=set(SETTINGS_FIELDS))
    values.update(
        custom_aspect_width=state.last_valid_custom_aspect_width,
        custom_aspect_height=state.last_valid_custom_aspect_height,
        custom_paper_width=state.last_valid_custom_paper_width,
        custom_paper_height=state.last_valid_custom_paper_height,
    )
    return CalculatorSettings.model_validate(values)
