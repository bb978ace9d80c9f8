"""Border calculation orchestrator.

This module handles:
- Running the pipeline: dimensions → min border → print size → offsets → borders/blades, easel fit
- Assembling the CalculationResult (percentages, preview box, warnings)
- Memoizing results in small bounded caches owned by each calculator instance
- The picklable entry point used by background workers
"""

import logging
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from easelcalc.config import (
    BLADE_MARKING_THRESHOLD_IN,
    CACHE_MAX_ENTRIES,
    DEFAULT_VIEWPORT,
    PREVIEW_MAX_HEIGHT_PX,
    PREVIEW_MAX_WIDTH_PX,
    PREVIEW_NARROW_VIEWPORT_PX,
    PREVIEW_SHORT_VIEWPORT_PX,
)
from easelcalc.dimensions import orient_dimensions, paper_size_warning, resolve_paper, resolve_ratio
from easelcalc.easel import easel_size_label, find_easel_fit, paper_shift
from easelcalc.geometry import blade_readings, borders_from_gaps, clamp_offsets, compute_print_size
from easelcalc.validation import CalculationResult, CalculatorSettings, EaselFit, validate_min_border

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """Size-capped mapping with first-in-first-out eviction."""

    def __init__(self, max_entries: int = CACHE_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[K, V] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_or_compute(self, key: K, factory: Callable[[], V]) -> V:
        """Return the cached value for key, computing and storing it on a miss."""
        if key in self._entries:
            self.hits += 1
            return self._entries[key]

        self.misses += 1
        value = factory()
        if len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = value
        return value

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0


def settings_key(settings: CalculatorSettings, last_valid_min_border: float | None) -> tuple:
    """Explicit cache key: every field that affects a calculation, as a tuple of primitives."""
    return (
        settings.aspect_ratio,
        settings.paper_size,
        settings.custom_aspect_width,
        settings.custom_aspect_height,
        settings.custom_paper_width,
        settings.custom_paper_height,
        settings.min_border,
        settings.enable_offset,
        settings.ignore_min_border,
        settings.horizontal_offset,
        settings.vertical_offset,
        settings.is_landscape,
        settings.is_ratio_flipped,
        last_valid_min_border,
    )


class BorderCalculator:
    """Compute CalculationResults from settings, with per-instance memoization.

    Args:
        viewport: (width, height) in pixels of the area the preview is drawn in
        max_cache_entries: Capacity of each cache
        marking_threshold: Blade readings below this many inches trigger a warning
    """

    def __init__(
        self,
        viewport: tuple[int, int] = DEFAULT_VIEWPORT,
        max_cache_entries: int = CACHE_MAX_ENTRIES,
        marking_threshold: float = BLADE_MARKING_THRESHOLD_IN,
    ) -> None:
        self.viewport = viewport
        self.marking_threshold = marking_threshold
        self.result_cache: BoundedCache[tuple, CalculationResult] = BoundedCache(max_cache_entries)
        self.easel_cache: BoundedCache[tuple, EaselFit] = BoundedCache(max_cache_entries)
        self.preview_cache: BoundedCache[tuple, float] = BoundedCache(max_cache_entries)

    def compute(self, settings: CalculatorSettings, last_valid_min_border: float | None = None) -> CalculationResult:
        """Calculate borders, blade readings, easel fit and warnings.

        Args:
            settings: Calculator settings
            last_valid_min_border: Last accepted minimum border, used when the requested one is invalid

        Returns:
            CalculationResult (identical objects are returned for repeated inputs)
        """
        key = settings_key(settings, last_valid_min_border)
        if key in self.result_cache:
            logger.debug(f"Calculation cache hit for {settings.paper_size}/{settings.aspect_ratio}")
        return self.result_cache.get_or_compute(key, lambda: self._calculate(settings, last_valid_min_border))

    def preview_scale(self, paper_w: float, paper_h: float) -> float:
        """Pixels per inch that fit the oriented paper inside the preview box."""
        return self.preview_cache.get_or_compute(
            (paper_w, paper_h, self.viewport), lambda: self._preview_scale(paper_w, paper_h)
        )

    def _preview_scale(self, paper_w: float, paper_h: float) -> float:
        if not paper_w or not paper_h:
            return 1.0
        view_w, view_h = self.viewport
        max_w = PREVIEW_MAX_WIDTH_PX if view_w > PREVIEW_NARROW_VIEWPORT_PX else view_w * 0.9
        max_h = PREVIEW_MAX_HEIGHT_PX if view_h > PREVIEW_SHORT_VIEWPORT_PX else view_h * 0.5
        return min(max_w / paper_w, max_h / paper_h)

    def easel_fit(self, paper_w: float, paper_h: float, is_landscape: bool) -> EaselFit:
        """Memoized easel lookup."""
        return self.easel_cache.get_or_compute(
            (paper_w, paper_h, is_landscape), lambda: find_easel_fit(paper_w, paper_h, is_landscape)
        )

    def clear_caches(self) -> None:
        self.result_cache.clear()
        self.easel_cache.clear()
        self.preview_cache.clear()

    def _calculate(self, settings: CalculatorSettings, last_valid_min_border: float | None) -> CalculationResult:
        paper = resolve_paper(settings.paper_size, settings.custom_paper_width, settings.custom_paper_height)
        ratio = resolve_ratio(settings.aspect_ratio, settings.custom_aspect_width, settings.custom_aspect_height)
        oriented = orient_dimensions(paper, ratio, settings.is_landscape, settings.is_ratio_flipped)
        paper_w, paper_h = oriented["paper"]["w"], oriented["paper"]["h"]
        size_warning = paper_size_warning(settings.paper_size, paper)

        border_data = validate_min_border(settings.min_border, paper_w, paper_h, last_valid_min_border)
        min_border = border_data["min_border"]

        size = compute_print_size(paper_w, paper_h, oriented["ratio"]["w"], oriented["ratio"]["h"], min_border)
        print_w, print_h = size["print_w"], size["print_h"]
        has_valid_print = print_w > 0 and print_h > 0
        if not has_valid_print:
            logger.debug(f"No valid print for paper {paper_w}x{paper_h} with border {min_border}")

        offsets = clamp_offsets(
            paper_w,
            paper_h,
            print_w,
            print_h,
            min_border,
            settings.horizontal_offset,
            settings.vertical_offset,
            settings.ignore_min_border,
            enable_offset=settings.enable_offset,
        )
        borders = borders_from_gaps(offsets["half_w"], offsets["half_h"], offsets["clamped_h"], offsets["clamped_v"])

        fit = self.easel_fit(paper["w"], paper["h"], settings.is_landscape)
        shift = paper_shift(oriented["paper"], fit)
        blades = blade_readings(borders, shift, self.marking_threshold)

        scale = self.preview_scale(paper_w, paper_h)
        percent_w = 100 / paper_w if paper_w else 0.0
        percent_h = 100 / paper_h if paper_h else 0.0

        return CalculationResult(
            left_border=borders["left"],
            right_border=borders["right"],
            top_border=borders["top"],
            bottom_border=borders["bottom"],
            print_width=print_w,
            print_height=print_h,
            paper_width=paper_w,
            paper_height=paper_h,
            has_valid_print=has_valid_print,
            print_width_percent=print_w * percent_w,
            print_height_percent=print_h * percent_h,
            left_border_percent=borders["left"] * percent_w,
            right_border_percent=borders["right"] * percent_w,
            top_border_percent=borders["top"] * percent_h,
            bottom_border_percent=borders["bottom"] * percent_h,
            left_blade_reading=blades["readings"]["left"],
            right_blade_reading=blades["readings"]["right"],
            top_blade_reading=blades["readings"]["top"],
            bottom_blade_reading=blades["readings"]["bottom"],
            blade_thickness=blades["blade_thickness"],
            is_non_standard_paper_size=fit["is_non_standard_paper_size"] and size_warning is None,
            easel_size=dict(fit["easel_size"]),
            effective_slot=dict(fit["effective_slot"]),
            easel_size_label=easel_size_label(fit),
            offset_warning=offsets["warning"],
            blade_warning=blades["warning"],
            min_border_warning=border_data["warning"],
            paper_size_warning=size_warning,
            last_valid_min_border=border_data["last_valid"],
            clamped_horizontal_offset=offsets["clamped_h"],
            clamped_vertical_offset=offsets["clamped_v"],
            preview_scale=scale,
            preview_width=paper_w * scale,
            preview_height=paper_h * scale,
        )


# Set once per worker process by init_worker
_worker_calculator: BorderCalculator | None = None


def init_worker(viewport: tuple[int, int] = DEFAULT_VIEWPORT) -> None:
    """Process-pool initializer: give the worker process its own calculator."""
    global _worker_calculator
    _worker_calculator = BorderCalculator(viewport=viewport)


def build_payload(
    settings: CalculatorSettings,
    last_valid_min_border: float | None,
    viewport: tuple[int, int] = DEFAULT_VIEWPORT,
) -> dict[str, Any]:
    """Plain-data job description sent to a worker."""
    return {
        "settings": settings.model_dump(),
        "last_valid_min_border": last_valid_min_border,
        "viewport": tuple(viewport),
    }


def run_calculation(payload: dict[str, Any]) -> dict[str, Any]:
    """Worker entry point: payload dict in, CalculationResult dict out."""
    viewport = tuple(payload.get("viewport", DEFAULT_VIEWPORT))
    calculator = _worker_calculator
    if calculator is None or tuple(calculator.viewport) != viewport:
        calculator = BorderCalculator(viewport=viewport)
    settings = CalculatorSettings.model_validate(payload["settings"])
    result = calculator.compute(settings, payload.get("last_valid_min_border"))
    return result.model_dump()
