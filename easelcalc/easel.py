"""Easel fitting.

Maps a paper size onto the standard easel slot that holds it and computes
how far the paper sits off-centre in that slot. Blade scales are calibrated
for the slot, so the shift feeds into the blade readings.
"""

from easelcalc.config import EASEL_SIZES
from easelcalc.validation import Dimensions, EaselFit, PaperShift, SlotSize

_SORTED_EASELS = sorted(EASEL_SIZES, key=lambda e: e["width"] * e["height"])

_EXACT_SIZES = {(e["width"], e["height"]) for e in EASEL_SIZES} | {(e["height"], e["width"]) for e in EASEL_SIZES}


def find_easel_fit(paper_w: float, paper_h: float, is_landscape: bool) -> EaselFit:
    """Find the easel slot for a paper.

    Args:
        paper_w: Base (unoriented) paper width in inches
        paper_h: Base (unoriented) paper height in inches
        is_landscape: Whether the paper is placed landscape

    Returns:
        EaselFit. For a standard size the slot equals the easel. Otherwise the
        smallest-waste easel that holds the paper in either rotation is chosen,
        with the slot given in the paper's orientation. Paper larger than every
        easel gets its own size as a pseudo-easel.
    """
    oriented = SlotSize(width=paper_h, height=paper_w) if is_landscape else SlotSize(width=paper_w, height=paper_h)

    if (paper_w, paper_h) in _EXACT_SIZES:
        for easel in EASEL_SIZES:
            if {easel["width"], easel["height"]} == {oriented["width"], oriented["height"]}:
                size = SlotSize(width=easel["width"], height=easel["height"])
                return EaselFit(easel_size=size, effective_slot=SlotSize(**size), is_non_standard_paper_size=False)

    best: tuple[dict, SlotSize] | None = None
    min_waste = float("inf")
    for easel in _SORTED_EASELS:
        fits = easel["width"] >= oriented["width"] and easel["height"] >= oriented["height"]
        fits_rotated = easel["height"] >= oriented["width"] and easel["width"] >= oriented["height"]
        if not fits and not fits_rotated:
            continue

        waste = easel["width"] * easel["height"] - oriented["width"] * oriented["height"]
        if waste < min_waste:
            min_waste = waste
            slot = (
                SlotSize(width=easel["width"], height=easel["height"])
                if fits
                else SlotSize(width=easel["height"], height=easel["width"])
            )
            best = (easel, slot)
            if waste == 0:
                break

    if best is None:
        return EaselFit(
            easel_size=SlotSize(**oriented),
            effective_slot=SlotSize(**oriented),
            is_non_standard_paper_size=True,
        )

    easel, slot = best
    return EaselFit(
        easel_size=SlotSize(width=easel["width"], height=easel["height"]),
        effective_slot=slot,
        is_non_standard_paper_size=True,
    )


def paper_shift(oriented_paper: Dimensions, fit: EaselFit) -> PaperShift:
    """Centering shift of a non-standard paper inside its slot (zero for standard sizes)."""
    if not fit["is_non_standard_paper_size"]:
        return PaperShift(sp_x=0.0, sp_y=0.0)
    slot = fit["effective_slot"]
    return PaperShift(
        sp_x=(oriented_paper["w"] - slot["width"]) / 2,
        sp_y=(oriented_paper["h"] - slot["height"]) / 2,
    )


def easel_size_label(fit: EaselFit) -> str:
    """Human-readable easel name, e.g. "8x10", or "W×H" for a pseudo-easel."""
    size = fit["easel_size"]
    for easel in EASEL_SIZES:
        if easel["width"] == size["width"] and easel["height"] == size["height"]:
            return easel["label"]
    return f'{size["width"]:g}×{size["height"]:g}'
