"""Print geometry of the card canvas.

The canvas is a full-bleed 2.75" x 3.75" card at 300 DPI. The trim box marks
where the printed sheet is cut (1/8" in from every edge) and the safe box
marks where content is guaranteed to survive the cut (1/4" in).
"""
from __future__ import annotations

from dataclasses import dataclass

CARD_WIDTH = 825
CARD_HEIGHT = 1125
CARD_ASPECT = CARD_WIDTH / CARD_HEIGHT

TRIM_INSET = 37.5
SAFE_INSET = 75.0


@dataclass(slots=True, frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    @property
    def pixel_size(self) -> tuple[int, int]:
        return (int(round(self.w)), int(round(self.h)))


@dataclass(slots=True, frozen=True)
class GuideInsets:
    left: float
    top: float
    right: float
    bottom: float

    def to_dict(self) -> dict[str, float]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


CANVAS_BOX = Box(0.0, 0.0, float(CARD_WIDTH), float(CARD_HEIGHT))


def inset_box(inset: float, outer: Box = CANVAS_BOX) -> Box:
    return Box(outer.x + inset, outer.y + inset, outer.w - inset * 2, outer.h - inset * 2)


TRIM_BOX = inset_box(TRIM_INSET)
SAFE_BOX = inset_box(SAFE_INSET)


def guide_percentages(box: Box, relative_to: str = "canvas", digits: int = 3) -> GuideInsets:
    """Express ``box`` as edge insets in percent of the canvas or the trim box."""
    if relative_to == "canvas":
        ref = CANVAS_BOX
    elif relative_to == "trim":
        ref = TRIM_BOX
    else:
        raise ValueError(f"unknown guide reference: {relative_to!r}")

    return GuideInsets(
        left=round((box.x - ref.x) / ref.w * 100, digits),
        top=round((box.y - ref.y) / ref.h * 100, digits),
        right=round((ref.right - box.right) / ref.w * 100, digits),
        bottom=round((ref.bottom - box.bottom) / ref.h * 100, digits),
    )


GUIDE_PERCENTAGES: dict[str, GuideInsets] = {
    "trim": guide_percentages(TRIM_BOX),
    "safe": guide_percentages(SAFE_BOX),
}
