"""Backend-independent draw instructions.

A card is described as an ordered, immutable list of these commands; the
executor in ``cardstamp.render.executor`` plays them onto a Pillow surface.
Coordinates are canvas units. Commands inside a ``Group`` use coordinates
relative to the group anchor and are rotated with it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from PIL import Image

from cardstamp.geometry import Box
from cardstamp.render.crop import CropInstruction
from cardstamp.render.typography import FontSpec


@dataclass(slots=True, frozen=True)
class FillRect:
    x: float
    y: float
    w: float
    h: float
    color: str
    radius: float = 0


@dataclass(slots=True, frozen=True)
class StrokeRect:
    x: float
    y: float
    w: float
    h: float
    color: str
    width: float
    radius: float = 0


@dataclass(slots=True, frozen=True)
class FillPolygon:
    points: tuple[tuple[float, float], ...]
    color: str


@dataclass(slots=True, frozen=True)
class FillCircle:
    cx: float
    cy: float
    radius: float
    color: str


@dataclass(slots=True, frozen=True)
class FrameCutout:
    """Fill the whole canvas except a rounded window (even-odd rule)."""

    window: Box
    radius: float
    color: str


@dataclass(slots=True, frozen=True)
class VerticalGradient:
    box: Box
    start_color: str
    end_color: str


@dataclass(slots=True, frozen=True)
class DrawText:
    text: str
    x: float
    y: float
    font: FontSpec
    fill: str
    align: str = "left"  # left | center | right
    baseline: str = "middle"  # middle | top
    letter_spacing: float = 0.0
    stroke_color: str | None = None
    stroke_width: float = 0.0


@dataclass(slots=True, frozen=True, eq=False)
class DrawPhoto:
    image: Image.Image
    instruction: CropInstruction


@dataclass(slots=True, frozen=True, eq=False)
class DrawImage:
    image: Image.Image
    x: float
    y: float
    w: float
    h: float


@dataclass(slots=True, frozen=True, eq=False)
class OutlinedImage:
    """Image drawn over its own silhouette stamped at the 8 neighbouring offsets."""

    image: Image.Image
    x: float
    y: float
    w: float
    h: float
    outline_color: str
    outline_width: int = 1


@dataclass(slots=True, frozen=True, eq=False)
class TintedImage:
    image: Image.Image
    x: float
    y: float
    w: float
    h: float
    color: str


@dataclass(slots=True, frozen=True)
class Group:
    anchor_x: float
    anchor_y: float
    rotation: float
    children: tuple["Command", ...]


Command = Union[
    FillRect,
    StrokeRect,
    FillPolygon,
    FillCircle,
    FrameCutout,
    VerticalGradient,
    DrawText,
    DrawPhoto,
    DrawImage,
    OutlinedImage,
    TintedImage,
    Group,
]


@dataclass(slots=True, frozen=True)
class DrawProgram:
    commands: tuple[Command, ...]

    def walk(self) -> Iterator[Command]:
        stack = list(reversed(self.commands))
        while stack:
            command = stack.pop()
            yield command
            if isinstance(command, Group):
                stack.extend(reversed(command.children))

    def texts(self) -> list[str]:
        return [command.text for command in self.walk() if isinstance(command, DrawText)]

    def font_specs(self) -> set[FontSpec]:
        return {command.font for command in self.walk() if isinstance(command, DrawText)}
