from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from cardstamp.geometry import Box
from cardstamp.models import CropRect


@dataclass(slots=True, frozen=True)
class CropInstruction:
    """Draw ``source_box`` of the photo scaled into ``dest``, rotated about the dest center."""

    source_box: tuple[float, float, float, float]
    dest: Box
    rotate_deg: int = 0

    @property
    def rotation_center(self) -> tuple[float, float]:
        return self.dest.center


def map_crop_to_dest(crop: CropRect, source_size: tuple[int, int], dest: Box) -> CropInstruction:
    width, height = source_size
    left = crop.x * width
    top = crop.y * height
    return CropInstruction(
        source_box=(left, top, left + crop.w * width, top + crop.h * height),
        dest=dest,
        rotate_deg=crop.rotate_deg,
    )


def _fit_source_box(
    box: tuple[float, float, float, float],
    size: tuple[int, int],
) -> tuple[float, float, float, float]:
    # Clamp into the image and keep at least one source pixel on each axis.
    width, height = size
    left, top, right, bottom = box
    left = min(max(0.0, left), max(0.0, width - 1.0))
    top = min(max(0.0, top), max(0.0, height - 1.0))
    right = min(float(width), max(right, left + 1.0))
    bottom = min(float(height), max(bottom, top + 1.0))
    return (left, top, right, bottom)


def paste_clipped(surface: Image.Image, layer: Image.Image, left: int, top: int) -> None:
    """Alpha-composite ``layer`` at (left, top), clipping whatever falls off the surface."""
    src_left = max(0, -left)
    src_top = max(0, -top)
    src_right = min(layer.width, surface.width - left)
    src_bottom = min(layer.height, surface.height - top)
    if src_right <= src_left or src_bottom <= src_top:
        return
    surface.alpha_composite(
        layer,
        dest=(left + src_left, top + src_top),
        source=(src_left, src_top, src_right, src_bottom),
    )


def draw_cropped_image(
    surface: Image.Image,
    image: Image.Image,
    instruction: CropInstruction,
    origin: tuple[float, float] = (0.0, 0.0),
) -> None:
    dest = instruction.dest
    dest_size = (max(1, int(round(dest.w))), max(1, int(round(dest.h))))
    source = image if image.mode == "RGBA" else image.convert("RGBA")
    patch = source.resize(
        dest_size,
        Image.Resampling.LANCZOS,
        box=_fit_source_box(instruction.source_box, source.size),
    )

    rotation = instruction.rotate_deg % 360
    if rotation:
        # PIL rotates counter-clockwise; canvas rotation is clockwise.
        patch = patch.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True)

    center_x, center_y = instruction.rotation_center
    left = int(round(center_x + origin[0] - patch.width / 2))
    top = int(round(center_y + origin[1] - patch.height / 2))
    paste_clipped(surface, patch, left, top)
