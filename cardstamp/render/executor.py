from __future__ import annotations

import io
import logging

from PIL import Image, ImageDraw

from cardstamp.errors import SurfaceError
from cardstamp.geometry import CANVAS_BOX
from cardstamp.render.commands import (
    Command,
    DrawImage,
    DrawPhoto,
    DrawProgram,
    DrawText,
    FillCircle,
    FillPolygon,
    FillRect,
    FrameCutout,
    Group,
    OutlinedImage,
    StrokeRect,
    TintedImage,
    VerticalGradient,
)
from cardstamp.render.crop import draw_cropped_image, paste_clipped
from cardstamp.render.typography import FontBook, parse_color, spaced_text_width

LOGGER = logging.getLogger(__name__)

# Margin around rotated groups so content near the surface edge survives the rotation.
_GROUP_PADDING = 200

Origin = tuple[float, float]


def new_surface(size: tuple[int, int]) -> Image.Image:
    width, height = size
    if width <= 0 or height <= 0:
        raise SurfaceError(f"cannot create a {width}x{height} drawing surface")
    try:
        return Image.new("RGBA", (width, height), (0, 0, 0, 0))
    except (MemoryError, ValueError) as exc:
        raise SurfaceError(f"cannot create a {width}x{height} drawing surface: {exc}") from exc


def encode_png(surface: Image.Image) -> bytes:
    buffer = io.BytesIO()
    surface.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def _rect_bounds(x: float, y: float, w: float, h: float, origin: Origin) -> list[float]:
    left = x + origin[0]
    top = y + origin[1]
    return [left, top, left + max(w - 1, 0), top + max(h - 1, 0)]


def _silhouette(image: Image.Image, color: str) -> Image.Image:
    rgba = parse_color(color)
    alpha = image.getchannel("A")
    if rgba[3] < 255:
        alpha = alpha.point(lambda value: value * rgba[3] // 255)
    shape = Image.new("RGBA", image.size, rgba[:3] + (255,))
    shape.putalpha(alpha)
    return shape


def _scaled(image: Image.Image, w: float, h: float) -> Image.Image:
    size = (max(1, int(round(w))), max(1, int(round(h))))
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    if rgba.size == size:
        return rgba
    return rgba.resize(size, Image.Resampling.LANCZOS)


class SurfaceExecutor:
    """Plays a DrawProgram onto an RGBA Pillow surface."""

    def __init__(self, surface: Image.Image, fonts: FontBook, origin: Origin = (0.0, 0.0)) -> None:
        self.surface = surface
        self.fonts = fonts
        self.origin = origin

    def run(self, program: DrawProgram) -> Image.Image:
        LOGGER.debug("drawing %d commands onto %sx%s surface", len(program.commands), *self.surface.size)
        for command in program.commands:
            self._draw(command, self.surface, self.origin)
        return self.surface

    def _draw(self, command: Command, target: Image.Image, origin: Origin) -> None:
        if isinstance(command, Group):
            self._draw_group(command, target, origin)
        elif isinstance(command, DrawPhoto):
            draw_cropped_image(target, command.image, command.instruction, origin)
        elif isinstance(command, DrawImage):
            layer = _scaled(command.image, command.w, command.h)
            paste_clipped(target, layer, *self._point(command.x, command.y, origin))
        elif isinstance(command, OutlinedImage):
            self._draw_outlined(command, target, origin)
        elif isinstance(command, TintedImage):
            tinted = _silhouette(_scaled(command.image, command.w, command.h), command.color)
            paste_clipped(target, tinted, *self._point(command.x, command.y, origin))
        elif isinstance(command, FrameCutout):
            self._draw_frame(command, target, origin)
        else:
            overlay = Image.new("RGBA", target.size, (0, 0, 0, 0))
            self._draw_shape(command, ImageDraw.Draw(overlay), origin)
            target.alpha_composite(overlay)

    @staticmethod
    def _point(x: float, y: float, origin: Origin) -> tuple[int, int]:
        return (int(round(x + origin[0])), int(round(y + origin[1])))

    def _draw_shape(self, command: Command, draw: ImageDraw.ImageDraw, origin: Origin) -> None:
        if isinstance(command, FillRect):
            bounds = _rect_bounds(command.x, command.y, command.w, command.h, origin)
            if command.radius:
                draw.rounded_rectangle(bounds, radius=command.radius, fill=parse_color(command.color))
            else:
                draw.rectangle(bounds, fill=parse_color(command.color))
        elif isinstance(command, StrokeRect):
            # Canvas strokes straddle the path; Pillow outlines grow inward from the bounds.
            half = command.width / 2
            bounds = _rect_bounds(
                command.x - half,
                command.y - half,
                command.w + command.width,
                command.h + command.width,
                origin,
            )
            width = max(1, int(round(command.width)))
            color = parse_color(command.color)
            if command.radius:
                draw.rounded_rectangle(bounds, radius=command.radius + half, outline=color, width=width)
            else:
                draw.rectangle(bounds, outline=color, width=width)
        elif isinstance(command, FillPolygon):
            points = [(x + origin[0], y + origin[1]) for x, y in command.points]
            draw.polygon(points, fill=parse_color(command.color))
        elif isinstance(command, FillCircle):
            cx = command.cx + origin[0]
            cy = command.cy + origin[1]
            r = command.radius
            draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=parse_color(command.color))
        elif isinstance(command, VerticalGradient):
            self._draw_gradient(command, draw, origin)
        elif isinstance(command, DrawText):
            self._draw_text(command, draw, origin)
        else:
            raise TypeError(f"unsupported draw command: {type(command).__name__}")

    def _draw_group(self, group: Group, target: Image.Image, origin: Origin) -> None:
        pad = _GROUP_PADDING
        layer = Image.new("RGBA", (target.width + pad * 2, target.height + pad * 2), (0, 0, 0, 0))
        pivot = (group.anchor_x + origin[0] + pad, group.anchor_y + origin[1] + pad)
        for child in group.children:
            self._draw(child, layer, pivot)
        if group.rotation:
            layer = layer.rotate(-group.rotation, resample=Image.Resampling.BICUBIC, center=pivot)
        paste_clipped(target, layer, -pad, -pad)

    def _draw_frame(self, frame: FrameCutout, target: Image.Image, origin: Origin) -> None:
        mask = Image.new("L", target.size, 0)
        mask_draw = ImageDraw.Draw(mask)
        mask_draw.rectangle(
            _rect_bounds(CANVAS_BOX.x, CANVAS_BOX.y, CANVAS_BOX.w, CANVAS_BOX.h, origin),
            fill=255,
        )
        window = frame.window
        mask_draw.rounded_rectangle(
            _rect_bounds(window.x, window.y, window.w, window.h, origin),
            radius=frame.radius,
            fill=0,
        )
        overlay = Image.new("RGBA", target.size, (0, 0, 0, 0))
        overlay.paste(parse_color(frame.color), (0, 0, target.width, target.height), mask)
        target.alpha_composite(overlay)

    def _draw_outlined(self, command: OutlinedImage, target: Image.Image, origin: Origin) -> None:
        logo = _scaled(command.image, command.w, command.h)
        outline = _silhouette(logo, command.outline_color)
        x, y = self._point(command.x, command.y, origin)
        stroke = command.outline_width
        for dx in range(-stroke, stroke + 1):
            for dy in range(-stroke, stroke + 1):
                if dx or dy:
                    paste_clipped(target, outline, x + dx, y + dy)
        paste_clipped(target, logo, x, y)

    @staticmethod
    def _draw_gradient(command: VerticalGradient, draw: ImageDraw.ImageDraw, origin: Origin) -> None:
        box = command.box
        start = parse_color(command.start_color)
        end = parse_color(command.end_color)
        rows = max(1, int(round(box.h)))
        left = box.x + origin[0]
        right = box.right + origin[0] - 1
        top = box.y + origin[1]
        for row in range(rows):
            t = row / max(1, rows - 1)
            color = tuple(int(round(a + (b - a) * t)) for a, b in zip(start, end))
            draw.line([(left, top + row), (right, top + row)], fill=color)

    def _draw_text(self, command: DrawText, draw: ImageDraw.ImageDraw, origin: Origin) -> None:
        if not command.text:
            return
        font = self.fonts.get(command.font)
        spacing = command.letter_spacing
        total = spaced_text_width(font, command.text, spacing)
        x = command.x + origin[0]
        if command.align == "center":
            x -= total / 2
        elif command.align == "right":
            x -= total
        y = command.y + origin[1]
        anchor = "la" if command.baseline == "top" else "lm"

        if spacing:
            runs = []
            cursor = x
            for ch in command.text:
                runs.append((cursor, ch))
                cursor += float(font.getlength(ch)) + spacing
        else:
            runs = [(x, command.text)]

        fill = parse_color(command.fill)
        stroke_px = int(round(command.stroke_width / 2))
        if command.stroke_color and stroke_px > 0:
            stroke = parse_color(command.stroke_color)
            # Every stroke goes down before any fill, like strokeText followed by fillText.
            for run_x, text in runs:
                draw.text((run_x, y), text, font=font, fill=stroke, anchor=anchor, stroke_width=stroke_px, stroke_fill=stroke)
        for run_x, text in runs:
            draw.text((run_x, y), text, font=font, fill=fill, anchor=anchor)
