import pytest
from PIL import Image

from cardstamp.errors import SurfaceError
from cardstamp.geometry import CANVAS_BOX, Box
from cardstamp.models import CropRect
from cardstamp.render.commands import DrawProgram, DrawText, FillRect, FrameCutout, Group, TintedImage
from cardstamp.render.crop import draw_cropped_image, map_crop_to_dest
from cardstamp.render.executor import SurfaceExecutor, new_surface
from cardstamp.render.typography import FontBook, FontSpec, parse_color


def test_full_crop_fills_destination_edge_to_edge() -> None:
    photo = Image.new("RGB", (640, 200), (200, 40, 40))
    surface = new_surface((825, 1125))
    dest = Box(100, 150, 500, 700)
    draw_cropped_image(surface, photo, map_crop_to_dest(CropRect(), photo.size, dest))

    for x, y in ((100, 150), (599, 150), (100, 849), (599, 849)):
        assert surface.getpixel((x, y))[3] == 255
        assert surface.getpixel((x, y))[:3] == pytest.approx((200, 40, 40), abs=2)
    assert surface.getpixel((99, 149))[3] == 0
    assert surface.getpixel((600, 850))[3] == 0


def test_map_crop_to_dest_scales_fractions_to_source_pixels() -> None:
    crop = CropRect(x=0.25, y=0.5, w=0.5, h=0.25, rotate_deg=90)
    instruction = map_crop_to_dest(crop, (800, 400), CANVAS_BOX)
    assert instruction.source_box == (200.0, 200.0, 600.0, 300.0)
    assert instruction.rotate_deg == 90
    assert instruction.rotation_center == (412.5, 562.5)


def test_tiny_crop_still_draws() -> None:
    photo = Image.new("RGB", (300, 300), (10, 120, 200))
    surface = new_surface((825, 1125))
    crop = CropRect(x=0.5, y=0.5, w=0.001, h=0.001)
    draw_cropped_image(surface, photo, map_crop_to_dest(crop, photo.size, CANVAS_BOX))
    assert surface.getpixel((412, 562))[3] == 255


def test_rotation_is_about_destination_center() -> None:
    photo = Image.new("RGB", (100, 50), (0, 200, 0))
    surface = new_surface((400, 400))
    dest = Box(100, 150, 200, 100)
    draw_cropped_image(surface, photo, map_crop_to_dest(CropRect(rotate_deg=90), photo.size, dest))
    # A quarter turn swaps the footprint to 100x200 around the same center (200, 200).
    assert surface.getpixel((200, 110))[3] == 255
    assert surface.getpixel((200, 290))[3] == 255
    assert surface.getpixel((110, 200))[3] == 0


def test_new_surface_rejects_empty_size() -> None:
    with pytest.raises(SurfaceError):
        new_surface((0, 1125))


def test_frame_cutout_leaves_window_transparent() -> None:
    surface = new_surface((825, 1125))
    program = DrawProgram((FrameCutout(Box(56, 91, 713, 937), 29, "#FFFFFF"),))
    SurfaceExecutor(surface, FontBook()).run(program)
    assert surface.getpixel((10, 10)) == (255, 255, 255, 255)
    assert surface.getpixel((60, 95)) == (255, 255, 255, 255)
    assert surface.getpixel((412, 562))[3] == 0


def test_origin_translates_into_trimmed_surface() -> None:
    surface = new_surface((750, 1050))
    program = DrawProgram((FillRect(37.5, 37.5, 10, 10, "#1B4278"),))
    SurfaceExecutor(surface, FontBook(), origin=(-37.5, -37.5)).run(program)
    assert surface.getpixel((0, 0)) == parse_color("#1B4278")
    assert surface.getpixel((20, 20))[3] == 0


def test_group_children_are_relative_to_anchor() -> None:
    surface = new_surface((400, 400))
    group = Group(200, 200, -6, (FillRect(-50, -20, 100, 40, "#9CCBEC"),))
    SurfaceExecutor(surface, FontBook()).run(DrawProgram((group,)))
    assert surface.getpixel((200, 200)) == parse_color("#9CCBEC")
    assert surface.getpixel((100, 200))[3] == 0


def test_tinted_image_keeps_shape_and_takes_color() -> None:
    icon = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    icon.paste((255, 0, 0, 255), (2, 2, 8, 8))
    surface = new_surface((50, 50))
    SurfaceExecutor(surface, FontBook()).run(DrawProgram((TintedImage(icon, 0, 0, 10, 10, "#1B4278"),)))
    assert surface.getpixel((5, 5)) == parse_color("#1B4278")
    assert surface.getpixel((0, 0))[3] == 0


def test_text_is_drawn_with_stroke() -> None:
    surface = new_surface((300, 100))
    text = DrawText(
        "LOPEZ",
        10,
        50,
        FontSpec(40),
        "#FFFFFF",
        letter_spacing=1.5,
        stroke_color="#1B4278",
        stroke_width=5,
    )
    SurfaceExecutor(surface, FontBook()).run(DrawProgram((text,)))
    colors = {pixel for pixel in surface.getdata() if pixel[3] == 255}
    assert (255, 255, 255, 255) in colors
    assert parse_color("#1B4278") in colors


def test_parse_color_handles_fractional_alpha() -> None:
    assert parse_color("rgba(255, 255, 255, 0.67)") == (255, 255, 255, 171)
    assert parse_color("#9CCBEC") == (156, 203, 236, 255)
