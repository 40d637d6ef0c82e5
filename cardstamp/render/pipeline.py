"""Card compositing: build the draw program for a card and play it onto a surface."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

import aiohttp
from PIL import Image

from cardstamp.assets import (
    DEFAULT_REQUEST_TIMEOUT,
    AssetResolver,
    load_asset_safe,
    load_image,
    load_image_safe,
)
from cardstamp.geometry import CANVAS_BOX, CARD_HEIGHT, CARD_WIDTH, TRIM_BOX, Box
from cardstamp.models import Card, CardFamily, CropRect, StandardCard, TemplateSnapshot, TournamentConfig
from cardstamp.render.commands import (
    Command,
    DrawImage,
    DrawPhoto,
    DrawProgram,
    DrawText,
    FrameCutout,
    OutlinedImage,
    StrokeRect,
    VerticalGradient,
)
from cardstamp.render.crop import draw_cropped_image, map_crop_to_dest
from cardstamp.render.executor import SurfaceExecutor, encode_png, new_surface
from cardstamp.render.layout import COLORS, FRAME, LAYOUT, LOGO_OUTLINE_WIDTH
from cardstamp.render.layouts import (
    REQUIRED_FONTS,
    WATERMARK_FONT,
    LayoutContext,
    bottom_bar,
    dispatch,
    event_badge,
    resolve_team,
    standard_name_boxes,
)
from cardstamp.render.typography import FontBook
from cardstamp.template_loader import resolve_template_snapshot

LOGGER = logging.getLogger(__name__)

FRAME_WINDOW = Box(FRAME.inner_x, FRAME.inner_y, FRAME.inner_width, FRAME.inner_height)
TEMPLATE_BORDER_WIDTH = 3


@dataclass(slots=True)
class RenderOptions:
    font_path: Path | None = None
    italic_font_path: Path | None = None
    camera_icon_url: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass(slots=True, frozen=True, eq=False)
class CardAssets:
    photo: Image.Image
    logo: Image.Image | None = None
    camera_icon: Image.Image | None = None
    overlay: Image.Image | None = None


def logo_key_for(card: Card, config: TournamentConfig) -> str | None:
    """Card-type override first, then the team logo, then the tournament logo."""
    entry = config.card_type_config(card.card_type)
    if entry is not None and entry.logo_override_key:
        return entry.logo_override_key
    team = resolve_team(card, config)
    if team is not None and team.logo_key:
        return team.logo_key
    return config.branding.tournament_logo_key


def fit_logo(image: Image.Image) -> Box:
    slot = LAYOUT.team_logo
    ratio = min(slot.max_width / image.width, slot.max_height / image.height, 1.0)
    return Box(slot.x, slot.y, image.width * ratio, image.height * ratio)


def _overlay_layer(assets: CardAssets) -> tuple[Command, ...]:
    if assets.overlay is None:
        return ()
    return (DrawImage(assets.overlay, 0, 0, CARD_WIDTH, CARD_HEIGHT),)


def _template_layers(card: Card, snapshot: TemplateSnapshot) -> list[Command]:
    layers = LAYOUT.template_layers
    commands: list[Command] = []
    if snapshot.flags.show_gradient:
        gradient_box = Box(
            FRAME_WINDOW.x,
            layers.gradient_top,
            FRAME_WINDOW.w,
            FRAME_WINDOW.bottom - layers.gradient_top,
        )
        commands.append(
            VerticalGradient(gradient_box, snapshot.theme.gradient_start, snapshot.theme.gradient_end)
        )
    jersey = None if card.family is CardFamily.RARE else card.jersey_number
    if snapshot.flags.show_watermark_jersey and jersey:
        commands.append(
            DrawText(
                jersey,
                CARD_WIDTH / 2,
                layers.watermark_center_y,
                WATERMARK_FONT,
                snapshot.theme.watermark,
                align="center",
            )
        )
    return commands


def build_card_program(
    card: Card,
    config: TournamentConfig,
    assets: CardAssets,
    fonts: FontBook,
    snapshot: TemplateSnapshot,
) -> DrawProgram:
    strategy = dispatch(card)
    below_text = snapshot.overlay_placement != "aboveText"

    commands: list[Command] = [
        DrawPhoto(assets.photo, map_crop_to_dest(card.crop, assets.photo.size, CANVAS_BOX)),
    ]
    if below_text:
        commands.extend(_overlay_layer(assets))
    commands.extend(_template_layers(card, snapshot))

    if isinstance(card, StandardCard) and card.card_type != "national-team":
        name_boxes = standard_name_boxes(card, fonts)
        if name_boxes is not None:
            commands.append(name_boxes)

    commands.append(FrameCutout(FRAME_WINDOW, FRAME.inner_radius, COLORS.white))
    if snapshot.flags.show_borders:
        commands.append(
            StrokeRect(
                FRAME_WINDOW.x,
                FRAME_WINDOW.y,
                FRAME_WINDOW.w,
                FRAME_WINDOW.h,
                snapshot.theme.border,
                TEMPLATE_BORDER_WIDTH,
                radius=FRAME.inner_radius,
            )
        )

    if assets.logo is not None:
        slot = fit_logo(assets.logo)
        commands.append(
            OutlinedImage(
                assets.logo,
                slot.x,
                slot.y,
                slot.w,
                slot.h,
                COLORS.white,
                LOGO_OUTLINE_WIDTH,
            )
        )

    if config.branding.event_indicator:
        commands.extend(event_badge(config.branding.event_indicator))

    team = resolve_team(card, config)
    result = strategy(card, LayoutContext(config=config, fonts=fonts, team=team))
    commands.extend(result.commands)
    commands.extend(
        bottom_bar(
            card.photographer or "",
            result.bottom_text,
            result.rarity,
            fonts,
            camera_icon=assets.camera_icon,
        )
    )

    if not below_text:
        commands.extend(_overlay_layer(assets))
    return DrawProgram(tuple(commands))


async def _load_assets(
    card: Card,
    config: TournamentConfig,
    photo_url: str,
    resolve_asset_url: AssetResolver,
    snapshot: TemplateSnapshot,
    options: RenderOptions,
    session: aiohttp.ClientSession | None,
) -> CardAssets:
    timeout = options.request_timeout
    photo = await load_image(photo_url, session=session, timeout=timeout)
    logo, camera_icon, overlay = await asyncio.gather(
        load_asset_safe(logo_key_for(card, config), resolve_asset_url, session=session, timeout=timeout),
        load_image_safe(options.camera_icon_url, session=session, timeout=timeout),
        load_asset_safe(snapshot.overlay_key, resolve_asset_url, session=session, timeout=timeout),
    )
    return CardAssets(photo=photo, logo=logo, camera_icon=camera_icon, overlay=overlay)


async def _render(
    card: Card,
    config: TournamentConfig,
    photo_url: str,
    resolve_asset_url: AssetResolver,
    template_id: str | None,
    options: RenderOptions | None,
    session: aiohttp.ClientSession | None,
    size: tuple[int, int],
    origin: tuple[float, float],
) -> bytes:
    started = time.perf_counter()
    options = options or RenderOptions()
    surface = new_surface(size)

    resolved = resolve_template_snapshot(card, config, template_id)
    LOGGER.debug("rendering card %s with template %s at %sx%s", card.id, resolved.template_id, *size)

    fonts = FontBook(options.font_path, options.italic_font_path)
    await asyncio.to_thread(fonts.preload, REQUIRED_FONTS)

    assets = await _load_assets(card, config, photo_url, resolve_asset_url, resolved.snapshot, options, session)
    program = build_card_program(card, config, assets, fonts, resolved.snapshot)
    SurfaceExecutor(surface, fonts, origin).run(program)

    png = await asyncio.to_thread(encode_png, surface)
    LOGGER.info(
        "rendered card %s (%s, %d bytes) in %.2fs",
        card.id,
        resolved.template_id,
        len(png),
        time.perf_counter() - started,
    )
    return png


async def render_full_card(
    card: Card,
    config: TournamentConfig,
    photo_url: str,
    resolve_asset_url: AssetResolver,
    template_id: str | None = None,
    *,
    options: RenderOptions | None = None,
    session: aiohttp.ClientSession | None = None,
) -> bytes:
    """Render the full-bleed card and return it as PNG bytes."""
    return await _render(
        card,
        config,
        photo_url,
        resolve_asset_url,
        template_id,
        options,
        session,
        size=(CARD_WIDTH, CARD_HEIGHT),
        origin=(0.0, 0.0),
    )


async def render_trimmed_preview(
    card: Card,
    config: TournamentConfig,
    photo_url: str,
    resolve_asset_url: AssetResolver,
    template_id: str | None = None,
    *,
    options: RenderOptions | None = None,
    session: aiohttp.ClientSession | None = None,
) -> bytes:
    """Render the card as it looks after cutting along the trim line."""
    return await _render(
        card,
        config,
        photo_url,
        resolve_asset_url,
        template_id,
        options,
        session,
        size=TRIM_BOX.pixel_size,
        origin=(-TRIM_BOX.x, -TRIM_BOX.y),
    )


def crop_output_size(crop: CropRect, source_size: tuple[int, int]) -> tuple[int, int]:
    width, height = source_size
    return (max(1, int(round(crop.w * width))), max(1, int(round(crop.h * height))))


async def render_crop(
    photo_url: str,
    crop: CropRect,
    *,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> bytes:
    """Render only the cropped region of a photo at source resolution, as PNG bytes.

    The rotation is applied about the centre of the output, the same way the
    card photo is drawn, so the stored crop image matches the card.
    """
    photo = await load_image(photo_url, session=session, timeout=timeout)
    size = crop_output_size(crop, photo.size)
    surface = new_surface(size)
    draw_cropped_image(surface, photo, map_crop_to_dest(crop, photo.size, Box(0, 0, size[0], size[1])))
    png = await asyncio.to_thread(encode_png, surface)
    LOGGER.debug("rendered %sx%s crop of %s", size[0], size[1], photo_url)
    return png
