"""Card-type specific content, one strategy per card family."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from PIL import Image

from cardstamp.constants import DEFAULT_NATIONAL_TEAM_NAME, RARE_CARD_DEFAULT_TITLE, RARE_CARD_LABEL
from cardstamp.models import Card, CardFamily, RareCard, StandardCard, Team, TournamentConfig
from cardstamp.render.commands import (
    Command,
    DrawText,
    FillCircle,
    FillPolygon,
    FillRect,
    Group,
    StrokeRect,
    TintedImage,
)
from cardstamp.render.layout import COLORS, LAYOUT
from cardstamp.render.typography import FontBook, FontSpec, ellipsize

_NAME = LAYOUT.name
_POS = LAYOUT.position_number
_BAR = LAYOUT.bottom_bar
_RARE = LAYOUT.rare_card
_SUPER = LAYOUT.super_rare
_NATIONAL = LAYOUT.national_team
_BADGE = LAYOUT.event_badge

FIRST_NAME_FONT = FontSpec(_NAME.first_name_size, italic=True)
LAST_NAME_FONT = FontSpec(_NAME.last_name_size, italic=True)
POSITION_FONT = FontSpec(_POS.position_font_size)
NUMBER_FONT = FontSpec(_POS.number_font_size)
BAR_FONT = FontSpec(_BAR.font_size)
BADGE_FONT = FontSpec(_BADGE.font_size)
TITLE_FONT = FontSpec(_RARE.title_font_size, italic=True)
CAPTION_FONT = FontSpec(_RARE.caption_font_size, italic=True)
SUPER_FIRST_FONT = FontSpec(_SUPER.first_name_size)
SUPER_LAST_FONT = FontSpec(_SUPER.last_name_size, italic=True)
NATIONAL_FONT = FontSpec(_NATIONAL.name_font_size)
WATERMARK_FONT = FontSpec(LAYOUT.template_layers.watermark_font_size)

REQUIRED_FONTS = frozenset(
    {
        FIRST_NAME_FONT,
        LAST_NAME_FONT,
        POSITION_FONT,
        NUMBER_FONT,
        BAR_FONT,
        BADGE_FONT,
        TITLE_FONT,
        CAPTION_FONT,
        SUPER_FIRST_FONT,
        SUPER_LAST_FONT,
        NATIONAL_FONT,
        WATERMARK_FONT,
    }
)


@dataclass(slots=True, frozen=True)
class LayoutContext:
    config: TournamentConfig
    fonts: FontBook
    team: Team | None = None


@dataclass(slots=True, frozen=True)
class LayoutResult:
    commands: tuple[Command, ...]
    bottom_text: str
    rarity: str


def _upper(value: str | None) -> str:
    return (value or "").upper()


def resolve_team(card: Card, config: TournamentConfig) -> Team | None:
    if card.family is CardFamily.RARE:
        return None
    team = config.find_team(card.team_id)
    if team is not None:
        return team
    if card.team_name:
        return Team(id="custom", name=card.team_name, logo_key=None)
    return None


def jersey_numbers_enabled(config: TournamentConfig, card_type: str) -> bool:
    entry = config.card_type_config(card_type)
    return True if entry is None else entry.show_jersey_number


def star_points(cx: float, cy: float, radius: float, points: int = 5) -> tuple[tuple[float, float], ...]:
    inner = radius * 0.4
    vertices = []
    for index in range(points * 2):
        r = radius if index % 2 == 0 else inner
        angle = (math.pi / points) * index - math.pi / 2
        vertices.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return tuple(vertices)


def standard_name_boxes(card: StandardCard, fonts: FontBook) -> Group | None:
    """Two overlapping angled boxes, first name underneath, last name on top."""
    first = _upper(card.first_name)
    last = _upper(card.last_name)
    if not first and not last:
        return None

    pad = _NAME.left_padding + _NAME.right_padding + _NAME.box_extension
    last_width = fonts.measure(last, LAST_NAME_FONT, _NAME.letter_spacing.last_name) + pad
    first_width = fonts.measure(first, FIRST_NAME_FONT, _NAME.letter_spacing.first_name) + pad

    first_box = _NAME.first_name_box
    last_box = _NAME.last_name_box
    first_y = -last_box.height / 2 - first_box.height
    last_y = -last_box.height / 2

    children: tuple[Command, ...] = (
        FillRect(-first_width + _NAME.box_extension, first_y, first_width, first_box.height, COLORS.secondary),
        StrokeRect(
            -first_width + _NAME.box_extension,
            first_y,
            first_width,
            first_box.height,
            COLORS.white,
            first_box.border_width,
        ),
        DrawText(
            first,
            -_NAME.right_padding,
            first_y + first_box.height / 2 + _NAME.text_y_offset,
            FIRST_NAME_FONT,
            COLORS.primary,
            align="right",
            letter_spacing=_NAME.letter_spacing.first_name,
            stroke_color=COLORS.white,
            stroke_width=first_box.stroke_width,
        ),
        FillRect(-last_width + _NAME.box_extension, last_y, last_width, last_box.height, COLORS.white),
        StrokeRect(
            -last_width + _NAME.box_extension,
            last_y,
            last_width,
            last_box.height,
            COLORS.secondary,
            last_box.border_width,
        ),
        DrawText(
            last,
            -_NAME.right_padding,
            _NAME.text_y_offset,
            LAST_NAME_FONT,
            COLORS.white,
            align="right",
            letter_spacing=_NAME.letter_spacing.last_name,
            stroke_color=COLORS.primary,
            stroke_width=last_box.stroke_width,
        ),
    )
    return Group(_NAME.anchor_x, _NAME.anchor_y, _NAME.rotation, children)


def position_number(position: str, number: str) -> tuple[Command, ...]:
    number_y = _POS.top_y + _POS.position_font_size
    return (
        DrawText(
            position.upper(),
            _POS.center_x,
            _POS.top_y,
            POSITION_FONT,
            COLORS.primary,
            align="center",
            baseline="top",
            letter_spacing=_POS.position_letter_spacing,
            stroke_color=COLORS.white,
            stroke_width=_POS.position_stroke_width,
        ),
        DrawText(
            number,
            _POS.center_x + _POS.number_x_offset,
            number_y,
            NUMBER_FONT,
            COLORS.number_fill,
            align="center",
            baseline="top",
            letter_spacing=_POS.number_letter_spacing,
            stroke_color=COLORS.primary,
            stroke_width=_POS.number_stroke_width,
        ),
    )


def _maybe_position_number(card: StandardCard | RareCard, config: TournamentConfig) -> tuple[Command, ...]:
    if not jersey_numbers_enabled(config, card.card_type):
        return ()
    if card.position and card.jersey_number:
        return position_number(card.position, card.jersey_number)
    return ()


def event_badge(text: str) -> tuple[Command, ...]:
    return (
        FillRect(_BADGE.x, _BADGE.y, _BADGE.width, _BADGE.height, COLORS.secondary, radius=_BADGE.border_radius),
        StrokeRect(
            _BADGE.x,
            _BADGE.y,
            _BADGE.width,
            _BADGE.height,
            COLORS.primary,
            _BADGE.border_width,
            radius=_BADGE.border_radius,
        ),
        DrawText(
            text,
            _BADGE.x + _BADGE.width / 2,
            _BADGE.y + _BADGE.height / 2 + _BADGE.text_y_offset,
            BADGE_FONT,
            COLORS.primary,
            align="center",
        ),
    )


def rarity_glyph(rarity: str) -> tuple[Command, ...]:
    size = _BAR.rarity_size
    cx = _BAR.rarity_x + size / 2
    cy = _BAR.y + 13
    if rarity in ("common", "uncommon"):
        return (FillCircle(cx, cy, size / 2, COLORS.primary),)
    glyphs: list[Command] = [FillPolygon(star_points(cx, cy, size / 2), COLORS.primary)]
    if rarity == "super-rare":
        glyphs.append(FillPolygon(star_points(cx + size + 4, cy, size / 2), COLORS.primary))
    return tuple(glyphs)


def bottom_bar(
    photographer: str,
    right_text: str,
    rarity: str,
    fonts: FontBook,
    camera_icon: Image.Image | None = None,
) -> tuple[Command, ...]:
    icon = _BAR.camera_icon
    text_y = _BAR.y + _BAR.text_y_offset
    font = fonts.get(BAR_FONT)
    spacing = _BAR.letter_spacing

    commands: list[Command] = []
    if camera_icon is not None:
        commands.append(TintedImage(camera_icon, icon.x, icon.y, icon.width, icon.height, COLORS.primary))
    else:
        commands.append(FillRect(icon.x, icon.y, icon.width, icon.height, COLORS.primary, radius=2))

    photographer_room = _BAR.rarity_x - _BAR.photographer_x - 12
    commands.append(
        DrawText(
            ellipsize(font, photographer.upper(), photographer_room, spacing.photographer),
            _BAR.photographer_x,
            text_y,
            BAR_FONT,
            COLORS.primary,
            letter_spacing=spacing.photographer,
        )
    )
    commands.extend(rarity_glyph(rarity))

    team_room = _BAR.team_name_x - (_BAR.rarity_x + _BAR.rarity_size * 2 + 16)
    commands.append(
        DrawText(
            ellipsize(font, right_text.upper(), team_room, spacing.team_name),
            _BAR.team_name_x,
            text_y,
            BAR_FONT,
            COLORS.primary,
            align="right",
            letter_spacing=spacing.team_name,
        )
    )
    return tuple(commands)


def _angled_label_box(
    text: str,
    anchor_x: float,
    anchor_y: float,
    rotation: float,
    font: FontSpec,
    *,
    fonts: FontBook,
    height: float,
    max_width: float,
    fill: str,
    border: str,
    text_color: str,
    padding: float,
    border_width: float,
    fixed_width: float | None = None,
) -> Group:
    if fixed_width is None:
        label = ellipsize(fonts.get(font), text, max_width - padding * 2)
        width = min(max_width, fonts.measure(label, font) + padding * 2)
    else:
        label = ellipsize(fonts.get(font), text, fixed_width - padding * 2)
        width = fixed_width
    return Group(
        anchor_x,
        anchor_y,
        rotation,
        (
            FillRect(0, -height / 2, width, height, fill),
            StrokeRect(0, -height / 2, width, height, border, border_width),
            DrawText(label, padding, 0, font, text_color),
        ),
    )


def _standard_layout(card: StandardCard, ctx: LayoutContext) -> LayoutResult:
    # The name boxes are drawn before the frame by the pipeline.
    team_name = ctx.team.name if ctx.team else ""
    return LayoutResult(
        commands=_maybe_position_number(card, ctx.config),
        bottom_text=team_name,
        rarity=card.rarity or "common",
    )


def _rare_layout(card: RareCard, ctx: LayoutContext) -> LayoutResult:
    commands: list[Command] = [
        _angled_label_box(
            card.title or RARE_CARD_DEFAULT_TITLE,
            _RARE.title_anchor_x,
            _RARE.title_anchor_y,
            _RARE.rotation,
            TITLE_FONT,
            fonts=ctx.fonts,
            height=_RARE.title_box_height,
            max_width=_RARE.title_max_width,
            fill=COLORS.white,
            border=COLORS.secondary,
            text_color=COLORS.primary,
            padding=_RARE.text_padding,
            border_width=_RARE.border_width,
        )
    ]
    if card.caption:
        commands.append(
            _angled_label_box(
                card.caption,
                _RARE.caption_anchor_x,
                _RARE.caption_anchor_y,
                _RARE.rotation,
                CAPTION_FONT,
                fonts=ctx.fonts,
                height=_RARE.caption_box_height,
                max_width=_RARE.caption_max_width,
                fill=COLORS.secondary,
                border=COLORS.white,
                text_color=COLORS.primary,
                padding=_RARE.text_padding,
                border_width=_RARE.border_width,
            )
        )
    return LayoutResult(commands=tuple(commands), bottom_text=RARE_CARD_LABEL, rarity="rare")


def _super_rare_layout(card: RareCard, ctx: LayoutContext) -> LayoutResult:
    commands: list[Command] = [
        DrawText(
            _upper(card.first_name),
            _SUPER.center_x,
            _SUPER.first_name_y,
            SUPER_FIRST_FONT,
            COLORS.white,
            align="center",
        ),
        DrawText(
            card.last_name or "",
            _SUPER.center_x,
            _SUPER.last_name_y,
            SUPER_LAST_FONT,
            COLORS.white,
            align="center",
        ),
    ]
    commands.extend(_maybe_position_number(card, ctx.config))
    team_name = ctx.team.name if ctx.team else ""
    return LayoutResult(commands=tuple(commands), bottom_text=team_name, rarity="super-rare")


def _national_team_layout(card: StandardCard, ctx: LayoutContext) -> LayoutResult:
    full_name = f"{card.first_name or ''} {card.last_name or ''}".strip()
    name_box = _angled_label_box(
        full_name.upper(),
        _NATIONAL.anchor_x,
        _NATIONAL.name_y + _NATIONAL.box_height / 2,
        _NATIONAL.rotation,
        NATIONAL_FONT,
        fonts=ctx.fonts,
        height=_NATIONAL.box_height,
        max_width=_NATIONAL.box_width,
        fill=COLORS.white,
        border=COLORS.secondary,
        text_color=COLORS.primary,
        padding=_NATIONAL.text_padding,
        border_width=_NATIONAL.border_width,
        fixed_width=_NATIONAL.box_width,
    )
    team_name = ctx.team.name if ctx.team else DEFAULT_NATIONAL_TEAM_NAME
    bottom = f"{team_name} #{card.jersey_number}" if card.jersey_number else team_name
    return LayoutResult(commands=(name_box,), bottom_text=bottom, rarity="uncommon")


Strategy = Callable[[Card, LayoutContext], LayoutResult]

STRATEGIES: dict[CardFamily, tuple[type, Strategy]] = {
    CardFamily.STANDARD: (StandardCard, _standard_layout),  # type: ignore[dict-item]
    CardFamily.RARE: (RareCard, _rare_layout),  # type: ignore[dict-item]
    CardFamily.SUPER_RARE: (RareCard, _super_rare_layout),  # type: ignore[dict-item]
    CardFamily.NATIONAL_TEAM: (StandardCard, _national_team_layout),  # type: ignore[dict-item]
}


def dispatch(card: Card) -> Strategy:
    variant, strategy = STRATEGIES[card.family]
    if not isinstance(card, variant):
        raise TypeError(f"{type(card).__name__} cannot be drawn with the {card.family.value} layout")
    return strategy
