"""Design constants of the card layout, in canvas units (825 x 1125).

Values come from the print design and are read-only; drawing code looks
them up here instead of hard-coding numbers.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Palette:
    primary: str = "#1B4278"
    secondary: str = "#9CCBEC"
    white: str = "#FFFFFF"
    number_fill: str = "rgba(255, 255, 255, 0.67)"


@dataclass(slots=True, frozen=True)
class FrameLayout:
    inner_x: float = 56
    inner_y: float = 91
    inner_width: float = 713
    inner_height: float = 937
    inner_radius: float = 29


@dataclass(slots=True, frozen=True)
class NameBoxGeometry:
    height: float
    border_width: float
    stroke_width: float


@dataclass(slots=True, frozen=True)
class LetterSpacing:
    first_name: float = 1.0
    last_name: float = 1.5


@dataclass(slots=True, frozen=True)
class NameLayout:
    rotation: float = -6
    anchor_x: float = 760
    anchor_y: float = 905
    first_name_box: NameBoxGeometry = NameBoxGeometry(height=52, border_width=3, stroke_width=4)
    last_name_box: NameBoxGeometry = NameBoxGeometry(height=72, border_width=3, stroke_width=5)
    first_name_size: int = 43
    last_name_size: int = 60
    letter_spacing: LetterSpacing = LetterSpacing()
    left_padding: float = 24
    right_padding: float = 20
    box_extension: float = 40
    text_y_offset: float = 2


@dataclass(slots=True, frozen=True)
class EventBadgeLayout:
    x: float = 312
    y: float = 26
    width: float = 201
    height: float = 44
    border_radius: float = 22
    border_width: float = 3
    font_size: int = 24
    text_y_offset: float = 1


@dataclass(slots=True, frozen=True)
class PositionNumberLayout:
    center_x: float = 680
    top_y: float = 118
    position_font_size: int = 24
    number_font_size: int = 84
    position_letter_spacing: float = 2
    number_letter_spacing: float = 0
    position_stroke_width: float = 4
    number_stroke_width: float = 4
    number_x_offset: float = -4


@dataclass(slots=True, frozen=True)
class TeamLogoLayout:
    x: float = 80
    y: float = 112
    max_width: float = 130
    max_height: float = 130


@dataclass(slots=True, frozen=True)
class IconSlot:
    x: float
    y: float
    width: float
    height: float


@dataclass(slots=True, frozen=True)
class BottomBarLetterSpacing:
    photographer: float = 1.0
    team_name: float = 1.0


@dataclass(slots=True, frozen=True)
class BottomBarLayout:
    y: float = 1050
    text_y_offset: float = 13
    camera_icon: IconSlot = IconSlot(x=64, y=1051, width=30, height=24)
    photographer_x: float = 104
    rarity_x: float = 400
    rarity_size: float = 22
    team_name_x: float = 761
    font_size: int = 24
    letter_spacing: BottomBarLetterSpacing = BottomBarLetterSpacing()


@dataclass(slots=True, frozen=True)
class RareCardLayout:
    rotation: float = -6
    title_anchor_x: float = 62
    title_anchor_y: float = 860
    caption_anchor_x: float = 62
    caption_anchor_y: float = 938
    title_font_size: int = 48
    caption_font_size: int = 28
    title_box_height: float = 80
    caption_box_height: float = 50
    title_max_width: float = 700
    caption_max_width: float = 500
    text_padding: float = 16
    border_width: float = 3


@dataclass(slots=True, frozen=True)
class SuperRareLayout:
    center_x: float = 412.5
    first_name_y: float = 880
    last_name_y: float = 940
    first_name_size: int = 43
    last_name_size: int = 72


@dataclass(slots=True, frozen=True)
class NationalTeamLayout:
    rotation: float = -6
    anchor_x: float = 180
    name_y: float = 112
    box_width: float = 500
    box_height: float = 50
    border_width: float = 3
    name_font_size: int = 36
    text_padding: float = 16


@dataclass(slots=True, frozen=True)
class TemplateLayerLayout:
    gradient_top: float = 560
    watermark_font_size: int = 320
    watermark_center_y: float = 520


@dataclass(slots=True, frozen=True)
class CardLayout:
    name: NameLayout = field(default_factory=NameLayout)
    event_badge: EventBadgeLayout = field(default_factory=EventBadgeLayout)
    position_number: PositionNumberLayout = field(default_factory=PositionNumberLayout)
    team_logo: TeamLogoLayout = field(default_factory=TeamLogoLayout)
    bottom_bar: BottomBarLayout = field(default_factory=BottomBarLayout)
    rare_card: RareCardLayout = field(default_factory=RareCardLayout)
    super_rare: SuperRareLayout = field(default_factory=SuperRareLayout)
    national_team: NationalTeamLayout = field(default_factory=NationalTeamLayout)
    template_layers: TemplateLayerLayout = field(default_factory=TemplateLayerLayout)


COLORS = Palette()
FRAME = FrameLayout()
LAYOUT = CardLayout()

LOGO_OUTLINE_WIDTH = 1
