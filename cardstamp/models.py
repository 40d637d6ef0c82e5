from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from cardstamp.constants import (
    CARD_RARITIES,
    RARE_CARD_TYPES,
    STANDARD_CARD_TYPES,
    VALID_ROTATIONS,
)

# (attribute, wire key) pairs, in the order the persisted documents use.
THEME_FIELDS: tuple[tuple[str, str], ...] = (
    ("gradient_start", "gradientStart"),
    ("gradient_end", "gradientEnd"),
    ("border", "border"),
    ("accent", "accent"),
    ("label", "label"),
    ("name_color", "nameColor"),
    ("meta", "meta"),
    ("watermark", "watermark"),
)
FLAG_FIELDS: tuple[tuple[str, str], ...] = (
    ("show_gradient", "showGradient"),
    ("show_borders", "showBorders"),
    ("show_watermark_jersey", "showWatermarkJersey"),
)


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _opt_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


class CardFamily(str, Enum):
    STANDARD = "standard"
    RARE = "rare"
    SUPER_RARE = "super-rare"
    NATIONAL_TEAM = "national-team"


@dataclass(slots=True, frozen=True)
class CropRect:
    x: float = 0.0
    y: float = 0.0
    w: float = 1.0
    h: float = 1.0
    rotate_deg: int = 0

    def clamped(self, min_size: float = 0.001) -> CropRect:
        """Clamp into the unit square the way the crop editor does before saving."""
        w = min(1.0, max(min_size, self.w))
        h = min(1.0, max(min_size, self.h))
        x = min(1.0 - w, max(0.0, self.x))
        y = min(1.0 - h, max(0.0, self.y))
        rotate = self.rotate_deg if self.rotate_deg in VALID_ROTATIONS else 0
        return CropRect(x=x, y=y, w=w, h=h, rotate_deg=rotate)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CropRect:
        rotate = int(data.get("rotateDeg") or 0) % 360
        if rotate not in VALID_ROTATIONS:
            raise ValueError(f"crop rotation must be one of {VALID_ROTATIONS}, got: {rotate}")
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            w=float(data.get("w", 1.0)),
            h=float(data.get("h", 1.0)),
            rotate_deg=rotate,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h, "rotateDeg": self.rotate_deg}


DEFAULT_CROP = CropRect(0.0, 0.0, 1.0, 1.0, 0)

PERSON_FIELDS = ("first_name", "last_name", "team_id", "team_name", "position", "jersey_number")


@dataclass(slots=True, frozen=True)
class CardPhoto:
    original_key: str | None = None
    width: float | None = None
    height: float | None = None
    crop: CropRect | None = None
    crop_key: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardPhoto:
        crop = data.get("crop")
        return cls(
            original_key=_opt_str(data.get("originalKey")),
            width=_opt_float(data.get("width")),
            height=_opt_float(data.get("height")),
            crop=CropRect.from_dict(crop) if isinstance(crop, dict) else None,
            crop_key=_opt_str(data.get("cropKey")),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.original_key:
            payload["originalKey"] = self.original_key
        if self.width is not None:
            payload["width"] = self.width
        if self.height is not None:
            payload["height"] = self.height
        if self.crop is not None:
            payload["crop"] = self.crop.to_dict()
        if self.crop_key:
            payload["cropKey"] = self.crop_key
        return payload


@dataclass(slots=True, frozen=True)
class TemplateTheme:
    gradient_start: str
    gradient_end: str
    border: str
    accent: str
    label: str
    name_color: str
    meta: str
    watermark: str

    def to_dict(self) -> dict[str, str]:
        return {wire: getattr(self, attr) for attr, wire in THEME_FIELDS}


@dataclass(slots=True, frozen=True)
class TemplateFlags:
    show_gradient: bool = False
    show_borders: bool = False
    show_watermark_jersey: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {wire: getattr(self, attr) for attr, wire in FLAG_FIELDS}


@dataclass(slots=True, frozen=True)
class TemplateDefinition:
    id: str
    label: str
    overlay_key: str | None = None
    # Partial overrides keyed by attribute name; missing keys keep the base value.
    theme: dict[str, str] = field(default_factory=dict)
    flags: dict[str, bool] = field(default_factory=dict)
    overlay_placement: str = "belowText"


@dataclass(slots=True, frozen=True)
class TemplateSnapshot:
    theme: TemplateTheme
    flags: TemplateFlags
    overlay_placement: str = "belowText"
    overlay_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.overlay_key:
            payload["overlayKey"] = self.overlay_key
        payload["theme"] = self.theme.to_dict()
        payload["flags"] = self.flags.to_dict()
        payload["overlayPlacement"] = self.overlay_placement
        return payload


@dataclass(slots=True, frozen=True)
class RenderMeta:
    key: str
    template_id: str
    rendered_at: str
    template_snapshot: TemplateSnapshot

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "templateId": self.template_id,
            "renderedAt": self.rendered_at,
            "templateSnapshot": self.template_snapshot.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class CardBase:
    id: str
    tournament_id: str
    card_type: str
    rarity: str | None = None
    template_id: str | None = None
    status: str = "draft"
    photographer: str | None = None
    photo: CardPhoto | None = None
    render_key: str | None = None
    render_meta: RenderMeta | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def crop(self) -> CropRect:
        if self.photo is not None and self.photo.crop is not None:
            return self.photo.crop
        return DEFAULT_CROP

    def _check_rarity(self) -> None:
        if self.rarity is not None and self.rarity not in CARD_RARITIES:
            raise ValueError(f"unknown card rarity: {self.rarity!r}")


@dataclass(slots=True, frozen=True)
class StandardCard(CardBase):
    first_name: str | None = None
    last_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    position: str | None = None
    jersey_number: str | None = None

    def __post_init__(self) -> None:
        if self.card_type not in STANDARD_CARD_TYPES:
            raise ValueError(f"card type {self.card_type!r} is not a standard card type")
        self._check_rarity()

    @property
    def family(self) -> CardFamily:
        if self.card_type == "national-team":
            return CardFamily.NATIONAL_TEAM
        return CardFamily.STANDARD


@dataclass(slots=True, frozen=True)
class RareCard(CardBase):
    title: str | None = None
    caption: str | None = None
    # Only the super-rare layout reads the fields below.
    first_name: str | None = None
    last_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    position: str | None = None
    jersey_number: str | None = None

    def __post_init__(self) -> None:
        if self.card_type not in RARE_CARD_TYPES:
            raise ValueError(f"card type {self.card_type!r} is not a rare card type")
        if self.card_type == "rare":
            carried = [name for name in PERSON_FIELDS if getattr(self, name) is not None]
            if carried:
                raise ValueError(f"rare cards do not carry person fields: {', '.join(carried)}")
        self._check_rarity()

    @property
    def family(self) -> CardFamily:
        if self.card_type == "super-rare":
            return CardFamily.SUPER_RARE
        return CardFamily.RARE


Card = Union[StandardCard, RareCard]


@dataclass(slots=True, frozen=True)
class Branding:
    tournament_logo_key: str | None = None
    org_logo_key: str | None = None
    primary_color: str | None = None
    event_indicator: str | None = None


@dataclass(slots=True, frozen=True)
class Team:
    id: str
    name: str
    logo_key: str | None = None


@dataclass(slots=True, frozen=True)
class CardTypeConfig:
    type: str
    enabled: bool = True
    label: str = ""
    show_team_field: bool = False
    show_jersey_number: bool = False
    positions: tuple[str, ...] = ()
    logo_override_key: str | None = None


@dataclass(slots=True, frozen=True)
class TemplateDefaults:
    fallback: str
    by_card_type: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class TournamentConfig:
    id: str
    name: str = ""
    year: int | None = None
    branding: Branding = field(default_factory=Branding)
    teams: tuple[Team, ...] = ()
    card_types: tuple[CardTypeConfig, ...] = ()
    templates: tuple[TemplateDefinition, ...] | None = None
    default_templates: TemplateDefaults | None = None

    def find_team(self, team_id: str | None) -> Team | None:
        if not team_id:
            return None
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def card_type_config(self, card_type: str) -> CardTypeConfig | None:
        for entry in self.card_types:
            if entry.type == card_type:
                return entry
        return None


def _card_base_kwargs(data: dict[str, Any]) -> dict[str, Any]:
    from cardstamp.render_meta import render_meta_from_dict

    card_id = _opt_str(data.get("id"))
    tournament_id = _opt_str(data.get("tournamentId"))
    if not card_id:
        raise ValueError("card id is required")
    if not tournament_id:
        raise ValueError("card tournamentId is required")

    photo = data.get("photo")
    render_meta = data.get("renderMeta")
    return {
        "id": card_id,
        "tournament_id": tournament_id,
        "card_type": str(data.get("cardType") or "").strip(),
        "rarity": _opt_str(data.get("rarity")),
        "template_id": _opt_str(data.get("templateId")),
        "status": _opt_str(data.get("status")) or "draft",
        "photographer": _opt_str(data.get("photographer")),
        "photo": CardPhoto.from_dict(photo) if isinstance(photo, dict) else None,
        "render_key": _opt_str(data.get("renderKey")),
        "render_meta": render_meta_from_dict(render_meta) if isinstance(render_meta, dict) else None,
        "created_at": _opt_str(data.get("createdAt")),
        "updated_at": _opt_str(data.get("updatedAt")),
    }


def _person_kwargs(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "first_name": _opt_str(data.get("firstName")),
        "last_name": _opt_str(data.get("lastName")),
        "team_id": _opt_str(data.get("teamId")),
        "team_name": _opt_str(data.get("teamName")),
        "position": _opt_str(data.get("position")),
        "jersey_number": _opt_str(data.get("jerseyNumber")),
    }


def card_from_dict(data: dict[str, Any]) -> Card:
    """Build the card variant selected by the ``cardType`` tag."""
    base = _card_base_kwargs(data)
    card_type = base["card_type"]
    if card_type in RARE_CARD_TYPES:
        extra: dict[str, Any] = {
            "title": _opt_str(data.get("title")),
            "caption": _opt_str(data.get("caption")),
        }
        if card_type == "super-rare":
            extra.update(_person_kwargs(data))
        return RareCard(**base, **extra)
    if card_type in STANDARD_CARD_TYPES:
        return StandardCard(**base, **_person_kwargs(data))
    raise ValueError(f"unknown card type: {card_type!r}")


def card_to_dict(card: Card) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": card.id,
        "tournamentId": card.tournament_id,
        "cardType": card.card_type,
        "status": card.status,
    }
    optional = {
        "rarity": card.rarity,
        "templateId": card.template_id,
        "photographer": card.photographer,
        "renderKey": card.render_key,
        "createdAt": card.created_at,
        "updatedAt": card.updated_at,
        "firstName": card.first_name,
        "lastName": card.last_name,
        "teamId": card.team_id,
        "teamName": card.team_name,
        "position": card.position,
        "jerseyNumber": card.jersey_number,
    }
    if isinstance(card, RareCard):
        optional["title"] = card.title
        optional["caption"] = card.caption
    payload.update({key: value for key, value in optional.items() if value is not None})
    if card.photo is not None:
        payload["photo"] = card.photo.to_dict()
    if card.render_meta is not None:
        payload["renderMeta"] = card.render_meta.to_dict()
    return payload


def template_definition_from_dict(data: dict[str, Any]) -> TemplateDefinition:
    from cardstamp.template_loader import normalize_template_dict

    return normalize_template_dict(data)


def tournament_config_from_dict(data: dict[str, Any]) -> TournamentConfig:
    config_id = _opt_str(data.get("id"))
    if not config_id:
        raise ValueError("tournament config id is required")

    branding_raw = data.get("branding") or {}
    branding = Branding(
        tournament_logo_key=_opt_str(branding_raw.get("tournamentLogoKey")),
        org_logo_key=_opt_str(branding_raw.get("orgLogoKey")),
        primary_color=_opt_str(branding_raw.get("primaryColor")),
        event_indicator=_opt_str(branding_raw.get("eventIndicator")),
    )
    teams = tuple(
        Team(
            id=str(entry["id"]),
            name=str(entry.get("name") or entry["id"]),
            logo_key=_opt_str(entry.get("logoKey")),
        )
        for entry in data.get("teams") or []
    )
    card_types = tuple(
        CardTypeConfig(
            type=str(entry["type"]),
            enabled=bool(entry.get("enabled", True)),
            label=str(entry.get("label") or entry["type"]),
            show_team_field=bool(entry.get("showTeamField", False)),
            show_jersey_number=bool(entry.get("showJerseyNumber", False)),
            positions=tuple(str(p) for p in entry.get("positions") or []),
            logo_override_key=_opt_str(entry.get("logoOverrideKey")),
        )
        for entry in data.get("cardTypes") or []
    )

    templates_raw = data.get("templates")
    templates = None
    if isinstance(templates_raw, list):
        templates = tuple(template_definition_from_dict(entry) for entry in templates_raw if isinstance(entry, dict))

    defaults = None
    defaults_raw = data.get("defaultTemplates")
    if isinstance(defaults_raw, dict) and _opt_str(defaults_raw.get("fallback")):
        by_type_raw = defaults_raw.get("byCardType") or {}
        defaults = TemplateDefaults(
            fallback=str(defaults_raw["fallback"]).strip(),
            by_card_type={str(k): str(v) for k, v in by_type_raw.items() if _opt_str(v)},
        )

    year = data.get("year")
    return TournamentConfig(
        id=config_id,
        name=str(data.get("name") or ""),
        year=int(year) if year is not None else None,
        branding=branding,
        teams=teams,
        card_types=card_types,
        templates=templates,
        default_templates=defaults,
    )
