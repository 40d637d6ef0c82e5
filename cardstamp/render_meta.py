"""Render metadata persisted next to a rendered card image.

A RenderMeta freezes the template snapshot that was actually drawn. Once it is
stored on a card it is the historical record of the render and must be read
back verbatim, never recomputed from the (possibly edited) template catalog.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from cardstamp.constants import OVERLAY_PLACEMENTS
from cardstamp.models import (
    FLAG_FIELDS,
    THEME_FIELDS,
    Card,
    RenderMeta,
    TemplateFlags,
    TemplateSnapshot,
    TemplateTheme,
    TournamentConfig,
)
from cardstamp.template_loader import ResolvedTemplate, resolve_template_snapshot


def _normalize_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def utc_timestamp(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_render_meta(key: str, resolved: ResolvedTemplate, rendered_at: datetime | None = None) -> RenderMeta:
    """Attach a storage key and timestamp to a resolved template."""
    return RenderMeta(
        key=key,
        template_id=resolved.template_id,
        rendered_at=utc_timestamp(rendered_at),
        template_snapshot=resolved.snapshot,
    )


def _parse_snapshot(value: Any) -> TemplateSnapshot:
    if not isinstance(value, dict):
        raise ValueError("renderMeta.templateSnapshot is required")

    overlay_key = _normalize_string(value.get("overlayKey"))

    theme_source = value.get("theme")
    if not isinstance(theme_source, dict):
        raise ValueError("renderMeta.templateSnapshot.theme is required")
    theme: dict[str, str] = {}
    for attr, wire in THEME_FIELDS:
        raw = _normalize_string(theme_source.get(wire))
        if not raw:
            raise ValueError(f"renderMeta.templateSnapshot.theme.{wire} is required")
        theme[attr] = raw

    flags_source = value.get("flags")
    if not isinstance(flags_source, dict):
        raise ValueError("renderMeta.templateSnapshot.flags is required")
    flags: dict[str, bool] = {}
    for attr, wire in FLAG_FIELDS:
        raw_flag = flags_source.get(wire)
        if not isinstance(raw_flag, bool):
            raise ValueError(f"renderMeta.templateSnapshot.flags.{wire} must be a boolean")
        flags[attr] = raw_flag

    placement = _normalize_string(value.get("overlayPlacement"))
    if placement not in OVERLAY_PLACEMENTS:
        raise ValueError("renderMeta.templateSnapshot.overlayPlacement is invalid")

    return TemplateSnapshot(
        theme=TemplateTheme(**theme),
        flags=TemplateFlags(**flags),
        overlay_placement=placement,
        overlay_key=overlay_key,
    )


def parse_render_meta(value: Any, render_key: str) -> RenderMeta:
    """Validate an incoming render metadata payload for ``render_key``."""
    if not isinstance(value, dict):
        raise ValueError("renderMeta must be an object")

    template_id = _normalize_string(value.get("templateId"))
    if not template_id:
        raise ValueError("renderMeta.templateId is required")

    rendered_at = _normalize_string(value.get("renderedAt"))
    if not rendered_at:
        raise ValueError("renderMeta.renderedAt is required")

    key = _normalize_string(value.get("key")) or render_key
    if key != render_key:
        raise ValueError("renderMeta.key must match renderKey")

    return RenderMeta(
        key=key,
        template_id=template_id,
        rendered_at=rendered_at,
        template_snapshot=_parse_snapshot(value.get("templateSnapshot")),
    )


def render_meta_from_dict(value: dict[str, Any]) -> RenderMeta:
    key = _normalize_string(value.get("key"))
    if not key:
        raise ValueError("renderMeta.key is required")
    return parse_render_meta(value, key)


def snapshot_for_card(card: Card, config: TournamentConfig) -> tuple[str, TemplateSnapshot]:
    """Return the template a card was rendered with.

    Cards that already carry render metadata keep their stored snapshot; only
    never-rendered cards are resolved against the current catalog.
    """
    if card.render_meta is not None:
        return card.render_meta.template_id, card.render_meta.template_snapshot

    resolved = resolve_template_snapshot(card, config)
    return resolved.template_id, resolved.snapshot
