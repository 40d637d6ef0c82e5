from __future__ import annotations

import json
from dataclasses import dataclass, replace
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from cardstamp.constants import OVERLAY_PLACEMENTS
from cardstamp.models import (
    FLAG_FIELDS,
    THEME_FIELDS,
    Card,
    TemplateDefinition,
    TemplateFlags,
    TemplateSnapshot,
    TemplateTheme,
    TournamentConfig,
)

DEFAULT_TEMPLATE_ID = "classic"
FALLBACK_TEMPLATE_ID = "usqc26"

BASE_THEME = TemplateTheme(
    gradient_start="rgba(15, 23, 42, 0)",
    gradient_end="rgba(15, 23, 42, 0.85)",
    border="rgba(255, 255, 255, 0.1)",
    accent="rgba(255, 255, 255, 0.5)",
    label="#ffffff",
    name_color="#ffffff",
    meta="#ffffff",
    watermark="rgba(255, 255, 255, 0.12)",
)

DEFAULT_TEMPLATE_FLAGS = TemplateFlags(
    show_gradient=False,
    show_borders=False,
    show_watermark_jersey=False,
)

_THEME_KEYS = {wire: attr for attr, wire in THEME_FIELDS} | {attr: attr for attr, _ in THEME_FIELDS}
_FLAG_KEYS = {wire: attr for attr, wire in FLAG_FIELDS} | {attr: attr for attr, _ in FLAG_FIELDS}


@dataclass(slots=True, frozen=True)
class ResolvedTemplate:
    template_id: str
    snapshot: TemplateSnapshot

    def to_dict(self) -> dict[str, Any]:
        return {"templateId": self.template_id, "templateSnapshot": self.snapshot.to_dict()}


def list_builtin_templates() -> list[str]:
    files = resources.files("cardstamp.templates")
    names = []
    for item in files.iterdir():
        if item.name.endswith((".yaml", ".yml", ".json")):
            names.append(Path(item.name).stem)
    return sorted(set(names))


def _parse_text(text: str, suffix: str) -> Any:
    if suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


@lru_cache(maxsize=None)
def load_builtin_template(name: str) -> TemplateDefinition:
    pkg = resources.files("cardstamp.templates")
    for suffix in (".yaml", ".yml", ".json"):
        candidate = pkg / f"{name}{suffix}"
        if candidate.is_file():
            data = _parse_text(candidate.read_text(encoding="utf-8"), suffix)
            if isinstance(data, dict):
                return normalize_template_dict(data)
    raise FileNotFoundError(f"built-in template not found: {name}")


def normalize_template_dict(data: dict[str, Any], fallback_id: str = "custom") -> TemplateDefinition:
    template_id = str(data.get("id") or fallback_id).strip() or fallback_id
    label = str(data.get("label") or template_id)

    theme: dict[str, str] = {}
    for key, value in (data.get("theme") or {}).items():
        attr = _THEME_KEYS.get(str(key))
        if attr and isinstance(value, str) and value.strip():
            theme[attr] = value.strip()

    flags: dict[str, bool] = {}
    for key, value in (data.get("flags") or {}).items():
        attr = _FLAG_KEYS.get(str(key))
        if attr and isinstance(value, bool):
            flags[attr] = value

    overlay_key = data.get("overlayKey")
    overlay_key = str(overlay_key).strip() if overlay_key else None

    placement = str(data.get("overlayPlacement") or "belowText")
    if placement not in OVERLAY_PLACEMENTS:
        placement = "belowText"

    return TemplateDefinition(
        id=template_id,
        label=label,
        overlay_key=overlay_key or None,
        theme=theme,
        flags=flags,
        overlay_placement=placement,
    )


def merge_theme(overrides: dict[str, str] | None) -> TemplateTheme:
    if not overrides:
        return BASE_THEME
    return replace(BASE_THEME, **{k: v for k, v in overrides.items() if k in _THEME_KEYS.values()})


def merge_flags(overrides: dict[str, bool] | None) -> TemplateFlags:
    if not overrides:
        return DEFAULT_TEMPLATE_FLAGS
    return replace(DEFAULT_TEMPLATE_FLAGS, **{k: v for k, v in overrides.items() if k in _FLAG_KEYS.values()})


def _clean_id(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def resolve_template_id(
    explicit_id: str | None,
    card_stored_id: str | None,
    card_type: str | None,
    config: TournamentConfig | None,
) -> str:
    direct = _clean_id(explicit_id) or _clean_id(card_stored_id)
    if direct:
        return direct

    defaults = config.default_templates if config is not None else None
    if defaults is not None:
        by_type = defaults.by_card_type.get(card_type or "")
        if by_type:
            return by_type
        if defaults.fallback:
            return defaults.fallback

    return DEFAULT_TEMPLATE_ID


def find_template(config: TournamentConfig | None, template_id: str | None) -> TemplateDefinition | None:
    if config is None or not config.templates or not template_id:
        return None
    for template in config.templates:
        if template.id == template_id:
            return template
    return None


def _fallback_template(template_id: str) -> TemplateDefinition:
    if template_id in list_builtin_templates():
        return load_builtin_template(template_id)
    return load_builtin_template(FALLBACK_TEMPLATE_ID)


def resolve_template_snapshot(
    card: Card,
    config: TournamentConfig,
    template_id: str | None = None,
) -> ResolvedTemplate:
    effective_id = resolve_template_id(template_id, card.template_id, card.card_type, config)
    template = find_template(config, effective_id) or _fallback_template(effective_id)

    snapshot = TemplateSnapshot(
        theme=merge_theme(template.theme),
        flags=merge_flags(template.flags),
        overlay_placement=template.overlay_placement or "belowText",
        overlay_key=template.overlay_key,
    )
    return ResolvedTemplate(template_id=effective_id, snapshot=snapshot)
