"""Output file names for rendered cards."""
from __future__ import annotations

import re
from pathlib import PurePath

_UNSAFE = re.compile(r'[<>:"/\\|?*\x00-\x1F]|\s+')


def sanitize_token(value: str | None, fallback: str = "NA") -> str:
    cleaned = _UNSAFE.sub("_", (value or "").strip()).strip(" ._")
    return cleaned or fallback


def build_output_name(
    name_template: str,
    card_id: str,
    template_id: str,
    extension: str,
    card_type: str | None = None,
    trimmed: bool = False,
) -> str:
    """Fill ``name_template`` with card tokens, e.g. ``{card_id}__{template}.{ext}``."""
    ext = extension.lower().lstrip(".")
    tokens = {
        "card_id": sanitize_token(card_id, fallback="card"),
        "template": sanitize_token(template_id, fallback="template"),
        "card_type": sanitize_token(card_type, fallback="card"),
        "variant": "trim" if trimmed else "full",
        "ext": ext,
    }
    try:
        name = name_template.format_map(tokens)
    except KeyError as exc:
        raise ValueError(f"name template contains unknown key: {exc.args[0]}") from exc

    # Tokens are already clean; only literal template text can still carry separators.
    name = PurePath(name.replace("\\", "/")).name.strip(" .") or f"{tokens['card_id']}.{ext}"
    return name if PurePath(name).suffix else f"{name}.{ext}"
