from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path

import typer

from cardstamp.config import (
    asset_resolver,
    load_card,
    load_config,
    load_tournament_config,
    write_default_config,
)
from cardstamp.errors import CardRenderError
from cardstamp.geometry import GUIDE_PERCENTAGES, SAFE_BOX, TRIM_BOX, guide_percentages
from cardstamp.naming import build_output_name
from cardstamp.render.pipeline import RenderOptions, render_crop, render_full_card, render_trimmed_preview
from cardstamp.render_meta import build_render_meta
from cardstamp.template_loader import list_builtin_templates, load_builtin_template, resolve_template_snapshot

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Trading-card image renderer.")
LOGGER = logging.getLogger("cardstamp")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _optional_path(value: object) -> Path | None:
    return Path(str(value)).expanduser() if value else None


def _load_inputs(card_path: Path, config_path: Path):
    try:
        card = load_card(card_path)
        config = load_tournament_config(config_path)
    except (OSError, ValueError, KeyError) as exc:
        typer.secho(f"Input load failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)
    return card, config


@app.command()
def render(
    card_path: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
    config_path: Path = typer.Option(..., "--config", exists=True, resolve_path=True, dir_okay=False, help="Tournament config (JSON or YAML)."),
    photo: str = typer.Option(..., "--photo", help="Photo URL, file:// URL or local path."),
    template: str | None = typer.Option(None, "--template", help="Template id override."),
    trim: bool = typer.Option(False, "--trim", help="Render the trimmed preview instead of the full-bleed card."),
    out: Path | None = typer.Option(None, "--out", help="Output directory."),
    name_template: str | None = typer.Option(None, "--name", help='Output filename template, e.g. "{card_id}__{template}.{ext}"'),
    asset_root: str | None = typer.Option(None, "--asset-root", help="Directory or URL prefix that asset keys resolve against."),
    write_meta: bool = typer.Option(True, "--meta/--no-meta", help="Write render metadata JSON beside the image."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Render one card to PNG."""
    cfg = load_config()
    _setup_logging(log_level or str(cfg.get("log_level", "info")))
    card, config = _load_inputs(card_path, config_path)

    resolved = resolve_template_snapshot(card, config, template)
    options = RenderOptions(
        font_path=_optional_path(cfg.get("font_path")),
        italic_font_path=_optional_path(cfg.get("italic_font_path")),
        camera_icon_url=cfg.get("camera_icon") or None,
        request_timeout=float(cfg.get("request_timeout") or 30),
    )
    resolve = asset_resolver(asset_root or str(cfg.get("asset_root") or "."))
    renderer = render_trimmed_preview if trim else render_full_card

    t0 = time.perf_counter()
    try:
        png = asyncio.run(renderer(card, config, photo, resolve, template, options=options))
    except CardRenderError as exc:
        typer.secho(f"Render failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    out_dir = out or card_path.parent / "output"
    out_dir.mkdir(parents=True, exist_ok=True)
    name_tmpl = name_template or str(cfg.get("name_template", "{card_id}__{template}.{ext}"))
    output_file = out_dir / build_output_name(
        name_tmpl,
        card.id,
        resolved.template_id,
        extension="png",
        card_type=card.card_type,
        trimmed=trim,
    )
    output_file.write_bytes(png)
    LOGGER.info("OK   %s -> %s  (%.2fs)", card.id, output_file.name, time.perf_counter() - t0)

    if write_meta:
        meta = build_render_meta(output_file.name, resolved)
        meta_file = output_file.with_suffix(".json")
        meta_file.write_text(json.dumps(meta.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        LOGGER.info("META %s", meta_file.name)
    typer.echo(str(output_file))


@app.command()
def crop(
    card_path: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
    photo: str = typer.Option(..., "--photo", help="Photo URL, file:// URL or local path."),
    out: Path | None = typer.Option(None, "--out", help="Output directory."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Render the card's photo crop on its own, at source resolution."""
    cfg = load_config()
    _setup_logging(log_level or str(cfg.get("log_level", "info")))
    try:
        card = load_card(card_path)
    except (OSError, ValueError, KeyError) as exc:
        typer.secho(f"Input load failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    try:
        png = asyncio.run(render_crop(photo, card.crop, timeout=float(cfg.get("request_timeout") or 30)))
    except CardRenderError as exc:
        typer.secho(f"Crop failed: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(1)

    out_dir = out or card_path.parent / "output"
    out_dir.mkdir(parents=True, exist_ok=True)
    output_file = out_dir / build_output_name("{card_id}__crop.{ext}", card.id, "crop", extension="png")
    output_file.write_bytes(png)
    typer.echo(str(output_file))


@app.command()
def snapshot(
    card_path: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
    config_path: Path = typer.Option(..., "--config", exists=True, resolve_path=True, dir_okay=False),
    template: str | None = typer.Option(None, "--template", help="Template id override."),
) -> None:
    """Print the template snapshot a render of this card would freeze."""
    card, config = _load_inputs(card_path, config_path)
    resolved = resolve_template_snapshot(card, config, template)
    typer.echo(json.dumps(resolved.to_dict(), ensure_ascii=False, indent=2))


@app.command()
def guides(
    relative_to: str = typer.Option("canvas", "--relative-to", help="canvas|trim"),
) -> None:
    """Print trim and safe guide insets as percentages."""
    if relative_to == "canvas":
        payload = {name: insets.to_dict() for name, insets in GUIDE_PERCENTAGES.items()}
    else:
        try:
            payload = {
                "trim": guide_percentages(TRIM_BOX, relative_to).to_dict(),
                "safe": guide_percentages(SAFE_BOX, relative_to).to_dict(),
            }
        except ValueError as exc:
            typer.secho(str(exc), err=True, fg=typer.colors.RED)
            raise typer.Exit(1)
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def templates() -> None:
    """List the built-in templates."""
    for name in list_builtin_templates():
        definition = load_builtin_template(name)
        typer.echo(f"{definition.id}\t{definition.label}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
