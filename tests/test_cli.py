import json

import pytest
from conftest import player_payload, tournament_payload
from PIL import Image
from typer.testing import CliRunner

from cardstamp.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.delenv("CARDSTAMP_CONFIG_DIR", raising=False)
    monkeypatch.setattr("platform.system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))


@pytest.fixture
def documents(tmp_path):
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps(player_payload()), encoding="utf-8")
    config_path = tmp_path / "tournament.json"
    config_path.write_text(json.dumps(tournament_payload()), encoding="utf-8")
    return card_path, config_path


def test_templates_lists_builtins() -> None:
    result = runner.invoke(app, ["templates"])
    assert result.exit_code == 0
    assert "classic\tClassic" in result.stdout
    assert "noir\tNoir" in result.stdout


def test_guides_prints_percentages() -> None:
    result = runner.invoke(app, ["guides", "--relative-to", "trim"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["safe"]["left"] == 5.0


def test_snapshot_prints_resolved_template(documents) -> None:
    card_path, config_path = documents
    result = runner.invoke(app, ["snapshot", str(card_path), "--config", str(config_path), "--template", "noir"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["templateId"] == "noir"
    assert payload["templateSnapshot"]["flags"]["showGradient"] is True


def test_render_writes_png_and_meta(documents, photo_path, tmp_path) -> None:
    card_path, config_path = documents
    out_dir = tmp_path / "out"
    result = runner.invoke(
        app,
        [
            "render",
            str(card_path),
            "--config",
            str(config_path),
            "--photo",
            str(photo_path),
            "--trim",
            "--out",
            str(out_dir),
            "--asset-root",
            str(tmp_path / "assets"),
        ],
    )
    assert result.exit_code == 0, result.output

    output = out_dir / "card-1__classic.png"
    with Image.open(output) as image:
        assert image.size == (750, 1050)
    meta = json.loads((out_dir / "card-1__classic.json").read_text(encoding="utf-8"))
    assert meta["key"] == "card-1__classic.png"
    assert meta["templateId"] == "classic"
    assert meta["renderedAt"].endswith("Z")


def test_render_reports_missing_photo(documents, tmp_path) -> None:
    card_path, config_path = documents
    result = runner.invoke(
        app,
        ["render", str(card_path), "--config", str(config_path), "--photo", str(tmp_path / "none.jpg"), "--no-meta"],
    )
    assert result.exit_code == 1


def test_init_config_writes_file(tmp_path) -> None:
    result = runner.invoke(app, ["init-config"])
    assert result.exit_code == 0
    assert (tmp_path / "xdg" / "CardStamp" / "config.yaml").exists()


def test_crop_writes_cropped_png(documents, photo_path, tmp_path) -> None:
    card_path, _ = documents
    out_dir = tmp_path / "crops"
    result = runner.invoke(app, ["crop", str(card_path), "--photo", str(photo_path), "--out", str(out_dir)])
    assert result.exit_code == 0, result.output
    with Image.open(out_dir / "card-1__crop.png") as image:
        assert image.size == (400, 300)
