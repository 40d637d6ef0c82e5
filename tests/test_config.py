import json

import pytest
import yaml
from conftest import player_payload, tournament_payload

from cardstamp.config import (
    DEFAULT_CONFIG,
    asset_resolver,
    get_config_path,
    load_card,
    load_config,
    load_document,
    load_tournament_config,
    write_default_config,
)
from cardstamp.models import StandardCard


def test_load_config_defaults_when_missing(tmp_path) -> None:
    assert load_config(tmp_path / "config.yaml") == DEFAULT_CONFIG


def test_load_config_merges_user_values(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("font_path: /fonts/Bold.ttf\nrequest_timeout: 5\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg["font_path"] == "/fonts/Bold.ttf"
    assert cfg["request_timeout"] == 5
    assert cfg["name_template"] == DEFAULT_CONFIG["name_template"]


def test_write_default_config_does_not_overwrite(tmp_path) -> None:
    path = tmp_path / "nested" / "config.yaml"
    assert write_default_config(path) == path
    path.write_text("log_level: debug\n", encoding="utf-8")
    write_default_config(path)
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"log_level": "debug"}
    write_default_config(path, force=True)
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["log_level"] == "info"


def test_config_path_follows_xdg(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("CARDSTAMP_CONFIG_DIR", raising=False)
    monkeypatch.setattr("platform.system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert get_config_path() == tmp_path / "CardStamp" / "config.yaml"

    monkeypatch.setenv("CARDSTAMP_CONFIG_DIR", str(tmp_path / "override"))
    assert get_config_path() == tmp_path / "override" / "config.yaml"


def test_documents_load_from_json_and_yaml(tmp_path) -> None:
    card_path = tmp_path / "card.json"
    card_path.write_text(json.dumps(player_payload()), encoding="utf-8")
    config_path = tmp_path / "tournament.yaml"
    config_path.write_text(yaml.safe_dump(tournament_payload()), encoding="utf-8")

    assert isinstance(load_card(card_path), StandardCard)
    assert load_tournament_config(config_path).find_team("team-1").name == "Night Owls"


def test_load_document_requires_mapping(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_document(path)


def test_asset_resolver_for_directory_and_url(tmp_path) -> None:
    local = asset_resolver(tmp_path)
    assert local("logos/owls.png") == str(tmp_path / "logos" / "owls.png")
    assert local("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"

    remote = asset_resolver("https://cdn.example.com/assets/")
    assert remote("logos/night owls.png") == "https://cdn.example.com/assets/logos/night%20owls.png"
