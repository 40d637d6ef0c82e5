from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from cardstamp.models import card_from_dict, tournament_config_from_dict

PHOTO_COLOR = (32, 160, 64)


def tournament_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": "usqc26",
        "name": "US Quadball Cup",
        "year": 2026,
        "branding": {"tournamentLogoKey": "logos/tournament.png"},
        "teams": [{"id": "team-1", "name": "Night Owls", "logoKey": "logos/owls.png"}],
        "cardTypes": [
            {"type": "player", "label": "Player", "showTeamField": True, "showJerseyNumber": True},
            {"type": "media", "label": "Media", "showTeamField": False, "showJerseyNumber": False},
        ],
        "templates": [
            {"id": "classic", "label": "Classic"},
            {"id": "noir", "label": "Noir", "flags": {"showGradient": True}, "theme": {"border": "#111111"}},
        ],
        "defaultTemplates": {"fallback": "classic", "byCardType": {"media": "noir"}},
    }
    payload.update(overrides)
    return payload


def player_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": "card-1",
        "tournamentId": "usqc26",
        "cardType": "player",
        "firstName": "Jordan",
        "lastName": "Lopez",
        "teamId": "team-1",
        "position": "Keeper",
        "jerseyNumber": "12",
        "photographer": "Sam Rivera",
        "photo": {"originalKey": "photos/card-1.jpg", "crop": {"x": 0, "y": 0, "w": 1, "h": 1, "rotateDeg": 0}},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def config():
    return tournament_config_from_dict(tournament_payload())


@pytest.fixture
def player_card():
    return card_from_dict(player_payload())


@pytest.fixture
def photo_path(tmp_path: Path) -> Path:
    path = tmp_path / "photo.png"
    Image.new("RGB", (400, 300), PHOTO_COLOR).save(path)
    return path


@pytest.fixture
def resolver(tmp_path: Path):
    # Every asset key points at a file that does not exist: optional assets are skipped.
    def resolve(key: str) -> str:
        return str(tmp_path / "missing" / key)

    return resolve
