import pytest

from cardstamp.naming import build_output_name, sanitize_token


def test_build_output_name_with_tokens() -> None:
    name = build_output_name(
        "{card_id}__{template}.{ext}",
        "card 1",
        "noir",
        extension=".PNG",
    )
    assert name == "card_1__noir.png"


def test_build_output_name_adds_missing_extension() -> None:
    name = build_output_name("{card_type}-{card_id}-{variant}", "c/7", "classic", "png", card_type="rare", trimmed=True)
    assert name == "rare-c_7-trim.png"


def test_build_output_name_rejects_unknown_key() -> None:
    with pytest.raises(ValueError, match="unknown key: stem"):
        build_output_name("{stem}.{ext}", "card-1", "classic", "png")


def test_sanitize_token_fallback() -> None:
    assert sanitize_token("   ") == "NA"
    assert sanitize_token('a:b*c') == "a_b_c"
