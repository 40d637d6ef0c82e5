import pytest

from cardstamp.geometry import (
    CARD_HEIGHT,
    CARD_WIDTH,
    GUIDE_PERCENTAGES,
    SAFE_BOX,
    TRIM_BOX,
    Box,
    guide_percentages,
    inset_box,
)


def test_trim_box_is_750_by_1050() -> None:
    assert (CARD_WIDTH, CARD_HEIGHT) == (825, 1125)
    assert TRIM_BOX == Box(37.5, 37.5, 750.0, 1050.0)
    assert TRIM_BOX.pixel_size == (750, 1050)
    assert SAFE_BOX == Box(75.0, 75.0, 675.0, 975.0)


def test_guide_percentages_relative_to_canvas() -> None:
    trim = GUIDE_PERCENTAGES["trim"]
    assert trim.left == trim.right == 4.545
    assert trim.top == trim.bottom == 3.333

    safe = GUIDE_PERCENTAGES["safe"]
    assert safe.left == 9.091
    assert safe.top == 6.667


def test_guide_percentages_relative_to_trim() -> None:
    safe = guide_percentages(SAFE_BOX, relative_to="trim")
    assert safe.left == 5.0
    assert safe.top == 3.571
    assert guide_percentages(TRIM_BOX, relative_to="trim").to_dict() == {
        "left": 0.0,
        "top": 0.0,
        "right": 0.0,
        "bottom": 0.0,
    }


def test_guide_percentages_rejects_unknown_reference() -> None:
    with pytest.raises(ValueError):
        guide_percentages(SAFE_BOX, relative_to="bleed")


def test_inset_box_nests() -> None:
    inner = inset_box(37.5, TRIM_BOX)
    assert inner == SAFE_BOX
    assert inner.center == (412.5, 562.5)
