import logging

import pytest

from hexagram_texts import HEXAGRAM_TEXTS
from interpretation import get_position_name, select_interpretation
from knowledge_base import KnowledgeEntry


def make_entry(tag, number=1):
    return KnowledgeEntry(
        key="111111",
        number=number,
        name=f"{tag}卦",
        english_name=tag,
        nature=tag,
        judgment=f"{tag}-judgment",
        lines=tuple(f"{tag}-L{i}" for i in range(6)),
    )


PRIMARY = make_entry("P")
TRANSFORMED = make_entry("T", number=2)


@pytest.mark.parametrize("index, value, expected", [
    (0, 9, "初九"),
    (1, 6, "二六"),
    (2, 7, "三九"),
    (5, 8, "上六"),
    (3, None, "四九"),
])
def test_get_position_name(index, value, expected):
    assert get_position_name(index, value) == expected


def test_no_changing_lines_uses_primary_judgment():
    result = select_interpretation(PRIMARY, None, [], [7] * 6)

    assert result.source == "primary"
    assert result.text == "P-judgment"
    assert result.position is None
    assert result.importance == "primary"


@pytest.mark.parametrize("value, suffix", [(9, "九"), (6, "六")])
def test_one_changing_line_uses_that_line(value, suffix):
    lines = [7, 7, value, 8, 8, 8]
    result = select_interpretation(PRIMARY, TRANSFORMED, [2], lines)

    assert result.source == "primary"
    assert result.text == "P-L2"
    assert result.position == "三" + suffix
    assert result.title == f"本卦 · P卦 · 三{suffix}爻辞"


def test_two_changing_lines_use_the_lower_one():
    lines = [7, 9, 7, 7, 6, 7]
    result = select_interpretation(PRIMARY, TRANSFORMED, [4, 1], lines)

    assert result.source == "primary"
    assert result.text == "P-L1"
    assert result.position == "二九"


def test_three_changing_lines_use_primary_judgment():
    result = select_interpretation(PRIMARY, TRANSFORMED, [0, 2, 4], [9, 7, 6, 7, 9, 7])
    assert result.source == "primary"
    assert result.text == "P-judgment"


def test_four_changing_lines_use_transformed_judgment():
    result = select_interpretation(PRIMARY, TRANSFORMED, [0, 1, 2, 3], [9, 9, 6, 6, 7, 8])

    assert result.source == "transformed"
    assert result.text == "T-judgment"
    assert result.title == "之卦 · T卦"


def test_five_changing_lines_use_static_line_of_transformed():
    lines = [9, 9, 6, 6, 8, 9]
    result = select_interpretation(PRIMARY, TRANSFORMED, [0, 1, 2, 3, 5], lines)

    assert result.source == "transformed"
    assert result.text == "T-L4"
    assert result.position == "五六"


def test_six_changing_lines_use_transformed_judgment():
    result = select_interpretation(PRIMARY, TRANSFORMED, range(6), [9] * 6)
    assert result.source == "transformed"
    assert result.text == "T-judgment"


@pytest.mark.parametrize("changing", [
    [0, 1, 2, 3],
    [0, 1, 2, 3, 5],
    [0, 1, 2, 3, 4, 5],
])
def test_missing_transformed_entry_falls_back_to_primary_judgment(changing):
    result = select_interpretation(PRIMARY, None, changing, [9] * 6)

    assert result.source == "primary"
    assert result.text == "P-judgment"


def test_missing_primary_resolves_with_diagnostic_title(caplog):
    with caplog.at_level(logging.WARNING, logger="interpretation"):
        result = select_interpretation(None, TRANSFORMED, [0], [9] * 6)

    assert result.source == "primary"
    assert "動爻異常" in result.title
    assert result.text
    assert caplog.records


def test_out_of_range_index_resolves_with_diagnostic_title():
    result = select_interpretation(PRIMARY, TRANSFORMED, [7], [9] * 6)

    assert result.source == "primary"
    assert result.text == "P-judgment"
    assert "動爻異常" in result.title


def test_duplicate_indexes_count_once():
    result = select_interpretation(PRIMARY, TRANSFORMED, [3, 3], [7, 7, 7, 9, 7, 7])
    assert result.text == "P-L3"


def test_default_position_labels_without_raw_lines():
    assert select_interpretation(PRIMARY, TRANSFORMED, [1], None).position == "二九"
    assert select_interpretation(PRIMARY, TRANSFORMED, [0, 1, 2, 3, 4], None).position == "上九"


def test_count_one_on_real_text(kb):
    lines = [7, 7, 9, 7, 7, 7]
    primary = kb.lookup("111111")
    transformed = kb.lookup("110111")

    result = select_interpretation(primary, transformed, [2], lines)

    assert result.text == HEXAGRAM_TEXTS[1]["lines"][2]
    assert result.position == "三九"
