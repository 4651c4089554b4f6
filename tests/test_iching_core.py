from itertools import product

import pytest

from config import LineValue
from hexagram_texts import HEXAGRAM_TEXTS
from iching_core import Hexagram, IChingCore, flip, to_binary, transform
from knowledge_base import KnowledgeBase


def test_to_binary_maps_yang_class_to_one():
    assert to_binary([9, 8, 7, 8, 9, 6]) == "101010"
    assert to_binary([7] * 6) == "111111"
    assert to_binary([6, 8, 6, 8, 6, 8]) == "000000"


def test_flip_is_its_own_inverse():
    assert flip(flip(LineValue.OLD_YIN)) == LineValue.OLD_YIN
    assert flip(flip(LineValue.OLD_YANG)) == LineValue.OLD_YANG
    assert flip(6) == LineValue.OLD_YANG


@pytest.mark.parametrize("value", [7, 8, 5])
def test_flip_rejects_static_or_unknown_values(value):
    with pytest.raises(ValueError):
        flip(value)


def test_hexagram_requires_six_lines():
    with pytest.raises(ValueError):
        Hexagram.from_lines([7, 8, 9, 6, 7])
    with pytest.raises(ValueError):
        Hexagram.from_lines([7] * 7)


def test_hexagram_rejects_unknown_line_values():
    with pytest.raises(ValueError):
        Hexagram.from_lines([7, 8, 9, 6, 7, 5])


def test_changing_set_recorded_at_generation():
    hexagram = Hexagram.from_lines([9, 8, 7, 8, 9, 6])
    assert hexagram.changing == (0, 4, 5)
    assert hexagram.moving_lines == [1, 5, 6]
    assert hexagram.ritual_sequence == "987896"


def test_transform_flips_only_changing_lines():
    future = transform(Hexagram.from_lines([9, 8, 7, 8, 9, 6]))

    assert future.lines == (6, 8, 7, 8, 6, 9)
    assert future.changing == ()
    assert future.is_transformed


def test_transform_rejects_static_value_at_changing_index():
    hexagram = Hexagram(lines=(7, 8, 7, 8, 7, 8), changing=(1,))
    with pytest.raises(ValueError):
        transform(hexagram)


def test_transformed_hexagram_cannot_be_transformed_again():
    future = transform(Hexagram.from_lines([9, 7, 7, 7, 7, 7]))
    with pytest.raises(ValueError):
        transform(future)


def test_transform_properties_hold_for_every_cast():
    for values in product(list(LineValue), repeat=6):
        primary = Hexagram.from_lines(values)
        future = transform(primary)

        assert len(primary.key) == 6
        assert set(primary.key) <= {"0", "1"}
        for i in range(6):
            if i in primary.changing:
                assert future.lines[i] == flip(primary.lines[i])
                assert future.key[i] != primary.key[i]
            else:
                assert future.lines[i] == primary.lines[i]
                assert future.key[i] == primary.key[i]


def test_calculate_future_hexagram(kb):
    core = IChingCore(kb)
    assert core.calculate_future_hexagram([9, 8, 7, 8, 9, 6]) == "001001"


def test_get_hexagram_name(kb):
    core = IChingCore(kb)
    assert core.get_hexagram_name("111111") == {
        "id": 1, "name": "Qian (The Creative)", "nature": "乾",
    }


def test_interpret_sequence_without_changing_lines(kb):
    reading = IChingCore(kb).interpret_sequence([7, 7, 7, 7, 7, 7])

    assert reading.primary_entry.number == 1
    assert reading.transformed is None
    assert reading.transformed_entry is None
    assert reading.interpretation.source == "primary"
    assert reading.interpretation.text == HEXAGRAM_TEXTS[1]["judgment"]


def test_interpret_sequence_with_changing_lines(kb):
    reading = IChingCore(kb).interpret_sequence([9, 8, 7, 8, 9, 6])

    assert reading.primary.key == "101010"
    assert reading.primary_entry.number == 63
    assert reading.transformed.key == "001001"
    assert reading.transformed_entry.number == 52
    # 三爻動取本卦卦辭
    assert reading.interpretation.text == HEXAGRAM_TEXTS[63]["judgment"]


@pytest.mark.parametrize(
    "sequence",
    [
        [6, 6, 6, 6, 8, 8],  # 四爻動
        [6, 6, 6, 6, 8, 6],  # 五爻動
        [6, 6, 6, 6, 6, 6],  # 六爻動
    ],
)
def test_missing_transformed_entry_falls_back_to_primary_judgment(kb, sequence):
    partial = KnowledgeBase([kb.lookup("000000")], script="simplified")
    reading = IChingCore(partial).interpret_sequence(sequence)

    assert reading.primary_entry.number == 2
    # 之卦仍保留佔位條目供顯示
    assert reading.transformed_entry.is_placeholder
    assert reading.interpretation.source == "primary"
    assert reading.interpretation.text == HEXAGRAM_TEXTS[2]["judgment"]
    assert reading.interpretation.title == "本卦 · 坤为地"
