import json
from datetime import datetime

import pandas as pd
import pytest

from divination import DivinationService, results_to_frame
from hexagram_texts import HEXAGRAM_TEXTS
from line_generator import LineGenerator


@pytest.fixture
def service(kb):
    return DivinationService(generator=LineGenerator(seed=42), knowledge_base=kb)


def test_liuyao_cast_produces_complete_result(service):
    result = service.perform("liuyao", question="今年的事業運如何？")

    primary = result.reading.primary
    assert len(primary.lines) == 6
    assert result.method == "liuyao"
    assert result.question == "今年的事業運如何？"
    assert result.reading.interpretation.importance == "primary"
    if primary.changing:
        assert result.reading.transformed is not None
        assert result.reading.transformed_entry is not None
    else:
        assert result.reading.transformed is None


def test_meihua_cast_is_deterministic(service):
    result = service.perform("meihua", when=datetime(2024, 3, 15, 10))
    reading = result.reading

    assert reading.primary.key == "010100"
    assert reading.primary.changing == (2,)
    assert reading.primary_entry.number == 40
    assert reading.transformed.key == "011100"
    assert reading.transformed_entry.number == 32
    assert reading.interpretation.source == "primary"
    assert reading.interpretation.position == "三六"
    assert reading.interpretation.text == HEXAGRAM_TEXTS[40]["lines"][2]


def test_unknown_method_rejected(service):
    with pytest.raises(ValueError):
        service.perform("tarot")


@pytest.mark.parametrize("lines, source, text", [
    ([6, 6, 6, 6, 8, 8], "transformed", HEXAGRAM_TEXTS[34]["judgment"]),
    ([9, 9, 9, 9, 7, 9], "transformed", HEXAGRAM_TEXTS[8]["lines"][4]),
    ([9, 9, 9, 9, 9, 9], "transformed", HEXAGRAM_TEXTS[2]["judgment"]),
    ([7, 9, 7, 7, 6, 7], "primary", None),
])
def test_interpret_supplied_lines(service, lines, source, text):
    result = service.interpret(lines)
    interpretation = result.reading.interpretation

    assert interpretation.source == source
    if text is not None:
        assert interpretation.text == text
    else:
        assert interpretation.text == result.reading.primary_entry.lines[1]


def test_interpret_rejects_incomplete_lines(service):
    with pytest.raises(ValueError):
        service.interpret([7, 8, 9])


def test_to_dict_is_json_serialisable(service):
    result = service.interpret([9, 8, 7, 8, 9, 6], question="?")
    record = result.to_dict()

    assert record["original_hexagram"] == "101010"
    assert record["transformed_hexagram"] == "001001"
    assert record["ritual_sequence"] == [9, 8, 7, 8, 9, 6]
    assert record["changing_line_indexes"] == [0, 4, 5]
    assert record["ben_gua"]["number"] == 63
    assert record["bian_gua"]["number"] == 52
    assert record["interpretation"]["source"] == "primary"
    json.dumps(record, ensure_ascii=False)


def test_to_dict_without_changing_lines(service):
    record = service.interpret([7, 8, 7, 8, 7, 8]).to_dict()
    assert record["transformed_hexagram"] is None
    assert record["bian_gua"] is None


def test_results_to_frame(service):
    results = [
        service.interpret([9, 8, 7, 8, 9, 6]),
        service.interpret([7, 7, 7, 7, 7, 7]),
    ]
    frame = results_to_frame(results)

    assert list(frame["Ritual_Sequence"]) == ["987896", "777777"]
    assert frame.loc[0, "Future_Binary"] == "001001"
    assert frame.loc[0, "Moving_Lines"] == [1, 5, 6]
    assert pd.isna(frame.loc[1, "Future_Binary"])
    assert list(frame["Source"]) == ["primary", "primary"]


def test_results_to_frame_empty():
    frame = results_to_frame([])
    assert frame.empty
    assert "Hexagram_Binary" in frame.columns
