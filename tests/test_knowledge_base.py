import json
import logging

import pytest

import knowledge_base
from config import HEXAGRAM_MAP, Settings
from hexagram_texts import HEXAGRAM_TEXTS
from interpretation import select_interpretation
from knowledge_base import KnowledgeBase, get_knowledge_base


def test_builtin_table_is_complete(kb):
    assert len(kb) == 64
    report = kb.validate()
    assert report.is_valid
    assert report.total == 64


def test_lookup_by_key(kb):
    entry = kb.lookup("111000")
    assert entry.number == 11
    assert entry.name == "地天泰"
    assert entry.nature == "泰"
    assert entry.judgment == HEXAGRAM_TEXTS[11]["judgment"]
    assert len(entry.lines) == 6


def test_line_texts_agree_with_key(kb):
    # 爻辭開頭的九／六須與卦碼的陰陽一致
    for key in HEXAGRAM_MAP:
        entry = kb.lookup(key)
        for bit, text in zip(key, entry.lines):
            label = text[:2]
            assert ("九" in label) == (bit == "1"), (key, text)


def test_by_number(kb):
    assert kb.by_number(51).key == "100100"
    assert kb.by_number(0) is None
    assert kb.by_number(65) is None


def test_names_are_ordered_by_number(kb):
    names = kb.names()
    assert len(names) == 64
    assert names[0] == "乾为天"
    assert names[-1] == "火水未济"


def test_search(kb):
    assert [entry.number for entry in kb.search("既济")] == [63]
    assert 1 in [entry.number for entry in kb.search("creative")]
    assert kb.search("   ") == []


def test_trigrams(kb):
    lower, upper = kb.trigrams("100010")
    assert lower["nature"] == "震"
    assert upper["nature"] == "坎"
    with pytest.raises(ValueError):
        kb.trigrams("10201")


def test_missing_key_returns_placeholder(caplog):
    partial = KnowledgeBase([KnowledgeBase.from_builtin(script="simplified").lookup("111111")],
                            script="simplified")

    with caplog.at_level(logging.WARNING, logger="knowledge_base"):
        entry = partial.lookup("000000")

    assert entry.is_placeholder
    assert entry.key == "000000"
    assert entry.name == "未知卦"
    assert len(entry.lines) == 6
    assert "000000" in caplog.text


def test_selector_falls_back_when_transformed_entry_missing(kb):
    partial = KnowledgeBase([], script="simplified")
    primary = kb.lookup("111111")
    transformed = partial.lookup("000000")

    for changing in [(0, 1, 2, 3), (0, 1, 2, 3, 4), tuple(range(6))]:
        result = select_interpretation(primary, transformed, changing, [9] * 6)
        assert result.source == "primary"
        assert result.text == primary.judgment
        assert result.importance == "primary"


def test_validate_reports_gaps():
    report = KnowledgeBase([], script="simplified").validate()
    assert not report.is_valid
    assert len(report.missing_keys) == 64


def test_json_export_and_partial_import(kb, tmp_path):
    path = tmp_path / "iching_complete.json"
    kb.to_json(path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert len(data) == 64
    assert data[0]["number"] == 1
    assert data[0]["lines"][0] == {"position": 1, "meaning": HEXAGRAM_TEXTS[1]["lines"][0]}

    path.write_text(json.dumps(data[:2], ensure_ascii=False), encoding="utf-8")
    partial = KnowledgeBase.from_json(path, script="simplified")
    assert len(partial) == 2
    assert partial.lookup("111111").judgment == HEXAGRAM_TEXTS[1]["judgment"]
    assert partial.lookup("101010").is_placeholder
    assert len(partial.validate().missing_keys) == 62


def test_from_json_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        KnowledgeBase.from_json(tmp_path / "missing.json")

    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"number": 1}), encoding="utf-8")
    with pytest.raises(ValueError):
        KnowledgeBase.from_json(path)


def test_traditional_script_conversion():
    traditional = KnowledgeBase.from_builtin(script="traditional")
    assert traditional.lookup("111111").name == "乾為天"


def test_unknown_script_rejected():
    with pytest.raises(ValueError):
        KnowledgeBase.from_builtin(script="cyrillic")


def test_to_frame(kb):
    frame = kb.to_frame()
    assert len(frame) == 64
    assert frame.loc[11, "Hexagram_Binary"] == "111000"
    assert frame.loc[11, "Lower_Trigram"] == "乾"
    assert frame.loc[11, "Upper_Trigram"] == "坤"


def test_shared_instance_honours_knowledge_file(kb, tmp_path, monkeypatch):
    path = tmp_path / "kb.json"
    kb.to_json(path)
    monkeypatch.setattr(
        knowledge_base,
        "settings",
        Settings(KNOWLEDGE_FILE=str(path), TEXT_SCRIPT="simplified", LOG_LEVEL="INFO"),
    )
    get_knowledge_base.cache_clear()
    try:
        shared = get_knowledge_base()
        assert shared is get_knowledge_base()
        assert len(shared) == 64
    finally:
        get_knowledge_base.cache_clear()


def test_non_numeric_seed_names_the_variable(monkeypatch):
    monkeypatch.setenv("ICHING_RANDOM_SEED", "abc")

    with pytest.raises(ValueError, match="ICHING_RANDOM_SEED"):
        Settings()
