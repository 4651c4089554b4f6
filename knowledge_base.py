"""易經知識庫模組.

以二進制卦碼為鍵，提供六十四卦的卦名、卦辭與六爻爻辭查詢。
預設載入內建資料（config.HEXAGRAM_MAP + hexagram_texts），亦可由
統一格式的 JSON（number, name, judgment, image, lines）載入。
載入後唯讀；查無卦碼時回傳佔位條目而不拋出異常。
"""

import dataclasses
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import pandas as pd
from opencc import OpenCC

from config import HEXAGRAM_MAP, TRIGRAMS, TrigramDict, settings
from hexagram_texts import HEXAGRAM_TEXTS


@dataclasses.dataclass(frozen=True)
class KnowledgeEntry:
    """單卦知識條目.

    Attributes:
        key: 六位二進制卦碼（由下到上）
        number: 卦序（1-64）；佔位條目為 0
        name: 中文全名（例如「乾为天」）
        english_name: 英文／拼音名稱
        nature: 簡短中文卦名
        judgment: 卦辭
        lines: 六爻爻辭，索引 0 為初爻
    """
    key: str
    number: int
    name: str
    english_name: str
    nature: str
    judgment: str
    lines: Tuple[str, ...]

    @property
    def is_placeholder(self) -> bool:
        return self.number == 0


def placeholder_entry(key: str = "") -> KnowledgeEntry:
    """建立查無卦碼時的佔位條目."""
    return KnowledgeEntry(
        key=key,
        number=0,
        name="未知卦",
        english_name="Unknown",
        nature="?",
        judgment=f"知識庫中找不到卦碼 {key or '?'} 的卦辭，暫以此說明代替。",
        lines=tuple(f"第 {i} 爻爻辭暫未找到" for i in range(1, 7)),
    )


@dataclasses.dataclass
class IntegrityReport:
    """知識庫完整性檢查報告."""
    total: int
    missing_keys: List[str] = dataclasses.field(default_factory=list)
    incomplete_lines: List[str] = dataclasses.field(default_factory=list)
    empty_judgments: List[str] = dataclasses.field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not (self.missing_keys or self.incomplete_lines or self.empty_judgments)


class KnowledgeBase:
    """易經知識庫類別.

    Attributes:
        logger: logging.Logger 實例，用於記錄查詢失敗等事件
    """

    def __init__(
        self,
        entries: Iterable[KnowledgeEntry],
        script: Optional[str] = None
    ) -> None:
        """建立知識庫.

        Args:
            entries: 知識條目
            script: 'simplified' 或 'traditional'；若為 None 則使用 settings.TEXT_SCRIPT。
                'traditional' 時以 OpenCC（s2tw）將所有經文轉為繁體。

        Raises:
            ValueError: 如果 script 不是支援的選項
        """
        self.logger = logging.getLogger(__name__)
        self.logger.setLevel(settings.LOG_LEVEL)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

        if script is None:
            script = settings.TEXT_SCRIPT
        if script not in ("simplified", "traditional"):
            raise ValueError(f"不支援的字體選項: {script}（僅限 'simplified' 或 'traditional'）")
        self.script = script

        entries = list(entries)
        if script == "traditional":
            cc = OpenCC("s2tw")  # 簡體 -> 臺灣繁體
            entries = [
                dataclasses.replace(
                    entry,
                    name=cc.convert(entry.name),
                    judgment=cc.convert(entry.judgment),
                    lines=tuple(cc.convert(line) for line in entry.lines),
                )
                for entry in entries
            ]

        self._by_key: Dict[str, KnowledgeEntry] = {entry.key: entry for entry in entries}
        self._by_number: Dict[int, KnowledgeEntry] = {
            entry.number: entry for entry in entries
        }

    # ---------- 建構 ----------

    @classmethod
    def from_builtin(cls, script: Optional[str] = None) -> "KnowledgeBase":
        """由內建資料建立完整六十四卦知識庫."""
        entries = []
        for key, hexagram in HEXAGRAM_MAP.items():
            text = HEXAGRAM_TEXTS[hexagram["id"]]
            entries.append(KnowledgeEntry(
                key=key,
                number=hexagram["id"],
                name=text["name"],
                english_name=hexagram["name"],
                nature=hexagram["nature"],
                judgment=text["judgment"],
                lines=tuple(text["lines"]),
            ))
        return cls(entries, script=script)

    @classmethod
    def from_json(
        cls,
        file_path: Union[str, Path],
        script: Optional[str] = None
    ) -> "KnowledgeBase":
        """由統一格式的 JSON 載入知識庫.

        JSON 頂層為 list，每項含 number, name, judgment, image,
        lines[{position, meaning}]；卦碼由 number 對照 HEXAGRAM_MAP 取得。
        允許不滿 64 卦，缺漏的卦碼查詢時回傳佔位條目。

        Raises:
            FileNotFoundError: 檔案不存在
            ValueError: 頂層不是 list
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"知識庫檔案不存在: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"知識庫 JSON 頂層須為 list，實際為 {type(data).__name__}")

        key_by_number = {hexagram["id"]: key for key, hexagram in HEXAGRAM_MAP.items()}
        entries = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                number = int(item.get("number", 0))
            except (TypeError, ValueError):
                continue
            key = key_by_number.get(number)
            if key is None:
                continue

            lines: List[str] = []
            for line in item.get("lines") or []:
                if isinstance(line, dict):
                    lines.append(line.get("meaning") or line.get("text") or "")
                else:
                    lines.append(str(line))

            entries.append(KnowledgeEntry(
                key=key,
                number=number,
                name=item.get("name") or "?",
                english_name=HEXAGRAM_MAP[key]["name"],
                nature=HEXAGRAM_MAP[key]["nature"],
                judgment=item.get("judgment") or item.get("judgement") or "",
                lines=tuple(lines),
            ))
        return cls(entries, script=script)

    def to_json(self, file_path: Union[str, Path]) -> None:
        """以統一格式寫出知識庫 JSON（依卦序排列）."""
        out: List[Dict[str, Any]] = []
        for entry in self.entries():
            out.append({
                "number": entry.number,
                "name": entry.name,
                "judgment": entry.judgment,
                "image": "",
                "lines": [
                    {"position": i + 1, "meaning": text}
                    for i, text in enumerate(entry.lines)
                ],
            })
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(out, f, ensure_ascii=False, indent=2)

    # ---------- 查詢 ----------

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def lookup(self, key: str) -> KnowledgeEntry:
        """依卦碼查詢條目；查不到時記錄警告並回傳佔位條目."""
        entry = self._by_key.get(key)
        if entry is None:
            self.logger.warning(f"知識庫中找不到卦碼 {key}，改用佔位條目")
            return placeholder_entry(key)
        return entry

    def by_number(self, number: int) -> Optional[KnowledgeEntry]:
        """依卦序（1-64）查詢，供顯示與搜尋使用."""
        return self._by_number.get(number)

    def entries(self) -> List[KnowledgeEntry]:
        return sorted(self._by_key.values(), key=lambda entry: entry.number)

    def names(self) -> List[str]:
        """依卦序列出所有卦名."""
        return [entry.name for entry in self.entries()]

    def search(self, keyword: str) -> List[KnowledgeEntry]:
        """以關鍵字搜尋卦名（中文全名、英文名、簡短卦名，不分大小寫）."""
        term = keyword.strip().lower()
        if not term:
            return []
        return [
            entry for entry in self.entries()
            if term in entry.name.lower()
            or term in entry.english_name.lower()
            or term in entry.nature.lower()
        ]

    @staticmethod
    def trigrams(key: str) -> Tuple[TrigramDict, TrigramDict]:
        """取得卦碼的下卦與上卦.

        Returns:
            (lower, upper) 兩個 TrigramDict

        Raises:
            ValueError: 卦碼不是六位二進制字串
        """
        if len(key) != 6 or set(key) - {"0", "1"}:
            raise ValueError(f"卦碼必須為六位二進制字串，實際得到 {key!r}")
        by_pattern = {trigram["pattern"]: trigram for trigram in TRIGRAMS.values()}
        return by_pattern[key[:3]], by_pattern[key[3:]]

    def validate(self) -> IntegrityReport:
        """檢查六十四卦碼是否齊全、每卦是否有六爻與卦辭."""
        report = IntegrityReport(total=len(self._by_key))
        for i in range(64):
            key = format(i, "06b")
            entry = self._by_key.get(key)
            if entry is None:
                report.missing_keys.append(key)
                continue
            if len(entry.lines) != 6:
                report.incomplete_lines.append(key)
            if not entry.judgment.strip():
                report.empty_judgments.append(key)
        return report

    def to_frame(self) -> pd.DataFrame:
        """轉為 DataFrame（依卦序），供顯示與搜尋介面使用."""
        rows = []
        for entry in self.entries():
            lower, upper = self.trigrams(entry.key)
            rows.append({
                "Number": entry.number,
                "Hexagram_Binary": entry.key,
                "Name": entry.name,
                "English_Name": entry.english_name,
                "Nature": entry.nature,
                "Lower_Trigram": lower["nature"],
                "Upper_Trigram": upper["nature"],
                "Judgment": entry.judgment,
            })
        return pd.DataFrame(rows).set_index("Number")


@lru_cache(maxsize=1)
def get_knowledge_base() -> KnowledgeBase:
    """取得全程式共用的知識庫（只載入一次）.

    settings.KNOWLEDGE_FILE 有設定時由該 JSON 載入，否則使用內建資料。
    """
    if settings.KNOWLEDGE_FILE:
        return KnowledgeBase.from_json(settings.KNOWLEDGE_FILE)
    return KnowledgeBase.from_builtin()
