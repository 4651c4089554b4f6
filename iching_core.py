"""易經占卜核心邏輯模組.

此模組提供卦象編碼、之卦（變卦）計算與整體解卦流程的核心功能。
"""

import dataclasses
from typing import Dict, List, Optional, Sequence, Tuple

from config import OLD_VALUES, YANG_VALUES, LineValue
from interpretation import InterpretationResult, select_interpretation
from knowledge_base import KnowledgeBase, KnowledgeEntry, get_knowledge_base
from line_generator import changing_lines


_FLIPPED = {
    LineValue.OLD_YIN: LineValue.OLD_YANG,
    LineValue.OLD_YANG: LineValue.OLD_YIN,
}


def to_binary(lines: Sequence[int]) -> str:
    """將六爻轉為二進制字串（用於查詢 HEXAGRAM_MAP）.

    9 和 7 -> "1"（陽爻），6 和 8 -> "0"（陰爻），順序由下到上。
    """
    return "".join("1" if value in YANG_VALUES else "0" for value in lines)


def flip(value: int) -> LineValue:
    """動爻變換：老陰 <-> 老陽.

    Raises:
        ValueError: 如果爻值不是老陰或老陽
    """
    try:
        return _FLIPPED[LineValue(value)]
    except (KeyError, ValueError):
        raise ValueError(f"只有老陰(6)或老陽(9)可以變爻，實際得到 {value}") from None


@dataclasses.dataclass(frozen=True)
class Hexagram:
    """六爻卦象.

    Attributes:
        lines: 六個爻值，索引 0 為初爻（底部），索引 5 為上爻
        changing: 起卦當下的動爻索引（0-based，遞增）；之卦恆為空
        is_transformed: 是否為由本卦變出的之卦
    """
    lines: Tuple[LineValue, ...]
    changing: Tuple[int, ...] = ()
    is_transformed: bool = False

    def __post_init__(self) -> None:
        if len(self.lines) != 6:
            raise ValueError(
                f"卦象必須包含恰好 6 爻，實際得到 {len(self.lines)} 爻"
            )
        try:
            lines = tuple(LineValue(value) for value in self.lines)
        except ValueError:
            raise ValueError(
                f"爻值必須為 6, 7, 8, 9 之一，實際得到 {list(self.lines)}"
            ) from None
        changing = tuple(sorted(set(self.changing)))
        if self.is_transformed and changing:
            raise ValueError("之卦沒有動爻")
        for index in changing:
            if not 0 <= index <= 5:
                raise ValueError(f"動爻索引必須介於 0 到 5，實際得到 {index}")
        object.__setattr__(self, "lines", lines)
        object.__setattr__(self, "changing", changing)

    @classmethod
    def from_lines(cls, lines: Sequence[int]) -> "Hexagram":
        """由起卦結果建立本卦，並於此時記錄動爻."""
        return cls(lines=tuple(lines), changing=tuple(changing_lines(lines)))

    @property
    def key(self) -> str:
        return to_binary(self.lines)

    @property
    def ritual_sequence(self) -> str:
        """儀式數字序列字串，例如 "987896"."""
        return "".join(str(int(value)) for value in self.lines)

    @property
    def moving_lines(self) -> List[int]:
        """動爻（1-based），例如 [1, 5]."""
        return [index + 1 for index in self.changing]


def transform(hexagram: Hexagram) -> Hexagram:
    """計算之卦.

    僅翻轉本卦動爻集合中的爻位（老陰 -> 老陽，老陽 -> 老陰），其餘爻照抄。
    動爻集合使用起卦時記錄的索引，不由爻值重新推導。

    Args:
        hexagram: 本卦（含動爻集合）

    Returns:
        之卦，沒有自己的動爻集合

    Raises:
        ValueError: 如果輸入已是之卦，或動爻索引上的爻值不是老陰／老陽
    """
    if hexagram.is_transformed:
        raise ValueError("之卦不能再次變卦")

    lines = list(hexagram.lines)
    for index in hexagram.changing:
        if lines[index] not in OLD_VALUES:
            raise ValueError(
                f"第 {index + 1} 爻標記為動爻，但爻值為 {int(lines[index])}（非 6 或 9）"
            )
        lines[index] = flip(lines[index])
    return Hexagram(lines=tuple(lines), is_transformed=True)


@dataclasses.dataclass(frozen=True)
class Reading:
    """單次起卦的解卦結果（本卦、之卦、經文與核心解讀）."""
    primary: Hexagram
    primary_entry: KnowledgeEntry
    interpretation: InterpretationResult
    transformed: Optional[Hexagram] = None
    transformed_entry: Optional[KnowledgeEntry] = None


class IChingCore:
    """易經核心邏輯類別.

    提供卦象查詢、之卦計算和序列解釋功能。

    核心概念：
    - 本卦：由起卦爻值直接組成的卦象
    - 之卦：依動爻變換後的卦象
    - 動爻：值為 6 或 9 的爻位，代表正在變動的狀態
    """

    def __init__(self, knowledge_base: Optional[KnowledgeBase] = None) -> None:
        if knowledge_base is None:
            knowledge_base = get_knowledge_base()
        self.knowledge_base = knowledge_base

    def get_hexagram_name(self, binary_string: str) -> Dict[str, object]:
        """查詢卦象名稱.

        Args:
            binary_string: 六位二進制字串（例如 "111111"）

        Returns:
            `{"id", "name", "nature"}` 字典；查不到時為
            `{"id": 0, "name": "Unknown", "nature": "?"}`
        """
        entry = self.knowledge_base.lookup(binary_string)
        return {"id": entry.number, "name": entry.english_name, "nature": entry.nature}

    def calculate_future_hexagram(self, ritual_sequence: List[int]) -> str:
        """計算之卦的二進制字串.

        變爻規則：
        - 9 (老陽) -> 0 (陰爻)
        - 6 (老陰) -> 1 (陽爻)
        - 7 (少陽)、8 (少陰) 保持不變

        Raises:
            ValueError: 如果 `ritual_sequence` 長度不等於 6 或含非法爻值
        """
        return transform(Hexagram.from_lines(ritual_sequence)).key

    def interpret(self, hexagram: Hexagram) -> Reading:
        """解卦：查本卦 -> 變卦 -> 查之卦 -> 選出核心解讀."""
        primary_entry = self.knowledge_base.lookup(hexagram.key)

        transformed = None
        transformed_entry = None
        if hexagram.changing:
            transformed = transform(hexagram)
            transformed_entry = self.knowledge_base.lookup(transformed.key)

        # 之卦查無條目時視同缺少，由選擇器退回本卦卦辭
        found_entry = transformed_entry
        if found_entry is not None and found_entry.is_placeholder:
            found_entry = None
        interpretation = select_interpretation(
            primary_entry,
            found_entry,
            hexagram.changing,
            hexagram.lines,
        )
        return Reading(
            primary=hexagram,
            primary_entry=primary_entry,
            interpretation=interpretation,
            transformed=transformed,
            transformed_entry=transformed_entry,
        )

    def interpret_sequence(self, ritual_sequence: List[int]) -> Reading:
        """解釋儀式數字序列.

        Args:
            ritual_sequence: 6 個爻值，例如 `[9, 8, 7, 8, 9, 6]`，索引 0 為初爻

        Raises:
            ValueError: 如果 `ritual_sequence` 長度不等於 6

        Example:
            >>> core = IChingCore()
            >>> reading = core.interpret_sequence([9, 8, 7, 8, 9, 6])
            >>> reading.primary.moving_lines
            [1, 5, 6]
        """
        return self.interpret(Hexagram.from_lines(ritual_sequence))
