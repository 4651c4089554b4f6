"""易經核心解讀選擇模組.

依動爻數量，決定本次占卜以哪一段經文作為核心答案：

| 動爻數 | 取用經文 | 來源 |
|---|---|---|
| 0 | 本卦卦辭 | 本卦 |
| 1 | 該動爻的爻辭 | 本卦 |
| 2 | 兩動爻中位置較低者的爻辭 | 本卦 |
| 3 | 本卦卦辭 | 本卦 |
| 4 | 之卦卦辭 | 之卦 |
| 5 | 之卦中唯一靜爻的爻辭 | 之卦 |
| 6 | 之卦卦辭 | 之卦 |

之卦條目缺少時一律退回本卦卦辭。
"""

import dataclasses
import logging
from typing import Any, Dict, Optional, Sequence

from config import YANG_VALUES, LineValue
from knowledge_base import KnowledgeEntry, placeholder_entry


logger = logging.getLogger(__name__)

# 爻位名稱（初、二、三、四、五、上 = 第一到第六爻）
POSITION_NAMES = ("初", "二", "三", "四", "五", "上")
YANG_LABEL = "九"
YIN_LABEL = "六"

SOURCE_LABELS = {"primary": "本卦", "transformed": "之卦"}


@dataclasses.dataclass(frozen=True)
class InterpretationResult:
    """核心解讀結果.

    Attributes:
        title: 標題，例如「本卦 · 乾为天 · 初九爻辞」
        text: 選出的經文
        source: 'primary'（本卦）或 'transformed'（之卦）
        position: 爻位名稱（僅取用爻辭時有值）
        importance: 恆為 'primary'
    """
    title: str
    text: str
    source: str
    position: Optional[str] = None
    importance: str = "primary"

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def get_position_name(index: int, value: Optional[int] = None) -> str:
    """取得爻位名稱.

    Args:
        index: 爻的索引（0-5，由下到上）
        value: 起卦時該爻的爻值；陽類（7, 9）標「九」，陰類（6, 8）標「六」，
            未提供時視為陽

    Returns:
        爻位名稱，例如 index=2, value=9 -> "三九"
    """
    if value is None:
        value = LineValue.OLD_YANG
    suffix = YANG_LABEL if value in YANG_VALUES else YIN_LABEL
    return POSITION_NAMES[index] + suffix


def _judgment(entry: KnowledgeEntry, source: str) -> InterpretationResult:
    return InterpretationResult(
        title=f"{SOURCE_LABELS[source]} · {entry.name}",
        text=entry.judgment,
        source=source,
    )


def _line(
    entry: KnowledgeEntry,
    source: str,
    index: int,
    value: Optional[int]
) -> InterpretationResult:
    position = get_position_name(index, value)
    return InterpretationResult(
        title=f"{SOURCE_LABELS[source]} · {entry.name} · {position}爻辞",
        text=entry.lines[index],
        source=source,
        position=position,
    )


def select_interpretation(
    primary: Optional[KnowledgeEntry],
    transformed: Optional[KnowledgeEntry] = None,
    changing: Sequence[int] = (),
    lines: Optional[Sequence[int]] = None
) -> InterpretationResult:
    """取得核心解讀.

    Args:
        primary: 本卦條目
        transformed: 之卦條目（有動爻且查詢成功時才有）
        changing: 動爻索引（0-5）
        lines: 本卦起卦時的爻值，用於判斷爻位陰陽

    Returns:
        唯一一筆 InterpretationResult。動爻數異常、索引越界或本卦缺少時，
        退回本卦卦辭並以標題標示異常。
    """
    indexes = sorted(set(changing))
    count = len(indexes)

    def value_at(index: int) -> Optional[int]:
        if lines is None or index >= len(lines):
            return None
        return lines[index]

    if (
        primary is None
        or any(not 0 <= index <= 5 for index in indexes)
        or len(primary.lines) != 6
    ):
        logger.warning(f"核心解讀收到異常輸入（本卦={primary is not None}, 動爻={list(changing)}），退回本卦卦辭")
        entry = primary or placeholder_entry()
        return InterpretationResult(
            title=f"{SOURCE_LABELS['primary']} · {entry.name}（動爻異常: {list(changing)}）",
            text=entry.judgment,
            source="primary",
        )

    if count == 0 or count == 3:
        return _judgment(primary, "primary")

    if count == 1 or count == 2:
        # 兩爻動時取位置較低的動爻
        index = indexes[0]
        return _line(primary, "primary", index, value_at(index))

    if transformed is None or transformed.is_placeholder:
        return _judgment(primary, "primary")

    if count == 5:
        if len(transformed.lines) != 6:
            return _judgment(primary, "primary")
        # 唯一靜爻在之卦中保持原值（少陽或少陰）
        index = next(i for i in range(6) if i not in indexes)
        value = value_at(index)
        if value is None:
            value = LineValue.YOUNG_YANG
        return _line(transformed, "transformed", index, value)

    # count == 4 or count == 6
    return _judgment(transformed, "transformed")
