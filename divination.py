"""易經占卜服務模組.

整合起卦、解卦與核心解讀，一次呼叫完成一次占卜：
起卦 -> 本卦 -> 查本卦 -> 之卦 -> 查之卦 -> 核心解讀。
結果交由呼叫端（介面、儲存、AI 提示詞）自行保存與呈現。
"""

import dataclasses
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from config import settings
from iching_core import Hexagram, IChingCore, Reading
from knowledge_base import KnowledgeBase
from line_generator import LineGenerator


METHODS = ("liuyao", "meihua")


@dataclasses.dataclass(frozen=True)
class CastResult:
    """單次占卜結果.

    Attributes:
        method: 起卦方式（'liuyao' 或 'meihua'）
        reading: 解卦結果
        question: 使用者問題（原樣保留，不做驗證）
        timestamp: 占卜時間（ISO 格式字串）
    """
    method: str
    reading: Reading
    question: Optional[str] = None
    timestamp: str = dataclasses.field(
        default_factory=lambda: datetime.now().isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        """轉為可 JSON 序列化的字典."""
        reading = self.reading
        transformed = reading.transformed
        transformed_entry = reading.transformed_entry
        return {
            "method": self.method,
            "question": self.question,
            "timestamp": self.timestamp,
            "original_hexagram": reading.primary.key,
            "ritual_sequence": [int(value) for value in reading.primary.lines],
            "changing_line_indexes": list(reading.primary.changing),
            "transformed_hexagram": transformed.key if transformed else None,
            "ben_gua": {
                "number": reading.primary_entry.number,
                "name": reading.primary_entry.name,
            },
            "bian_gua": {
                "number": transformed_entry.number,
                "name": transformed_entry.name,
            } if transformed_entry else None,
            "interpretation": reading.interpretation.to_dict(),
        }


class DivinationService:
    """易經占卜服務類別.

    Attributes:
        generator: 起卦器
        core: 易經核心邏輯
        logger: logging.Logger 實例，用於記錄操作日誌
    """

    def __init__(
        self,
        generator: Optional[LineGenerator] = None,
        knowledge_base: Optional[KnowledgeBase] = None
    ) -> None:
        self.generator = generator or LineGenerator()
        self.core = IChingCore(knowledge_base)

        self.logger = logging.getLogger(__name__)
        self.logger.setLevel(settings.LOG_LEVEL)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def perform(
        self,
        method: Optional[str] = None,
        question: Optional[str] = None,
        when: Optional[datetime] = None
    ) -> CastResult:
        """執行一次占卜.

        Args:
            method: 'liuyao'（三錢法）或 'meihua'（時間起卦）；
                若為 None 則使用 settings.DEFAULT_METHOD
            question: 使用者問題，原樣帶入結果
            when: 時間起卦使用的時間，預設為目前時間

        Returns:
            CastResult

        Raises:
            ValueError: 如果 method 不是支援的起卦方式
        """
        if method is None:
            method = settings.DEFAULT_METHOD
        if method not in METHODS:
            raise ValueError(f"不支援的起卦方式: {method}，可用選項: {', '.join(METHODS)}")

        if method == "liuyao":
            lines = self.generator.cast_lines()
        else:
            lines = self.generator.from_datetime(when)

        result = self.interpret(lines, method=method, question=question)
        self.logger.info(
            f"占卜完成: method={method}, 本卦={result.reading.primary_entry.name}, "
            f"之卦={result.reading.transformed_entry.name if result.reading.transformed_entry else '無'}, "
            f"動爻={result.reading.primary.moving_lines}"
        )
        return result

    def interpret(
        self,
        lines: Sequence[int],
        method: str = "liuyao",
        question: Optional[str] = None
    ) -> CastResult:
        """解讀呼叫端已取得的六爻（例如動畫介面逐爻累積的結果）.

        Raises:
            ValueError: 如果爻數不等於 6 或含非法爻值
        """
        reading = self.core.interpret(Hexagram.from_lines(lines))
        return CastResult(method=method, reading=reading, question=question)


def results_to_frame(results: Iterable[CastResult]) -> pd.DataFrame:
    """將多次占卜結果轉為 DataFrame，供歷史紀錄顯示使用.

    欄位：
    - Ritual_Sequence: 儀式數字序列（例如 "987896"）
    - Hexagram_Binary: 本卦二進制碼
    - Future_Binary: 之卦二進制碼（無動爻時為 None）
    - Moving_Lines: 動爻（1-based）列表
    - Hexagram_Id / Future_Id: 卦序
    - Source: 核心解讀來源
    """
    rows: List[Dict[str, Any]] = []
    for result in results:
        reading = result.reading
        rows.append({
            "Timestamp": result.timestamp,
            "Method": result.method,
            "Ritual_Sequence": reading.primary.ritual_sequence,
            "Hexagram_Binary": reading.primary.key,
            "Future_Binary": reading.transformed.key if reading.transformed else None,
            "Moving_Lines": reading.primary.moving_lines,
            "Hexagram_Id": reading.primary_entry.number,
            "Future_Id": reading.transformed_entry.number if reading.transformed_entry else None,
            "Source": reading.interpretation.source,
        })
    columns = [
        "Timestamp", "Method", "Ritual_Sequence", "Hexagram_Binary",
        "Future_Binary", "Moving_Lines", "Hexagram_Id", "Future_Id", "Source",
    ]
    return pd.DataFrame(rows, columns=columns)
