"""易經占卜起卦模組.

此模組負責產生六爻爻值（由下到上），支援兩種起卦方式：
- 三錢法（六爻）：每爻擲三枚銅錢，依陰面（正面）數量決定四象
- 時間起卦（梅花易數）：以年、月、日、時之和取餘數，得上卦、下卦與動爻
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import numpy as np

from config import OLD_VALUES, TRIGRAMS, LineValue, settings


# 三錢法對照表：陰面數量 -> 爻值（傳統六爻古法，不可依機率重新推導）
# 三背為老陽，一正二背為少陰，二正一背為少陽，三正為老陰
COIN_TABLE = {
    0: LineValue.OLD_YANG,
    1: LineValue.YOUNG_YIN,
    2: LineValue.YOUNG_YANG,
    3: LineValue.OLD_YIN,
}

# 靜爻 -> 對應的動爻
_TO_OLD = {
    LineValue.YOUNG_YANG: LineValue.OLD_YANG,
    LineValue.YOUNG_YIN: LineValue.OLD_YIN,
}


def _one_indexed_mod(value: int, base: int) -> int:
    """取 1-based 餘數（餘數為 0 時視為 base）."""
    return value % base or base


def changing_lines(lines: Sequence[int]) -> List[int]:
    """找出動爻索引（0-based）.

    必須在起卦當下計算；變卦之後的爻值已不再代表「正在變動」。

    Args:
        lines: 爻值序列，索引 0 為初爻

    Returns:
        值為 6 或 9 的索引列表（遞增）
    """
    return [i for i, value in enumerate(lines) if value in OLD_VALUES]


class LineGenerator:
    """起卦器類別.

    三錢法使用 numpy 的隨機產生器，可注入或以種子固定結果；
    時間起卦則為純計算，不消耗隨機性。

    Attributes:
        rng: numpy.random.Generator 實例
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None
    ) -> None:
        """初始化起卦器.

        Args:
            rng: 外部提供的隨機產生器；若為 None 則依 seed 建立
            seed: 隨機種子；若為 None 則使用 settings.RANDOM_SEED
        """
        if rng is None:
            if seed is None:
                seed = settings.RANDOM_SEED
            rng = np.random.default_rng(seed)
        self.rng = rng

    # ---------- 三錢法 ----------

    def toss_coins(self) -> List[bool]:
        """擲三枚銅錢.

        Returns:
            長度為 3 的布林列表，True 代表陰面（正面）
        """
        return [bool(face) for face in self.rng.integers(0, 2, size=3)]

    @staticmethod
    def line_from_coins(coins: Sequence[bool]) -> LineValue:
        """依三枚銅錢結果決定爻值.

        Args:
            coins: 三枚銅錢結果，True 代表陰面

        Returns:
            對應的 LineValue

        Raises:
            ValueError: 如果銅錢數量不等於 3
        """
        if len(coins) != 3:
            raise ValueError(f"每爻須擲 3 枚銅錢，實際得到 {len(coins)} 枚")
        return COIN_TABLE[sum(1 for face in coins if face)]

    def cast_line(self) -> LineValue:
        """擲一次三錢，產生一爻."""
        return self.line_from_coins(self.toss_coins())

    def cast_lines(self) -> List[LineValue]:
        """擲六次三錢，由初爻到上爻產生完整六爻."""
        return [self.cast_line() for _ in range(6)]

    # ---------- 時間起卦 ----------

    @staticmethod
    def calendar_figures(
        year: int,
        month: int,
        day: int,
        hour: int
    ) -> Tuple[int, int, int]:
        """計算梅花易數的上卦數、下卦數與動爻位.

        計算方式：
        - 總和 = 年 + 月 + 日 + 時
        - 上卦 = 總和 ÷ 8 取餘（餘 0 作 8）
        - 下卦 = (總和 + 時) ÷ 8 取餘（餘 0 作 8）
        - 動爻 = (總和 + 日) ÷ 6 取餘（餘 0 作 6）

        Returns:
            (upper, lower, changing)：上卦數 1-8、下卦數 1-8、動爻位 1-6
        """
        total = year + month + day + hour
        upper = _one_indexed_mod(total, 8)
        lower = _one_indexed_mod(total + hour, 8)
        changing = _one_indexed_mod(total + day, 6)
        return upper, lower, changing

    @staticmethod
    def lines_from_figures(upper: int, lower: int, changing: int) -> List[LineValue]:
        """由上卦數、下卦數與動爻位組成六爻.

        下卦圖樣為第 1-3 爻，上卦圖樣為第 4-6 爻；
        陽位為少陽、陰位為少陰，再將動爻位改為對應的老陽／老陰。

        Raises:
            ValueError: 如果卦數不在 1-8 或動爻位不在 1-6
        """
        if upper not in TRIGRAMS or lower not in TRIGRAMS:
            raise ValueError(f"卦數必須介於 1 到 8，實際得到 upper={upper}, lower={lower}")
        if not 1 <= changing <= 6:
            raise ValueError(f"動爻位必須介於 1 到 6，實際得到 {changing}")

        pattern = TRIGRAMS[lower]["pattern"] + TRIGRAMS[upper]["pattern"]
        lines = [
            LineValue.YOUNG_YANG if bit == "1" else LineValue.YOUNG_YIN
            for bit in pattern
        ]
        lines[changing - 1] = _TO_OLD[lines[changing - 1]]
        return lines

    def from_calendar(self, year: int, month: int, day: int, hour: int) -> List[LineValue]:
        """以時間數字起卦，恰有一個動爻."""
        upper, lower, changing = self.calendar_figures(year, month, day, hour)
        return self.lines_from_figures(upper, lower, changing)

    def from_datetime(self, when: Optional[datetime] = None) -> List[LineValue]:
        """以 datetime 起卦；when 為 None 時使用目前時間."""
        if when is None:
            when = datetime.now()
        return self.from_calendar(when.year, when.month, when.day, when.hour)


class LineAccumulator:
    """逐爻累積器.

    供逐爻揭示的呼叫端使用（例如動畫介面）：未滿六爻之前不可交給下游。
    """

    def __init__(self) -> None:
        self._lines: List[LineValue] = []

    def add(self, value: int) -> None:
        """加入一爻（由下往上）.

        Raises:
            ValueError: 如果已滿六爻或爻值不合法
        """
        if len(self._lines) >= 6:
            raise ValueError("已累積 6 爻，不能再加入")
        self._lines.append(LineValue(value))

    @property
    def lines(self) -> Tuple[LineValue, ...]:
        return tuple(self._lines)

    @property
    def is_complete(self) -> bool:
        return len(self._lines) == 6

    def build(self) -> List[LineValue]:
        """取出完整六爻.

        Raises:
            ValueError: 如果尚未累積滿 6 爻
        """
        if not self.is_complete:
            raise ValueError(
                f"六爻尚未完成，目前只有 {len(self._lines)} 爻"
            )
        return list(self._lines)
