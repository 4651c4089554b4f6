"""易經占卜主程式.

示範完整的占卜流程：
1. 起卦（三錢法或時間起卦）
2. 本卦與之卦
3. 核心解讀
4. 結果視覺化
"""

import sys
from typing import List, Optional, Sequence

# 設定輸出編碼為 UTF-8（處理 Windows 終端編碼問題）
if sys.platform == 'win32':
    try:
        sys.stdout.reconfigure(encoding='utf-8')
        sys.stderr.reconfigure(encoding='utf-8')
    except (AttributeError, ValueError):
        import os
        os.environ['PYTHONIOENCODING'] = 'utf-8'

from config import OLD_VALUES, YANG_VALUES, settings
from divination import DivinationService


def print_hexagram_visual(ritual_sequence: Sequence[int]) -> None:
    """以 ASCII 藝術顯示六爻卦象.

    從頂部（第6爻）到底部（第1爻）顯示卦象。

    Args:
        ritual_sequence: 爻值序列，從底部到頂部（索引 0 到 5）。
            - 9/7 (陽爻): 顯示為 `─────────`
            - 6/8 (陰爻): 顯示為 `───   ───`
    """
    print("\n卦象視覺化（從上到下）：")
    print("─" * 50)

    for i in range(5, -1, -1):
        value = ritual_sequence[i]
        if value in YANG_VALUES:
            line, label = "─────────", "陽"
        else:
            line, label = "───   ───", "陰"
        marker = " * (變)" if value in OLD_VALUES else ""
        print(f"第 {i + 1} 爻 {label}: {line}{marker}")

    print("─" * 50)
    print("(* 變 = 動爻，會變動到相反的狀態)\n")


def format_moving_lines(moving_lines: List[int]) -> str:
    """格式化動爻列表為可讀字串.

    Returns:
        例如 "1, 5, 6"；沒有動爻時為 "無"
    """
    if not moving_lines:
        return "無"
    return ", ".join(map(str, moving_lines))


def main(method: Optional[str] = None, question: Optional[str] = None) -> None:
    """主程式執行函數.

    Args:
        method: 'liuyao' 或 'meihua'，預設使用 settings.DEFAULT_METHOD
        question: 占卜問題（僅顯示，不做驗證）

    Raises:
        SystemExit: 如果起卦方式不合法
    """
    method = method or settings.DEFAULT_METHOD
    try:
        result = DivinationService().perform(method=method, question=question)
    except ValueError as e:
        print(f"\n[錯誤] 驗證錯誤: {e}")
        sys.exit(1)

    reading = result.reading
    primary_entry = reading.primary_entry
    transformed_entry = reading.transformed_entry
    interpretation = reading.interpretation

    print("=" * 60)
    print("  === 易經占卜報告 ===")
    print("=" * 60)
    if question:
        print(f"\n[問題] {question}")
    print(f"[起卦方式] {method}")
    print(f"[儀式數字序列]（由下至上）: {[int(v) for v in reading.primary.lines]}")
    print(f"[二進制編碼] {reading.primary.key}")

    print(f"\n[本卦] 第 {primary_entry.number} 卦 {primary_entry.name}（{primary_entry.english_name}）")
    print(f"   卦辭: {primary_entry.judgment}")
    if transformed_entry is not None:
        print(f"[之卦] 第 {transformed_entry.number} 卦 {transformed_entry.name}（{transformed_entry.english_name}）")
    print(f"[動爻] {format_moving_lines(reading.primary.moving_lines)}")

    print_hexagram_visual(reading.primary.lines)

    print(f"[核心解讀] {interpretation.title}")
    print(f"   {interpretation.text}")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    main(
        method=sys.argv[1] if len(sys.argv) > 1 else None,
        question=sys.argv[2] if len(sys.argv) > 2 else None,
    )
