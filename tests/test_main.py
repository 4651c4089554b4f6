import pytest

from main import format_moving_lines, main, print_hexagram_visual


def test_format_moving_lines():
    assert format_moving_lines([]) == "無"
    assert format_moving_lines([1, 5, 6]) == "1, 5, 6"


def test_print_hexagram_visual_top_to_bottom(capsys):
    print_hexagram_visual([9, 8, 7, 8, 7, 6])
    out = capsys.readouterr().out.splitlines()

    rows = [line for line in out if line.startswith("第")]
    assert rows[0].startswith("第 6 爻 陰")
    assert rows[0].endswith("* (變)")
    assert rows[-1].startswith("第 1 爻 陽")
    assert rows[-1].endswith("* (變)")
    assert not rows[1].endswith("* (變)")


def test_main_prints_report(capsys):
    main(method="meihua", question="出行是否順利？")
    out = capsys.readouterr().out

    assert "[問題] 出行是否順利？" in out
    assert "[本卦]" in out
    assert "[核心解讀]" in out


def test_main_rejects_unknown_method(capsys):
    with pytest.raises(SystemExit):
        main(method="tarot")
