import os

import pytest

from precompute import build_parser, main


def test_defaults():
    args = build_parser().parse_args([])
    assert args.n == 3
    assert args.output == "text"
    assert args.output_dir == "truth_tables"
    assert args.plot is None

def test_rejects_out_of_range_n():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-n", "6"])
    with pytest.raises(SystemExit):
        build_parser().parse_args(["-n", "0"])

def test_rejects_unknown_output_mode():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--output", "pdf"])

def test_text_mode(tmp_path, capsys):
    assert main(["-n", "1", "-d", str(tmp_path)]) == 0
    assert (tmp_path / "formulalist.txt").read_text() == "FALSE\n~p1\np1\nTRUE\n"
    out = capsys.readouterr().out
    assert "Formula list written to" in out
    assert "Total execution time" in out

def test_html_mode_with_plot(tmp_path, capsys):
    chart = tmp_path / "chart.png"
    assert main(["-n", "2", "-o", "html", "-d", str(tmp_path), "--plot", str(chart)]) == 0
    assert os.path.exists(tmp_path / "truthtables0.htm")
    assert chart.exists()
    assert "Chart saved to" in capsys.readouterr().out
