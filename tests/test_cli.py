import io
from pathlib import Path

import pytest

from dtsfmt import cli

UNFORMATTED = "/ {\n    foo   = <1   2>;\n};\n"
FORMATTED = "/ {\n  foo = <1 2>;\n};\n"


@pytest.fixture
def rc_file(tmp_path: Path) -> Path:
    path = tmp_path / "rc.yaml"
    path.write_text("layout: corne\n")
    return path


def make_source(directory: Path, name: str = "board.dts", text: str = UNFORMATTED) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_collect_files_expands_directories(tmp_path: Path) -> None:
    make_source(tmp_path, "b/second.keymap")
    make_source(tmp_path, "a/first.dtsi")
    make_source(tmp_path, "a/notes.txt")
    single = make_source(tmp_path, "single.txt")

    files = cli.collect_files([tmp_path / "a", tmp_path / "b", single])

    assert files == [tmp_path / "a/first.dtsi", tmp_path / "b/second.keymap", single]


def test_format_in_place(tmp_path: Path, rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = make_source(tmp_path)

    code = cli.run(["--config", str(rc_file), str(source)])

    assert code == 0
    assert source.read_text() == FORMATTED
    assert f"Formatted {source}" in capsys.readouterr().out


def test_check_reports_unformatted_file(tmp_path: Path, rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = make_source(tmp_path)

    code = cli.run(["--check", "--config", str(rc_file), str(source)])

    out = capsys.readouterr().out
    assert code == 1
    assert source.read_text() == UNFORMATTED
    assert f"+++ {source} (formatted)" in out


def test_check_passes_formatted_file(tmp_path: Path, rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = make_source(tmp_path, text=FORMATTED)

    assert cli.run(["-c", "--config", str(rc_file), str(source)]) == 0
    assert capsys.readouterr().out == ""


def test_emit_stdout(tmp_path: Path, rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = make_source(tmp_path)

    code = cli.run(["--emit", "stdout", "--config", str(rc_file), str(source)])

    assert code == 0
    assert capsys.readouterr().out == FORMATTED
    assert source.read_text() == UNFORMATTED


def test_stdin_to_stdout(
    rc_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(UNFORMATTED))

    code = cli.run(["--config", str(rc_file)])

    assert code == 0
    assert capsys.readouterr().out == FORMATTED


def test_stdin_check(rc_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(UNFORMATTED))

    code = cli.run(["--check", "--config", str(rc_file)])

    assert code == 1
    assert "<stdin> (formatted)" in capsys.readouterr().out


def test_parse_error_fails_only_that_file(
    tmp_path: Path, rc_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    broken = make_source(tmp_path, "broken.dts", "/ {\n  foo = <1 2;\n")
    good = make_source(tmp_path, "good.dts")

    code = cli.run(["--config", str(rc_file), str(broken), str(good)])

    err = capsys.readouterr().err
    assert code == 1
    assert f"Error: {broken}:" in err
    assert good.read_text() == FORMATTED


def test_missing_file(tmp_path: Path, rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.run(["--config", str(rc_file), str(tmp_path / "missing.dts")])

    assert code == 1
    assert "missing.dts" in capsys.readouterr().err


def test_formatter_errors_are_reported(
    tmp_path: Path, rc_file: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    source = make_source(tmp_path)

    def fail(source: str, config: object) -> str:
        raise cli.DtsfmtError("boom")

    monkeypatch.setattr(cli, "format_source", fail)

    assert cli.run(["--config", str(rc_file), str(source)]) == 1
    assert f"Error: {source}: boom" in capsys.readouterr().err


def test_invalid_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bad_rc = tmp_path / "rc.yaml"
    bad_rc.write_text("layout: planck\n")
    source = make_source(tmp_path)

    code = cli.run(["--config", str(bad_rc), str(source)])

    assert code == 1
    assert "unknown layout 'planck'" in capsys.readouterr().err
    assert source.read_text() == UNFORMATTED


def test_layout_flag_overrides_config(rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.run(["--list-layouts", "--layout", "adv360", "--config", str(rc_file)])

    assert code == 0
    assert "  - adv360 (active)" in capsys.readouterr().out


def test_list_layouts(rc_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.run(["--list-layouts", "--config", str(rc_file)])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out == ["Available layouts:", "  - adv360", "  - corne (active)"]


def test_rc_file_is_discovered_next_to_sources(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".dtsfmtrc.yaml").write_text('indent_unit: "\\t"\n')
    source = make_source(tmp_path, "config/board.dts")

    assert cli.run([str(source)]) == 0
    assert source.read_text() == "/ {\n\tfoo = <1 2>;\n};\n"
