import json
import sys
from pathlib import Path
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

import sprig.sprig_repl
from sprig import sprig_cli
from sprig.sprig_parser import MalformedConstructError

SOURCE = "let x = 1 + 2"


def test_run_sprig_string_input_prints_json(
    capsys: pytest.CaptureFixture[str],
) -> None:
    output = sprig_cli.run_sprig(source=SOURCE, is_string=True)
    out = capsys.readouterr().out.strip()
    assert out == output
    body = json.loads(out)["body"]
    assert body[0]["kind"] == "VarDeclaration"
    assert body[0]["value"]["operator"] == "+"


def test_run_sprig_sprig_target(capsys: pytest.CaptureFixture[str]) -> None:
    sprig_cli.run_sprig(source="let   x=1+2", is_string=True, target="sprig")
    assert capsys.readouterr().out.strip() == SOURCE


def test_run_sprig_file_input(tmp_path: Path) -> None:
    file_path = tmp_path / "input.sprig"
    file_path.write_text("f(a) { a }\nf(1)")
    output = sprig_cli.run_sprig(source=str(file_path), target="sprig")
    assert output == "f(a) {\n  a\n}\nf(1)"


def test_run_sprig_rejects_other_extensions(tmp_path: Path) -> None:
    file_path = tmp_path / "input.txt"
    file_path.write_text(SOURCE)
    with pytest.raises(ValueError, match="Only .sprig files are supported"):
        sprig_cli.run_sprig(source=str(file_path))


def test_run_sprig_pretty_output(capsys: pytest.CaptureFixture[str]) -> None:
    sprig_cli.run_sprig(source=SOURCE, is_string=True, pretty=True, target="sprig")
    out = capsys.readouterr().out
    assert "Sprig sprig" in out
    assert SOURCE in out


def test_run_sprig_output_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output_path = tmp_path / "out.json"
    sprig_cli.run_sprig(source=SOURCE, is_string=True, out=str(output_path))
    assert capsys.readouterr().out == ""
    contents = output_path.read_text()
    assert contents.endswith("\n")
    assert json.loads(contents)["kind"] == "Program"


def test_run_sprig_output_file_pretty_reports_path(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output_path = tmp_path / "out.sprig"
    sprig_cli.run_sprig(
        source=SOURCE, is_string=True, out=str(output_path), pretty=True, target="sprig"
    )
    assert f"(wrote to {output_path})" in capsys.readouterr().out
    assert output_path.read_text().strip() == SOURCE


def test_run_sprig_compact_json() -> None:
    output = sprig_cli.run_sprig(source=SOURCE, is_string=True, indent=None)
    assert "\n" not in output


def test_run_sprig_propagates_parse_error() -> None:
    with pytest.raises(MalformedConstructError, match="must be assigned a value"):
        sprig_cli.run_sprig(source="const c", is_string=True)


def test_run_sprig_lookahead_changes_detection() -> None:
    source = "a\nb(c) { c }"
    with pytest.raises(SyntaxError, match="Expected \\( to open the argument list"):
        sprig_cli.run_sprig(source=source, is_string=True)
    bounded = json.loads(sprig_cli.run_sprig(source=source, is_string=True, lookahead=2))
    assert [stmt["kind"] for stmt in bounded["body"]] == [
        "Identifier",
        "CallExpr",
        "ObjectLiteral",
    ]


def test_main_string_entry(capsys: pytest.CaptureFixture[str]) -> None:
    sprig_cli.main(["-s", "x", "-t", "sprig"])
    assert capsys.readouterr().out.strip() == "x"


def test_main_uses_sys_argv(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["sprig", "-s", "y", "-t", "source"])
    sprig_cli.main()
    assert capsys.readouterr().out.strip() == "y"


def test_main_indent_zero_is_compact(capsys: pytest.CaptureFixture[str]) -> None:
    sprig_cli.main(["-s", SOURCE, "--indent", "0"])
    out = capsys.readouterr().out
    assert out.count("\n") == 1


def test_main_parse_error_exits_non_zero(
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["-s", "let"])
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("[error] >>> Expected a variable name after let")
    assert "expected IDENT" in err


def test_main_lex_error_exits_non_zero(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["-s", '"oops'])
    assert e.value.code == 1
    assert "Unterminated string" in capsys.readouterr().err


def test_main_invalid_target() -> None:
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["-t", "xyz", "-s", "x"])
    assert e.value.code == 2


def test_main_invalid_lookahead() -> None:
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["--lookahead", "0", "-s", "x"])
    assert e.value.code == 2


def test_main_reads_lookahead_from_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    seen: dict[str, Any] = {}
    monkeypatch.setenv("SPRIG_LOOKAHEAD", "7")
    monkeypatch.setattr(sprig_cli, "run_sprig", lambda **kwargs: seen.update(kwargs))
    sprig_cli.main(["-s", "x"])
    assert seen["lookahead"] == 7


def test_main_flag_overrides_env(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}
    monkeypatch.setenv("SPRIG_LOOKAHEAD", "7")
    monkeypatch.setattr(sprig_cli, "run_sprig", lambda **kwargs: seen.update(kwargs))
    sprig_cli.main(["-s", "x", "--lookahead", "2"])
    assert seen["lookahead"] == 2


def test_main_bad_env_lookahead(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPRIG_LOOKAHEAD", "many")
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["-s", "x"])
    assert e.value.code == 2


def test_lookahead_from_env_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPRIG_LOOKAHEAD", raising=False)
    assert sprig_cli.lookahead_from_env() is None


def test_lookahead_from_env_rejects_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPRIG_LOOKAHEAD", "0")
    with pytest.raises(ValueError, match="positive integer"):
        sprig_cli.lookahead_from_env()


def test_main_no_args_starts_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}
    monkeypatch.delenv("SPRIG_LOOKAHEAD", raising=False)
    monkeypatch.setattr(
        sprig.sprig_repl, "start_repl", lambda **kwargs: seen.update(kwargs)
    )
    sprig_cli.main([])
    assert seen == {"lookahead": None}


def test_main_repl_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}
    monkeypatch.setattr(
        sprig.sprig_repl, "start_repl", lambda **kwargs: seen.update(kwargs)
    )
    sprig_cli.main(["--repl", "--verbose", "-t", "sprig", "--lookahead", "5"])
    assert seen == {"target": "sprig", "verbose": True, "lookahead": 5}


@settings(max_examples=150)  # type: ignore[misc]
@given(st.text(alphabet="abc(){}[]=+-*/%,:.;' \"\n0123456789@", max_size=40))  # type: ignore[misc]
def test_run_sprig_random_input_only_raises_syntax_errors(source: str) -> None:
    try:
        sprig_cli.run_sprig(source=source, is_string=True, target="sprig")
    except SyntaxError:
        pass


def test_main_wrong_extension_reports_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    file_path = tmp_path / "input.txt"
    file_path.write_text(SOURCE)
    with pytest.raises(SystemExit) as e:
        sprig_cli.main([str(file_path)])
    assert e.value.code == 1
    assert capsys.readouterr().err.startswith(
        "[error] >>> Only .sprig files are supported."
    )


def test_main_missing_file_reports_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    missing = tmp_path / "missing.sprig"
    with pytest.raises(SystemExit) as e:
        sprig_cli.main([str(missing)])
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("[error] >>> ")
    assert "missing.sprig" in err


def test_main_non_ascii_digit_reports_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["-s", "let x = ²"])
    assert e.value.code == 1
    assert 'Unexpected token found "²"' in capsys.readouterr().err


def test_main_deep_nesting_reports_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as e:
        sprig_cli.main(["-s", "(" * 2000 + "1" + ")" * 2000])
    assert e.value.code == 1
    assert "nested too deeply" in capsys.readouterr().err
