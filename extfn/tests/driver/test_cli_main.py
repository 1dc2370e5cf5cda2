# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from extfn.driver import main

GOOD = "#[extfn]\nfn add1(self: usize) -> usize { self + 1 }\n"
BAD = "#[extfn]\nfn bad() {}\n"


def _write(tmp_path: Path, name: str, text: str) -> Path:
	path = tmp_path / name
	path.write_text(text, encoding="utf-8")
	return path


def test_stdout_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "lib.rs", GOOD)
	assert main([str(src)]) == 0
	out = capsys.readouterr().out
	assert out.startswith("trait add1 {\n")
	assert "impl add1 for usize {" in out
	assert src.read_text(encoding="utf-8") == GOOD


def test_check_writes_nothing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "lib.rs", GOOD)
	assert main(["--check", str(src)]) == 0
	captured = capsys.readouterr()
	assert captured.out == ""
	assert captured.err == ""


def test_human_diagnostics_on_stderr(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "bad.rs", BAD)
	assert main(["--check", str(src)]) == 1
	err = capsys.readouterr().err
	assert f"{src}:2:7: error: function must have a parameter named `self`" in err


def test_json_payload(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	good = _write(tmp_path, "good.rs", GOOD)
	bad = _write(tmp_path, "bad.rs", BAD)
	assert main(["--json", str(good), str(bad)]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "E-EXTFN-NO-SELF"
	assert diag["phase"] == "expand"
	assert diag["file"] == str(bad)
	assert (diag["line"], diag["column"]) == (2, 7)


def test_output_file(tmp_path: Path) -> None:
	src = _write(tmp_path, "lib.rs", GOOD)
	dest = tmp_path / "out.rs"
	assert main([str(src), "-o", str(dest)]) == 0
	assert dest.read_text(encoding="utf-8").startswith("trait add1 {\n")


def test_output_needs_single_source(tmp_path: Path) -> None:
	a = _write(tmp_path, "a.rs", GOOD)
	b = _write(tmp_path, "b.rs", GOOD)
	with pytest.raises(SystemExit):
		main([str(a), str(b), "-o", str(tmp_path / "out.rs")])


def test_in_place(tmp_path: Path) -> None:
	good = _write(tmp_path, "good.rs", GOOD)
	bad = _write(tmp_path, "bad.rs", BAD)
	assert main(["--in-place", str(good), str(bad)]) == 1
	assert good.read_text(encoding="utf-8").startswith("trait add1 {\n")
	assert bad.read_text(encoding="utf-8") == BAD


def test_trait_naming_override(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "lib.rs", "#[extfn]\nfn subject_incr(self: u8) -> u8 { self + 1 }\n")
	assert main(["--trait-naming", "camel", str(src)]) == 0
	assert "impl SubjectIncr for u8 {" in capsys.readouterr().out


def test_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	cfg = _write(
		tmp_path,
		"extfn.json",
		json.dumps({"format": "extfn-config", "version": 0, "attribute_paths": ["ext"]}),
	)
	src = _write(tmp_path, "lib.rs", "#[ext]\nfn add1(self: usize) -> usize { self + 1 }\n")
	assert main(["--config", str(cfg), str(src)]) == 0
	assert capsys.readouterr().out.startswith("trait add1 {\n")


def test_bad_config_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	cfg = _write(tmp_path, "extfn.json", json.dumps({"format": "other", "version": 0}))
	src = _write(tmp_path, "lib.rs", GOOD)
	assert main(["--json", "--config", str(cfg), str(src)]) == 1
	payload = json.loads(capsys.readouterr().out)
	(diag,) = payload["diagnostics"]
	assert diag["code"] == "E-CONFIG"
	assert diag["phase"] == "config"
	assert "unsupported config format/version" in diag["message"]


def test_missing_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["--json", str(tmp_path / "nope.rs")]) == 1
	(diag,) = json.loads(capsys.readouterr().out)["diagnostics"]
	assert diag["code"] == "E-IO"
