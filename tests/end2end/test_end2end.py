import io
import json
from pathlib import Path

import pytest

from repopack import cli
from repopack.output_construction import PLAIN_LONG_SEPARATOR, PLAIN_SEPARATOR


def test_end_to_end_plain_export_from_stdin(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.delenv("REPOPACK_CONFIG", raising=False)
    records = [
        {"path": "src/app.py", "content": "print('hi')"},
        {"path": "assets/logo.png", "content": None},
    ]
    monkeypatch.setattr("sys.stdin", io.StringIO("".join(json.dumps(r) + "\n" for r in records)))

    exit_code = cli.main(["--root", str(tmp_path), "--remove-comments"])

    assert exit_code == 0
    output = tmp_path / "repopack-output.txt"
    content = output.read_text(encoding="utf-8")
    assert content.startswith(PLAIN_LONG_SEPARATOR)
    assert "- Code comments have been removed." in content
    assert "logo.png" in content
    assert content.endswith(f"{PLAIN_SEPARATOR}\nFile: src/app.py\n{PLAIN_SEPARATOR}\nprint('hi')\n")
    out = capsys.readouterr().out
    assert f"Wrote {output.resolve()} style=plain files=1 chars=11" in out
    assert "1. src/app.py (11 chars)" in out


def test_end_to_end_missing_output_directory_fails(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("REPOPACK_CONFIG", raising=False)
    manifest = tmp_path / "files.jsonl"
    manifest.write_text(json.dumps({"path": "a.txt", "content": "hello"}) + "\n", encoding="utf-8")

    with pytest.raises(FileNotFoundError):
        cli.main(
            [
                "--root",
                str(tmp_path),
                "--input",
                str(manifest),
                "--output",
                "no/such/dir/out.txt",
            ],
        )
