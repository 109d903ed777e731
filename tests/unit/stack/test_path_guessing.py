from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import patch

from panic_triage.stack import Context, PathGuesser, guess_local_path, parse_dump


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("package main\n", encoding="utf-8")
    return path


def test_longest_trailing_suffix_wins(tmp_path: Path) -> None:
    deep = _touch(tmp_path / "example.com" / "demo" / "main.go")
    _touch(tmp_path / "main.go")

    guessed = guess_local_path(tmp_path, "/home/ci/go/src/example.com/demo/main.go")

    assert guessed == deep.resolve()


def test_windows_build_paths_are_matched_by_suffix(tmp_path: Path) -> None:
    target = _touch(tmp_path / "demo" / "main.go")

    guessed = guess_local_path(tmp_path, "C:\\build\\demo\\main.go")

    assert guessed == target.resolve()


def test_absolute_path_under_root_is_used_directly(tmp_path: Path) -> None:
    target = _touch(tmp_path / "cmd" / "main.go")

    assert guess_local_path(tmp_path, str(target)) == target.resolve()


def test_unresolvable_path_returns_none(tmp_path: Path) -> None:
    assert guess_local_path(tmp_path, "/nowhere/else.go") is None
    assert guess_local_path(tmp_path, "") is None


def test_guesser_resolves_each_distinct_path_once(tmp_path: Path) -> None:
    guesser = PathGuesser(tmp_path)

    with patch("panic_triage.stack.paths.guess_local_path", return_value=None) as guess:
        assert guesser.resolve("/a/main.go") == ""
        assert guesser.resolve("/a/main.go") == ""
        assert guesser.resolve("/b/main.go") == ""

    assert guess.call_count == 2


def test_parse_with_guess_paths_fills_local_paths(tmp_path: Path) -> None:
    target = _touch(tmp_path / "demo" / "main.go")
    text = (
        "goroutine 1 [running]:\n"
        "main.f()\n"
        "\t/home/ci/demo/main.go:3 +0x0\n"
        "runtime.goexit()\n"
        "\t/usr/local/go/src/runtime/asm_amd64.s:1650 +0x1\n"
    )

    result = parse_dump(text, io.StringIO(), guess_paths=True, root=tmp_path)

    assert isinstance(result, Context)
    assert result.local_root == tmp_path.resolve()
    calls = result.goroutines[0].signature.stack.calls
    assert calls[0].local_src_path == str(target.resolve())
    assert calls[1].local_src_path == ""


def test_parse_without_guess_paths_leaves_local_paths_empty(tmp_path: Path) -> None:
    _touch(tmp_path / "demo" / "main.go")

    result = parse_dump("goroutine 1 [running]:\nmain.f()\n\t/home/ci/demo/main.go:3\n")

    assert isinstance(result, Context)
    assert result.goroutines[0].signature.stack.calls[0].local_src_path == ""
