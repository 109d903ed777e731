from __future__ import annotations

import pytest

from panic_triage.stack import Arg, Args, Call, Func


@pytest.mark.parametrize(
    ("raw", "name", "pkg_name", "pkg_dot_name", "import_path"),
    [
        ("main.f", "f", "main", "main.f", "main"),
        (
            "github.com/acme/svc/internal/store.(*DB).Query",
            "(*DB).Query",
            "store",
            "store.(*DB).Query",
            "github.com/acme/svc/internal/store",
        ),
        (
            "gopkg.in/yaml%2ev3.Unmarshal",
            "Unmarshal",
            "yaml.v3",
            "yaml.v3.Unmarshal",
            "gopkg.in/yaml.v3",
        ),
        ("runtime.gopark", "gopark", "runtime", "runtime.gopark", "runtime"),
    ],
)
def test_func_accessors(
    raw: str, name: str, pkg_name: str, pkg_dot_name: str, import_path: str
) -> None:
    func = Func(raw=raw)

    assert func.name == name
    assert func.pkg_name == pkg_name
    assert func.pkg_dot_name == pkg_dot_name
    assert func.import_path == import_path


def test_func_receiver_and_method_split() -> None:
    assert Func("main.(*Server).Handle").receiver == "Server"
    assert Func("main.(*Server).Handle").method == "Handle"
    assert Func("main.Server.Name").receiver == "Server"
    assert Func("main.(*List[...]).Push").receiver == "List"
    assert Func("main.worker").receiver is None
    assert Func("main.worker").method == "worker"


def test_func_display_unescapes_and_reports_exported() -> None:
    assert str(Func("gopkg.in/yaml%2ev3.Unmarshal")) == "gopkg.in/yaml.v3.Unmarshal"
    assert Func("main.main").is_exported is True
    assert Func("main.helper").is_exported is False
    assert Func("net/http.(*Server).Serve").is_exported is True


def test_pointer_heuristic_bounds() -> None:
    assert Arg(value=16 * 1024 * 1024).is_ptr is False
    assert Arg(value=16 * 1024 * 1024 + 1).is_ptr is True
    assert Arg(value=2**63).is_ptr is False
    assert Arg(value=0x1, pointer=True).is_ptr is True
    assert Arg(value=0xC000010000, pointer=False).is_ptr is False


def test_args_rendering_prefers_processed_text() -> None:
    args = Args(
        values=[
            Arg(value=0xC000010000, processed="s=string(*, len=3)"),
            Arg(value=3, processed=""),
            Arg(value=0),
            Arg(value=0x2A),
        ],
        elided=True,
    )

    assert str(args) == "s=string(*, len=3), 0, 0x2a, ..."
    assert args.processed is True
    assert Args().processed is False


def test_call_location_accessors() -> None:
    call = Call(
        func=Func("net/http.(*conn).serve"),
        src_path="/usr/local/go/src/net/http/server.go",
        line=2039,
    )

    assert call.src_name == "server.go"
    assert call.src_line == "server.go:2039"
    assert call.full_src_line == "/usr/local/go/src/net/http/server.go:2039"
    assert call.pkg_src == "http/server.go"
    assert call.is_stdlib is True
    assert call.is_pkg_main is False


def test_call_outside_goroot_is_not_stdlib() -> None:
    third_party = Call(
        func=Func("github.com/acme/svc.Run"),
        src_path="/home/u/go/pkg/mod/github.com/acme/svc/run.go",
        line=4,
    )
    main = Call(func=Func("main.main"), src_path="/src/main/main.go", line=1)

    assert third_party.is_stdlib is False
    assert main.is_stdlib is False
    assert main.is_pkg_main is True
