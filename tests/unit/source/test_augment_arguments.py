from __future__ import annotations

from pathlib import Path

from panic_triage.source import SourceCache, augment
from panic_triage.stack import Arg, Args, Call, Func, Goroutine, Signature, Stack

FIXTURES = Path(__file__).resolve().parents[2] / "fixtures" / "go"
MAIN = "/app/main.go"
SHAPES = "/app/shapes.go"


def _cache() -> SourceCache:
    return SourceCache(
        files={
            MAIN: (FIXTURES / "main.go").read_bytes(),
            SHAPES: (FIXTURES / "shapes.go").read_bytes(),
        }
    )


def _augment_one(raw: str, words: list[int], path: str, line: int, elided: bool = False) -> Call:
    call = Call(
        func=Func(raw),
        args=Args(values=[Arg(value=word) for word in words], elided=elided),
        src_path=path,
        line=line,
    )
    goroutine = Goroutine(id=1, signature=Signature(state="running", stack=Stack(calls=[call])))
    augment([goroutine], _cache())
    return call


def test_pointer_receiver_string_slice_and_interface() -> None:
    call = _augment_one(
        "main.(*Server).Handle",
        [0xC000010000, 0xC000020000, 0x3, 0xC000030000, 0x5, 0x7, 0x0, 0x0],
        MAIN,
        16,
    )

    assert str(call.args) == (
        "s=*, path=string(*, len=3), ids=[]int(*, len=5, cap=7), err=error(nil)"
    )
    assert call.local_src_path == MAIN
    assert [arg.pointer for arg in call.args.values] == [
        True,
        True,
        False,
        True,
        False,
        False,
        True,
        True,
    ]


def test_value_receiver_consumes_no_words() -> None:
    call = _augment_one("main.Server.Name", [0xFFFFFFFE, 0x3FF8000000000000, 0x1], MAIN, 20)

    assert str(call.args) == "mode=-2, ratio=1.5, ok=true"
    assert all(arg.pointer is False for arg in call.args.values)


def test_map_chan_and_func_shapes_use_type_marker() -> None:
    call = _augment_one("main.worker", [0x0, 0xC000040000, 0xC000050000], MAIN, 24)

    assert str(call.args) == "ch=chan int(nil), table=map[string]int(*), done=func()(*)"


def test_shared_label_is_used_as_pointer_marker() -> None:
    call = Call(
        func=Func("main.worker"),
        args=Args(values=[Arg(value=0xC000040000, name="#1"), Arg(value=0x0), Arg(value=0x0)]),
        src_path=MAIN,
        line=24,
    )
    augment([Goroutine(id=1, signature=Signature(stack=Stack(calls=[call])))], _cache())

    assert str(call.args) == "ch=chan int(#1), table=map[string]int(nil), done=func()(nil)"


def test_locally_declared_types_and_aliases() -> None:
    call = _augment_one(
        "example.com/shapes.Wait",
        [0x3B9ACA00, 0x41200000, 0xC000060000, 0xC000070000],
        SHAPES,
        19,
    )

    assert str(call.args) == "d=1000000000, temp=10, h=Handler(*)"


def test_grouped_params_and_unknown_type_stop_labelling() -> None:
    call = _augment_one(
        "example.com/shapes.Take",
        [0xFF, 0x2, 0xC000080000, 0x1, 0x4, 0x9],
        SHAPES,
        32,
    )

    assert str(call.args) == "a=-1, b=2, ids=IDs(*, len=1, cap=4), 0x9"
    assert call.args.values[-1].processed is None


def test_unknown_first_param_leaves_words_raw() -> None:
    call = _augment_one("example.com/shapes.Unknown", [0x10, 0x20], SHAPES, 35)

    assert str(call.args) == "0x10, 0x20"
    assert call.args.processed is False
    assert call.local_src_path == SHAPES


def test_elided_words_stop_labelling_without_decoding_past_marker() -> None:
    call = _augment_one(
        "example.com/shapes.Sum[...]",
        [0xC000090000, 0x3],
        SHAPES,
        26,
        elided=True,
    )

    assert str(call.args) == "0xc000090000, 0x3, ..."
    assert call.args.processed is False


def test_closure_frames_are_not_matched() -> None:
    call = _augment_one("example.com/shapes.Wait.func1", [0x1], SHAPES, 19)

    assert str(call.args) == "0x1"
    assert call.local_src_path == ""


def test_frames_without_source_degrade_to_raw() -> None:
    call = Call(
        func=Func("runtime.gopark"),
        args=Args(values=[Arg(value=0x1)]),
        src_path="/missing/proc.go",
        line=398,
    )

    augment([Goroutine(id=1, signature=Signature(stack=Stack(calls=[call])))])

    assert str(call.args) == "0x1"
    assert call.local_src_path == ""
