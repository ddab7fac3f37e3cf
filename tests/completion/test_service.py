"""Tests for the buffer-level completion and call-tip entry points."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cmakesense.completion.service import BufferSession, ParseReason, ParseRequest, locate_token, parse_source
from cmakesense.completion.signatures import Signature
from cmakesense.config.schema import EngineConfig
from cmakesense.parsers.cmake.tokens import TokenKind

TARGETS = [
    "add_executable(app main.cpp)",
    "add_library(lib1 a.cpp)",
    "add_library(lib2 b.cpp)",
    "set(MY_VAR 1)",
]


def _session(tmp_path: Path, lines: list[str], **config) -> BufferSession:
    config.setdefault("discover_modules", False)
    return BufferSession(
        tmp_path / "CMakeLists.txt", text="\n".join(lines), config=EngineConfig(**config)
    )


def test_locate_token_uses_character_before_caret() -> None:
    """The token containing column - 1 is the triggering token."""

    lines = ["set(FOO bar)"]
    assert locate_token(lines, 0, 4).token.kind is TokenKind.OPEN_PAREN
    assert locate_token(lines, 0, 5).text == "FOO"
    assert locate_token(lines, 0, 0) is None
    assert locate_token(lines, 3, 1) is None


def test_open_paren_completes_targets(tmp_path: Path) -> None:
    """Typing the opening parenthesis runs the command's strategy."""

    session = _session(tmp_path, TARGETS + ["target_link_libraries("])
    result = session.complete(4, 22)
    assert result.names == ["app", "lib1", "lib2"]


def test_whitespace_completes_with_prior_arguments(tmp_path: Path) -> None:
    """An argument boundary passes the typed arguments to the strategy."""

    session = _session(tmp_path, TARGETS + ["target_link_libraries(app "])
    assert session.complete(4, 26).names == ["lib1", "lib2"]
    assert session.complete(4, 26, TokenKind.WHITESPACE).names == ["lib1", "lib2"]


def test_token_kind_mismatch_yields_nothing(tmp_path: Path) -> None:
    """A host token kind that disagrees with the scan produces no result."""

    session = _session(tmp_path, TARGETS + ["target_link_libraries(app "])
    assert session.complete(4, 26, TokenKind.OPEN_PAREN) is None


def test_whitespace_without_boundary_yields_nothing(tmp_path: Path) -> None:
    """Whitespace that separates no arguments does not trigger completion."""

    session = _session(tmp_path, ["target_link_libraries( "])
    assert session.complete(0, 23) is None


def test_variable_completion(tmp_path: Path) -> None:
    """``${`` lists CMake variables and ``$ENV{`` environment variables."""

    session = _session(tmp_path, TARGETS + ["set(ENV{MY_ENV} 1)", "message(${", "message($ENV{"])

    variables = session.complete(5, 10)
    assert "MY_VAR" in variables
    assert "CMAKE_BUILD_TYPE" in variables
    assert "MY_ENV" not in variables

    env = session.complete(6, 13, TokenKind.VARIABLE_START_ENV)
    assert "MY_ENV" in env
    assert "HOME" in env


def test_command_completion_at_top_level(tmp_path: Path) -> None:
    """A word outside any argument list lists commands and user functions."""

    session = _session(tmp_path, ["macro(my_macro)", "endmacro()", "add_"])
    result = session.complete(2, 4)
    assert "add_executable" in result
    assert "my_macro" in result

    inside = _session(tmp_path, ["set(add_"])
    assert inside.complete(0, 8) is None


def test_command_signature(tmp_path: Path) -> None:
    """Known commands get their documented signature."""

    session = _session(tmp_path, ["add_executable(app main.cpp)"])
    signature = session.signature(0, 21)
    assert isinstance(signature, Signature)
    assert signature.display == "add_executable(name source1 source2 ...)"
    assert signature.current_parameter == 1
    assert signature.active_parameter == "source1 source2 ..."
    assert signature.end_span is not None


def test_subcommand_signature(tmp_path: Path) -> None:
    """Subcommands are part of the displayed name."""

    session = _session(tmp_path, ["file(GLOB SRCS *.cpp)"])
    signature = session.signature(0, 10)
    assert signature.command_name == "file(GLOB"
    assert signature.open_bracket == " "
    assert signature.parameters == ("variable", "glob1 glob2 ...")
    assert signature.current_parameter == 0


def test_open_subcommand_falls_back_to_command(tmp_path: Path) -> None:
    """Subcommands without a fixed shape yield no signature of their own."""

    session = _session(tmp_path, ["install(TARGETS app)"])
    assert session.signature(0, 16) is None


def test_user_function_signature_from_buffer(tmp_path: Path) -> None:
    """Functions defined in the buffer get their declared parameters."""

    lines = ["function(my_func first second)", "endfunction()", "my_func(a "]
    signature = _session(tmp_path, lines).signature(2, 10)
    assert signature.command_name == "my_func"
    assert signature.parameters == ("first", "second")
    assert signature.current_parameter == 1


def test_user_function_signature_from_include(tmp_path: Path) -> None:
    """Functions defined in included files are found through the include cache."""

    (tmp_path / "helpers.cmake").write_text(
        "function(helper_fn alpha beta)\nendfunction()\n", encoding="utf-8"
    )
    session = _session(tmp_path, ["include(helpers)", "helper_fn("])
    signature = session.signature(1, 10)
    assert signature is not None
    assert signature.parameters == ("alpha", "beta")


def test_unknown_command_has_no_signature(tmp_path: Path) -> None:
    """Commands that are neither built in nor defined have no signature."""

    assert _session(tmp_path, ["mystery(a b)"]).signature(0, 9) is None


def test_parse_source_dispatches_on_reason(tmp_path: Path) -> None:
    """ParseRequest selects completion or call tips."""

    session = _session(tmp_path, TARGETS + ["target_link_libraries(app "])
    path = session.file_path

    completion = session.parse_source(ParseRequest(path, 4, 26))
    assert completion.names == ["lib1", "lib2"]

    tip = session.parse_source(ParseRequest(path, 4, 26, ParseReason.PARAMETER_INFO))
    assert tip.command_name == "target_link_libraries"


def test_parse_source_logs_and_swallows_failures(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Unexpected engine errors are logged and produce no result."""

    session = _session(tmp_path, TARGETS)

    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(session, "complete", boom)
    with caplog.at_level(logging.ERROR, logger="cmakesense.completion.service"):
        assert session.parse_source(ParseRequest(session.file_path, 0, 1)) is None
    assert "Failed to answer" in caplog.text


def test_module_parse_source(tmp_path: Path) -> None:
    """The one-shot entry point reads the file and tolerates missing ones."""

    path = tmp_path / "CMakeLists.txt"
    path.write_text("\n".join(TARGETS + ["target_link_libraries(app "]), encoding="utf-8")
    config = EngineConfig(discover_modules=False)

    result = parse_source(ParseRequest(path, 4, 26), config=config)
    assert result.names == ["lib1", "lib2"]

    missing = ParseRequest(tmp_path / "missing" / "CMakeLists.txt", 0, 1)
    assert parse_source(missing, config=config) is None


def test_include_cache_follows_text_updates(tmp_path: Path) -> None:
    """Changing the include references rebuilds the include cache."""

    (tmp_path / "a.cmake").write_text("set(VAR_A 1)\n", encoding="utf-8")
    (tmp_path / "b.cmake").write_text("set(VAR_B 1)\n", encoding="utf-8")
    session = _session(tmp_path, ["include(a)", "message(${"])

    assert "VAR_A" in session.complete(1, 10)

    session.update_text("include(b.cmake)\nmessage(${")
    variables = session.complete(1, 10)
    assert "VAR_B" in variables
    assert "VAR_A" not in variables


def test_overlong_include_keeps_completion_working(tmp_path: Path) -> None:
    """One unresolvable include does not disable completion for the buffer."""

    (tmp_path / "a.cmake").write_text("set(VAR_A 1)\n", encoding="utf-8")
    session = _session(tmp_path, ["include(a)", f"include({'x' * 300})", "file("])

    result = session.parse_source(ParseRequest(session.file_path, 2, 5))
    assert result is not None
    assert "GLOB" in result


def test_form_feed_does_not_shift_lines(tmp_path: Path) -> None:
    """Line numbers match a host that counts newline characters."""

    (tmp_path / "util.cpp").write_text("", encoding="utf-8")
    session = BufferSession(
        tmp_path / "CMakeLists.txt",
        text="# page\x0cbreak\nadd_executable(app main.cpp ",
        config=EngineConfig(discover_modules=False),
    )
    assert len(session.lines) == 2
    result = session.complete(1, 28)
    assert result is not None
    assert "util.cpp" in result
