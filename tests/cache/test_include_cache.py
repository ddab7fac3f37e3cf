"""Tests for the cross-file include cache."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmakesense.cache.include_cache import IncludeCache, IncludeCacheEntry
from cmakesense.config.schema import EngineConfig
from cmakesense.parsers.cmake.parsing import IncludeReference


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _cache(**config) -> IncludeCache:
    config.setdefault("discover_modules", False)
    return IncludeCache(EngineConfig(**config))


def _include(name: str) -> IncludeReference:
    return IncludeReference("include", name)


def test_entry_from_text() -> None:
    """An entry records every kind of symbol a file declares."""

    text = "\n".join(
        [
            "set(LOCAL_VAR 1)",
            "set(ENV{TOOL_HOME} /opt/tool)",
            "option(USE_TOOL \"use it\" ON)",
            "function(tool_setup target)",
            "endfunction()",
            "macro(tool_flags)",
            "endmacro()",
        ]
    )
    entry = IncludeCacheEntry.from_text(Path("tool.cmake"), text)
    assert entry.variables == ("LOCAL_VAR",)
    assert entry.env_variables == ("TOOL_HOME",)
    assert entry.cache_variables == ("USE_TOOL",)
    assert entry.functions == ("tool_setup",)
    assert entry.macros == ("tool_flags",)
    assert entry.defines("TOOL_SETUP")
    assert not entry.defines("other")


def test_missing_include_does_not_hide_others(tmp_path: Path) -> None:
    """Unresolvable references are skipped; the rest still contribute."""

    _write(tmp_path / "present.cmake", "set(FROM_PRESENT 1)\n")
    cache = _cache()
    cache.rebuild([_include("missing"), _include("present")], tmp_path / "CMakeLists.txt")

    assert list(cache.entries) == [(tmp_path / "present.cmake").resolve()]
    assert cache.all_variables() == ["FROM_PRESENT"]


def test_unreadable_include_contributes_nothing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A file that cannot be read yields no symbols and no failure."""

    broken = _write(tmp_path / "broken.cmake", "set(NEVER 1)\n").resolve()
    _write(tmp_path / "good.cmake", "set(GOOD 1)\n")
    original = Path.read_text

    def fake_read_text(self, *args, **kwargs):
        if self == broken:
            raise PermissionError("denied")
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", fake_read_text)
    cache = _cache()
    cache.rebuild([_include("broken"), _include("good")], tmp_path / "CMakeLists.txt")

    assert cache.all_variables() == ["GOOD"]
    assert broken in cache.include_graph


def test_nested_includes(tmp_path: Path) -> None:
    """Includes inside included files are followed when enabled."""

    _write(tmp_path / "outer.cmake", "include(${CMAKE_CURRENT_LIST_DIR}/sub/inner.cmake)\n")
    _write(tmp_path / "sub" / "inner.cmake", "set(FROM_INNER 1)\n")
    root = tmp_path / "CMakeLists.txt"

    cache = _cache()
    cache.rebuild([_include("outer")], root)
    assert cache.all_variables() == ["FROM_INNER"]

    flat = _cache(follow_nested_includes=False)
    flat.rebuild([_include("outer")], root)
    assert flat.all_variables() == []

    shallow = _cache(max_include_depth=1)
    shallow.rebuild([_include("outer")], root)
    assert shallow.all_variables() == []


def test_include_cycles_terminate(tmp_path: Path) -> None:
    """Mutually including files are cached once and reported as a cycle."""

    a = _write(tmp_path / "a.cmake", "include(b)\nset(A_VAR 1)\n").resolve()
    b = _write(tmp_path / "b.cmake", "include(a)\nset(B_VAR 1)\n").resolve()
    cache = _cache()
    cache.rebuild([_include("a")], tmp_path / "CMakeLists.txt")

    assert set(cache.entries) == {a, b}
    assert sorted(cache.all_variables()) == ["A_VAR", "B_VAR"]
    cycles = cache.include_cycles()
    assert len(cycles) == 1
    assert set(cycles[0]) == {a, b}


def test_find_package_uses_modules_dir(tmp_path: Path) -> None:
    """find_package(Name) resolves to FindName.cmake in the modules directory."""

    modules = tmp_path / "modules"
    finder = _write(modules / "FindFoo.cmake", "set(Foo_INCLUDE_DIR /usr/include/foo)\n")
    project = tmp_path / "project"
    project.mkdir()

    cache = _cache(modules_dir=modules)
    assert cache.modules_dir == modules
    ref = IncludeReference("find_package", "Foo")
    assert cache.resolve(ref, project) == finder.resolve()

    cache.rebuild([ref], project / "CMakeLists.txt")
    assert cache.all_variables() == ["Foo_INCLUDE_DIR"]
    edge = cache.include_graph.edges[(project / "CMakeLists.txt").resolve(), finder.resolve()]
    assert edge["command"] == "find_package"


def test_resolve_skips_unexpanded_variables(tmp_path: Path) -> None:
    """References that still contain variables after expansion are dropped."""

    cache = _cache()
    assert cache.resolve(_include("${UNKNOWN_CMAKESENSE_DIR}/x.cmake"), tmp_path) is None


def test_max_file_size(tmp_path: Path) -> None:
    """Files larger than the configured limit are not read."""

    _write(tmp_path / "big.cmake", "set(BIG 1)\n" + "# padding\n" * 100)
    cache = _cache(max_file_size=64)
    cache.rebuild([_include("big")], tmp_path / "CMakeLists.txt")
    assert cache.all_variables() == []


def test_needs_rebuild(tmp_path: Path) -> None:
    """The cache is only stale when the references or file change."""

    root = tmp_path / "CMakeLists.txt"
    refs = [_include("a")]
    cache = _cache()
    assert cache.needs_rebuild(refs, root)
    cache.rebuild(refs, root)
    assert not cache.needs_rebuild(refs, root)
    assert cache.needs_rebuild([_include("b")], root)
    assert cache.needs_rebuild(refs, tmp_path / "other.cmake")


def test_merged_symbols_ignore_case(tmp_path: Path) -> None:
    """Symbols defined in several files are reported once."""

    _write(tmp_path / "one.cmake", "function(shared_fn)\nendfunction()\nset(COMMON 1)\n")
    _write(tmp_path / "two.cmake", "function(SHARED_FN)\nendfunction()\nset(common 2)\n")
    cache = _cache()
    cache.rebuild([_include("one"), _include("two")], tmp_path / "CMakeLists.txt")

    assert cache.all_functions() == ["shared_fn"]
    assert cache.all_variables() == ["COMMON"]
    with pytest.raises(TypeError):
        cache.entries[tmp_path] = None  # type: ignore[index]


def test_function_parameters_from_owner(tmp_path: Path) -> None:
    """Parameters of cached functions and macros are read from their file."""

    _write(
        tmp_path / "helpers.cmake",
        "function(add_tool name kind)\nendfunction()\nmacro(tool_flag flag)\nendmacro()\n",
    )
    cache = _cache()
    cache.rebuild([_include("helpers")], tmp_path / "CMakeLists.txt")

    assert cache.find_owner("ADD_TOOL").path == (tmp_path / "helpers.cmake").resolve()
    assert cache.get_function_parameters("add_tool") == ["name", "kind"]
    assert cache.get_function_parameters("tool_flag") == ["flag"]
    assert cache.get_function_parameters("unknown") is None


def test_overlong_include_name_is_skipped(tmp_path: Path) -> None:
    """A name the file system rejects is unresolvable, not fatal."""

    _write(tmp_path / "a.cmake", "set(FROM_A 1)\n")
    overlong = _include("x" * 300)
    cache = _cache()

    assert cache.resolve(overlong, tmp_path) is None
    cache.rebuild([_include("a"), overlong], tmp_path / "CMakeLists.txt")
    assert cache.all_variables() == ["FROM_A"]
    assert not cache.needs_rebuild([_include("a"), overlong], tmp_path / "CMakeLists.txt")


def test_resolve_tolerates_stat_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """OSError from the file check yields None."""

    def denied(self):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "is_file", denied)
    assert _cache().resolve(_include("a"), tmp_path) is None
    assert _cache().resolve(_include(str(tmp_path / "abs.cmake")), tmp_path) is None
