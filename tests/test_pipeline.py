from __future__ import annotations

import json
from pathlib import Path

import pytest

from pkgexports import generate_exports
from pkgexports.artifacts import BuildDirectoryError
from pkgexports.config import ExportsConfig
from pkgexports.manifest import ManifestError


def _write(path: Path, text: str = "export {};\n") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _package(root: Path, manifest: dict | None = None) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    path = root / "package.json"
    payload = manifest if manifest is not None else {"name": "demo", "version": "1.0.0"}
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    return path


def test_index_with_declaration_at_root_manifest(tmp_path: Path) -> None:
    pkg = _package(tmp_path)
    _write(tmp_path / "dist" / "index.js")
    _write(tmp_path / "dist" / "index.d.ts")

    result = generate_exports(Path("dist"), cwd=tmp_path)

    data = json.loads(pkg.read_text(encoding="utf-8"))
    assert data["exports"]["./index"] == {
        "import": "./dist/index.js",
        "require": "./dist/index.js",
        "types": "./dist/index.d.ts",
    }
    assert result.written is True
    assert result.manifest_path == pkg.resolve()
    assert result.keys == ["./index"]


def test_placeholder_module_is_left_out(tmp_path: Path) -> None:
    pkg = _package(tmp_path)
    _write(tmp_path / "dist" / "index.js")
    _write(tmp_path / "dist" / "internal" / "helper.js", "const token = '$RESERVED$';\n")

    result = generate_exports(tmp_path / "dist", cwd=tmp_path)

    exports = json.loads(pkg.read_text(encoding="utf-8"))["exports"]
    assert "./internal/helper" not in exports
    assert result.skipped_by_placeholder == ["internal/helper"]


def test_excluded_basename_is_dropped_in_every_directory(tmp_path: Path) -> None:
    _package(tmp_path)
    _write(tmp_path / "dist" / "foo.js")
    _write(tmp_path / "dist" / "bar" / "foo.js")
    _write(tmp_path / "dist" / "bar" / "baz.js")

    result = generate_exports(Path("dist"), cwd=tmp_path, config=ExportsConfig(exclude=["foo"]))

    assert result.keys == ["./bar/baz"]


def test_key_set_equals_modules_minus_exclusions(tmp_path: Path) -> None:
    _package(tmp_path)
    modules = ["a", "b/c", "b/d", "e/f/g", "skip", "nested/skip", "marked"]
    for module in modules:
        text = "$RESERVED$" if module == "marked" else "export {};"
        _write(tmp_path / "dist" / f"{module}.js", text)
    _write(tmp_path / "dist" / "types" / "only.d.ts")

    result = generate_exports(Path("dist"), cwd=tmp_path, config=ExportsConfig(exclude=["skip"]))

    expected = {f"./{m}" for m in modules + ["types/only"]} - {"./skip", "./nested/skip", "./marked"}
    assert set(result.keys) == expected
    assert result.exports["./types/only"].to_json() == {"types": "./dist/types/only.d.ts"}


def test_second_run_is_byte_identical(tmp_path: Path) -> None:
    pkg = _package(tmp_path, {"name": "demo", "exports": {"./old": "./old.js"}, "files": ["dist"]})
    _write(tmp_path / "dist" / "index.js")
    _write(tmp_path / "dist" / "index.d.ts")
    _write(tmp_path / "dist" / "utils" / "math.js")

    generate_exports(Path("dist"), cwd=tmp_path)
    first = pkg.read_bytes()
    second_result = generate_exports(Path("dist"), cwd=tmp_path)

    assert pkg.read_bytes() == first
    assert first.endswith(b"}\n")
    assert second_result.changed is False


def test_other_manifest_fields_are_untouched(tmp_path: Path) -> None:
    original = {
        "name": "demo",
        "version": "2.3.4",
        "exports": {"./legacy": {"import": "./legacy.js"}},
        "dependencies": {"left-pad": "^1.3.0"},
        "scripts": {"build": "tsc -p ."},
        "private": True,
    }
    pkg = _package(tmp_path, original)
    _write(tmp_path / "dist" / "index.js")

    generate_exports(Path("dist"), cwd=tmp_path)

    data = json.loads(pkg.read_text(encoding="utf-8"))
    assert list(data) == list(original)
    for key in ("name", "version", "dependencies", "scripts", "private"):
        assert data[key] == original[key]
    assert data["exports"] == {"./index": {"import": "./dist/index.js", "require": "./dist/index.js"}}


def test_nearest_package_manifest_is_used_for_relative_paths(tmp_path: Path) -> None:
    _package(tmp_path, {"name": "root", "private": True})
    pkg = _package(tmp_path / "packages" / "core", {"name": "core"})
    _write(tmp_path / "packages" / "core" / "lib" / "index.js")

    result = generate_exports(Path("packages/core/lib"), cwd=tmp_path)

    assert result.manifest_path == pkg.resolve()
    assert json.loads(pkg.read_text(encoding="utf-8"))["exports"] == {
        "./index": {"import": "./lib/index.js", "require": "./lib/index.js"}
    }


def test_dry_run_leaves_manifest_alone(tmp_path: Path) -> None:
    pkg = _package(tmp_path)
    before = pkg.read_bytes()
    _write(tmp_path / "dist" / "index.js")

    result = generate_exports(Path("dist"), cwd=tmp_path, write=False)

    assert pkg.read_bytes() == before
    assert result.written is False
    assert result.changed is True
    assert result.manifest["exports"]["./index"]["import"] == "./dist/index.js"


def test_missing_build_dir_fails_before_touching_manifest(tmp_path: Path) -> None:
    pkg = _package(tmp_path)
    before = pkg.read_bytes()

    with pytest.raises(BuildDirectoryError):
        generate_exports(Path("dist"), cwd=tmp_path)
    assert pkg.read_bytes() == before


def test_missing_manifest_is_fatal(tmp_path: Path) -> None:
    _write(tmp_path / "dist" / "index.js")
    with pytest.raises(ManifestError):
        generate_exports(Path("dist"), cwd=tmp_path)


def test_manifest_with_lone_surrogate_escape_survives_rewrite(tmp_path: Path) -> None:
    pkg = tmp_path / "package.json"
    pkg.write_text('{"name": "demo", "description": "bad \\ud800 escape"}\n', encoding="utf-8")
    _write(tmp_path / "dist" / "index.js")

    generate_exports(Path("dist"), cwd=tmp_path)

    data = json.loads(pkg.read_text(encoding="utf-8"))
    assert data["description"] == "bad \ud800 escape"
    assert list(data["exports"]) == ["./index"]


def _entry(name: str) -> dict[str, str]:
    return {"import": f"./dist/{name}.js", "require": f"./dist/{name}.js"}


def test_reordered_exports_count_as_changed(tmp_path: Path) -> None:
    _write(tmp_path / "dist" / "a.js")
    _write(tmp_path / "dist" / "b.js")
    _package(tmp_path, {"name": "demo", "exports": {"./b": _entry("b"), "./a": _entry("a")}})

    stale = generate_exports(Path("dist"), cwd=tmp_path, write=False)
    generate_exports(Path("dist"), cwd=tmp_path)
    fresh = generate_exports(Path("dist"), cwd=tmp_path, write=False)

    assert stale.changed is True
    assert fresh.changed is False
