from pathlib import Path

import pytest

from locatorscan import scanner
from locatorscan.config import ScanConfig
from locatorscan.project_discovery import ScanRootError, discover_sources
from locatorscan.scanner import collect_constant_table, scan_project

LOGIN_VUE = """<template>
  <form>
    <input name="email" placeholder="Email">
    <button :data-testid="TEST_IDS.LOGIN">Sign in</button>
  </form>
</template>
"""


def _write(path: Path, content: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


def _project(root: Path) -> Path:
    _write(root / "views" / "Login.vue", LOGIN_VUE)
    _write(root / "constants.ts", "export const TEST_IDS = {\n  LOGIN: 'login-btn',\n};\n")
    _write(root / "node_modules" / "pkg" / "Ignored.vue", '<button id="ignored">x</button>')
    _write(root / "notes.md", '<button id="not-a-template">')
    return root


def test_discover_sources_is_sorted_and_honours_ignores(tmp_path: Path) -> None:
    root = _project(tmp_path / "src")
    _write(root / "components" / "Nav.vue", "<nav></nav>")

    sources, failures = discover_sources(ScanConfig(root=root))

    assert [item.relative_path for item in sources] == ["components/Nav.vue", "constants.ts", "views/Login.vue"]
    assert failures == []


def test_discover_sources_can_skip_scripts(tmp_path: Path) -> None:
    root = _project(tmp_path / "src")
    sources, _ = discover_sources(ScanConfig(root=root, include_scripts=False))
    assert [item.relative_path for item in sources] == ["views/Login.vue"]


def test_scan_project_resolves_constants_across_files(tmp_path: Path) -> None:
    result = scan_project(ScanConfig(root=_project(tmp_path / "src")))

    login = result.files["views/Login.vue"]
    assert [record.key for record in login.records] == ["email", "email_input", "login_btn_dynamic"]
    assert login.by_key()["login_btn_dynamic"].selector == '[data-testid="login-btn"]'
    assert list(result.non_empty_files()) == ["views/Login.vue"]
    assert result.failures == ()


def test_unreadable_file_is_reported_and_others_still_scanned(tmp_path: Path) -> None:
    root = _project(tmp_path / "src")
    _write(root / "broken.vue", b'<button id="x">\xff\xfe</button>')

    result = scan_project(ScanConfig(root=root))

    assert [failure.path.name for failure in result.failures] == ["broken.vue"]
    assert "broken.vue" not in result.files
    assert result.files["views/Login.vue"].records
    stats = result.stats()
    assert stats.files_scanned == 3
    assert stats.files_failed == 1


def test_extraction_error_is_isolated_to_its_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    root = _project(tmp_path / "src")
    real_extract = scanner.extract_file_locators

    def flaky(relative_path, source, constants=None):
        if relative_path == "constants.ts":
            raise ValueError("boom")
        return real_extract(relative_path, source, constants)

    monkeypatch.setattr(scanner, "extract_file_locators", flaky)
    result = scan_project(ScanConfig(root=root))

    assert [failure.path.name for failure in result.failures] == ["constants.ts"]
    assert "extraction failed: boom" in result.failures[0].message
    assert "views/Login.vue" in result.files


def test_missing_or_file_root_raises(tmp_path: Path) -> None:
    with pytest.raises(ScanRootError):
        scan_project(ScanConfig(root=tmp_path / "missing"))

    not_a_dir = tmp_path / "file.vue"
    not_a_dir.write_text("<div></div>", encoding="utf-8")
    with pytest.raises(ScanRootError):
        scan_project(ScanConfig(root=not_a_dir))


def test_constant_table_reads_vue_script_blocks_in_path_order() -> None:
    texts = {
        "b/Late.vue": "<template></template>\n<script>\nconst LABEL = 'late';\n</script>",
        "a/early.ts": "export const LABEL = 'early';",
    }
    table = collect_constant_table(texts)

    assert table["LABEL"] == "early"
    assert table.origins["LABEL"] == "a/early.ts"
