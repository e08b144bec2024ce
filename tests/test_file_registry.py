from __future__ import annotations

import asyncio

import pytest

from pydantic_models.config.xlsx_file_config import XlsxFileConfig
from shared_modules.file_registry import FileRegistry
from shared_modules.file_scanner import extract_file_info, scan_directory


@pytest.fixture
def registry() -> FileRegistry:
    changes = []
    registry = FileRegistry(
        [
            XlsxFileConfig(path="/lv/LV IDT 2025.xlsx", client_name="IDT", year=2025, active=True),
            XlsxFileConfig(path="/lv/LV IDT 2024.xlsx", client_name="IDT", year=2024, active=True),
            XlsxFileConfig(path="/lv/LV ABC 2025.xlsx", client_name="ABC", year=2025),
        ],
        on_change=changes.append,
    )
    registry.changes = changes
    return registry


def test_active_files(registry) -> None:
    assert [f.path for f in registry.active_files()] == ["/lv/LV IDT 2025.xlsx", "/lv/LV IDT 2024.xlsx"]


def test_find_file_for_client(registry) -> None:
    assert registry.find_file_for_client("  idt ", 2025).path == "/lv/LV IDT 2025.xlsx"
    assert registry.find_file_for_client("IDT", 2024).path == "/lv/LV IDT 2024.xlsx"
    assert registry.find_file_for_client("IDT", 2023) is None
    # inaktive Dateien zählen nicht
    assert registry.find_file_for_client("ABC", 2025) is None


def test_upsert_activation_deactivates_others(registry) -> None:
    registry.upsert("/lv/LV IDT 2025 neu.xlsx", client_name="idt", year=2025, active=True)

    assert registry.find_file_for_client("IDT", 2025).path == "/lv/LV IDT 2025 neu.xlsx"
    assert [f.path for f in registry.active_files()] == ["/lv/LV IDT 2024.xlsx", "/lv/LV IDT 2025 neu.xlsx"]
    assert len(registry.changes) == 1


def test_upsert_updates_existing(registry) -> None:
    updated = registry.upsert("/lv/LV ABC 2025.xlsx", active=True)

    assert updated.active
    assert len(registry.files) == 3
    assert registry.find_file_for_client("abc", 2025) == updated


def test_remove(registry) -> None:
    registry.remove("/lv/LV IDT 2024.xlsx")
    assert registry.find_file_for_client("IDT", 2024) is None
    assert len(registry.changes) == 1


def test_config_aliases() -> None:
    cfg = XlsxFileConfig(**{"path": "/lv/a.xlsx", "auftraggeber": " IDT ", "jahr": 2025})
    assert cfg.client_name == "IDT"
    assert cfg.registry_key == ("idt", 2025)
    assert not cfg.active
    assert cfg.model_dump(by_alias=True)["auftraggeber"] == "IDT"


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("LV IDT 2025.xlsx", ("IDT", 2025)),
        ("LV IDT 2 0 2 6.xlsx", ("IDT", 2026)),
        ("LV ABC Corp 25.xlsx", ("ABC Corp", 2025)),
        ("LVMüller2024.xlsx", ("Müller", 2024)),
        ("Notizen.xlsx", (None, None)),
        ("LV 2025.xlsx", (None, 2025)),
    ],
)
def test_extract_file_info(filename, expected) -> None:
    assert extract_file_info(filename) == expected


def test_scan_directory(tmp_path) -> None:
    (tmp_path / "LV IDT 2025.xlsx").write_bytes(b"")
    (tmp_path / "LV Foo.xlsx").write_bytes(b"")
    (tmp_path / "Notizen.xlsx").write_bytes(b"")
    (tmp_path / "LV Ordner.xlsx").mkdir()

    found = asyncio.run(scan_directory(tmp_path))

    assert [f.filename for f in found] == ["LV Foo.xlsx", "LV IDT 2025.xlsx"]
    assert found[0].client_name is None
    assert (found[1].client_name, found[1].year) == ("IDT", 2025)


def test_find_file_ignores_inner_whitespace() -> None:
    registry = FileRegistry(
        [XlsxFileConfig(path="/lv/LV ABC Corp 2025.xlsx", client_name="ABC   Corp", year=2025, active=True)]
    )
    assert registry.find_file_for_client(" abc corp ", 2025).path == "/lv/LV ABC Corp 2025.xlsx"


def test_upsert_revalidates_client_name() -> None:
    registry = FileRegistry([XlsxFileConfig(path="/lv/a.xlsx", client_name="IDT", year=2025)])

    updated = registry.upsert("/lv/a.xlsx", client_name="  ABC  ", active=True)

    assert updated.client_name == "ABC"
    assert registry.find_file_for_client("abc", 2025) is updated


def test_registry_key_collapses_whitespace() -> None:
    cfg = XlsxFileConfig(path="/lv/a.xlsx", client_name="ABC  Corp", year=2025)
    assert cfg.registry_key == ("abc corp", 2025)
