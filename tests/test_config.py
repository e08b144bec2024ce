from __future__ import annotations

import pytest
import yaml

from pydantic_models.config.workbook_layout_config import WorkbookLayoutConfig
from pydantic_models.config.xlsx_file_config import XlsxFileConfig


def _write_config(tmp_path, data: dict):
    path = tmp_path / "aktivitaeten_config.yaml"
    data.setdefault("logging", {"log_file": str(tmp_path / "test.log"), "log_level": "DEBUG"})
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return path


def test_defaults_without_file(fresh_config, tmp_path) -> None:
    config = fresh_config(tmp_path / "fehlt.yaml")

    assert config.files == []
    assert config.workbook.data_start_row == 7
    assert config.backup.max_backups == 50
    assert config.glossar.similarity_threshold == 0.75


def test_sections_are_parsed(fresh_config, tmp_path) -> None:
    path = _write_config(
        tmp_path,
        {
            "structure": {"xlsx_base_path": str(tmp_path)},
            "workbook": {"header_end_row": 13},
            "backup": {"max_backups": 10},
            "glossar": {"similarity_threshold": 0.8},
            "files": [{"path": str(tmp_path / "LV IDT 2025.xlsx"), "auftraggeber": "IDT", "jahr": 2025, "active": True}],
        },
    )

    config = fresh_config(path)

    assert config.workbook.data_start_row == 14
    assert config.backup.max_backups == 10
    assert config.glossar.similarity_threshold == 0.8
    assert config.files[0].client_name == "IDT"
    assert config.get("workbook.header_end_row") == 13
    assert config.get("workbook.nicht_da", "x") == "x"


def test_config_is_singleton(fresh_config, tmp_path) -> None:
    first = fresh_config(tmp_path / "fehlt.yaml")
    assert fresh_config(tmp_path / "fehlt.yaml") is first


def test_duplicate_active_files_rejected(fresh_config, tmp_path) -> None:
    path = _write_config(
        tmp_path,
        {
            "files": [
                {"path": "/lv/a.xlsx", "auftraggeber": "IDT", "jahr": 2025, "active": True},
                {"path": "/lv/b.xlsx", "auftraggeber": "idt", "jahr": 2025, "active": True},
            ]
        },
    )
    with pytest.raises(ValueError):
        fresh_config(path)


def test_save_files_round_trip(fresh_config, tmp_path) -> None:
    path = _write_config(tmp_path, {"backup": {"max_backups": 7}})
    config = fresh_config(path)

    config.save_files([XlsxFileConfig(path="/lv/a.xlsx", client_name="IDT", year=2025, active=True)])

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data["backup"] == {"max_backups": 7}
    assert data["files"] == [{"path": "/lv/a.xlsx", "auftraggeber": "IDT", "jahr": 2025, "active": True}]


def test_layout_validation() -> None:
    with pytest.raises(ValueError):
        WorkbookLayoutConfig(month_names=["Januar"])
    with pytest.raises(ValueError):
        WorkbookLayoutConfig(topic_col=1)
    with pytest.raises(ValueError):
        WorkbookLayoutConfig().month_sheet_name(13)
    assert WorkbookLayoutConfig().month_sheet_name(3) == "März"
