"""Tests for core.output_manager.OutputManager."""

import json
from datetime import datetime, timedelta

import pytest

from core.output_manager import OutputManager


def test_run_dir_name_is_timestamped_and_sanitized(tmp_path):
    manager = OutputManager(str(tmp_path), "Menu Seed/Prod", retention_days=30)
    run_dir = manager.create_run_dir()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path
    assert run_dir.name.endswith("_Menu_Seed_Prod")
    datetime.strptime(run_dir.name[:13], "%Y%m%d_%H%M")


def test_write_json(tmp_path):
    manager = OutputManager(str(tmp_path), "Menu_Catalog_Seed")
    manager.create_run_dir()
    path = manager.write_json("seed_results.json", {"success": True, "at": datetime(2026, 1, 1)})
    saved = json.loads(path.read_text())
    assert saved["success"] is True
    assert saved["at"].startswith("2026-01-01")


def test_write_json_requires_run_dir(tmp_path):
    manager = OutputManager(str(tmp_path), "Menu_Catalog_Seed")
    with pytest.raises(RuntimeError):
        manager.write_json("seed_results.json", {})


def test_cleanup_removes_only_old_run_folders(tmp_path):
    old = (datetime.now() - timedelta(days=40)).strftime("%Y%m%d_%H%M")
    recent = datetime.now().strftime("%Y%m%d_%H%M")
    (tmp_path / f"{old}_Menu_Catalog_Seed").mkdir()
    (tmp_path / f"{recent}_Menu_Catalog_Seed").mkdir()
    (tmp_path / "notes").mkdir()

    manager = OutputManager(str(tmp_path), "Menu_Catalog_Seed", retention_days=30)
    assert manager.cleanup_old_folders() == 1
    remaining = sorted(p.name for p in tmp_path.iterdir())
    assert remaining == sorted([f"{recent}_Menu_Catalog_Seed", "notes"])


def test_cleanup_disabled_with_zero_retention(tmp_path):
    (tmp_path / "20000101_0000_Menu_Catalog_Seed").mkdir()
    manager = OutputManager(str(tmp_path), "Menu_Catalog_Seed", retention_days=0)
    assert manager.cleanup_old_folders() == 0


def test_cleanup_missing_base_dir(tmp_path):
    manager = OutputManager(str(tmp_path / "missing"), "Menu_Catalog_Seed")
    assert manager.cleanup_old_folders() == 0
