"""Tests for TOML configuration loading and saving."""

from pathlib import Path

import toml

from codecontext.config import CONFIG_FILENAME, DEFAULT_EXCLUDE_PATHS
from codecontext.config_manager import AnalysisConfig, find_config_file, load_config, save_config


def test_defaults():
    cfg = AnalysisConfig()

    assert cfg.max_files_analyze == 5000
    assert cfg.git_commit_limit == 1000
    assert cfg.enable_cache is True
    assert cfg.enable_parallel is True
    assert cfg.hotspot_count == 15
    assert cfg.learning_path_length == 20
    assert cfg.chunk_size == 100
    assert cfg.exclude_paths == DEFAULT_EXCLUDE_PATHS
    assert cfg.exclude_paths is not DEFAULT_EXCLUDE_PATHS


def test_missing_file_gives_defaults(temp_dir: Path):
    assert load_config(temp_dir / "nope.toml") == AnalysisConfig()
    assert load_config(None) == AnalysisConfig()


def test_load_ignores_unknown_keys(temp_dir: Path):
    path = temp_dir / CONFIG_FILENAME
    path.write_text(
        "[analysis]\nhotspot_count = 3\nenable_cache = false\nfuture_option = \"x\"\n",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.hotspot_count == 3
    assert cfg.enable_cache is False
    assert cfg.max_files_analyze == 5000


def test_invalid_toml_falls_back_to_defaults(temp_dir: Path, caplog):
    path = temp_dir / CONFIG_FILENAME
    path.write_text("[analysis\nbroken = ", encoding="utf-8")

    assert load_config(path) == AnalysisConfig()
    assert "Failed to parse config" in caplog.text


def test_save_preserves_other_tables(temp_dir: Path):
    path = temp_dir / CONFIG_FILENAME
    path.write_text("[report]\ntitle = \"Mine\"\n", encoding="utf-8")

    save_config(AnalysisConfig(hotspot_count=7), path)

    payload = toml.load(str(path))
    assert payload["report"]["title"] == "Mine"
    assert load_config(path).hotspot_count == 7


def test_find_config_file_prefers_project_root(temp_dir: Path, monkeypatch):
    monkeypatch.chdir(temp_dir)
    project = temp_dir / "project"
    project.mkdir()

    assert find_config_file(project) is None

    (temp_dir / CONFIG_FILENAME).write_text("", encoding="utf-8")
    assert find_config_file(project) == Path.cwd() / CONFIG_FILENAME

    (project / CONFIG_FILENAME).write_text("", encoding="utf-8")
    assert find_config_file(project) == project / CONFIG_FILENAME


def test_invalid_values_fall_back_to_defaults(temp_dir: Path, caplog):
    path = temp_dir / CONFIG_FILENAME
    path.write_text(
        "[analysis]\n"
        "chunk_size = 0\n"
        "max_files_analyze = \"lots\"\n"
        "hotspot_count = true\n"
        "enable_cache = \"yes\"\n"
        "exclude_paths = \"build\"\n"
        "git_commit_limit = 50\n",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.chunk_size == 100
    assert cfg.max_files_analyze == 5000
    assert cfg.hotspot_count == 15
    assert cfg.enable_cache is True
    assert cfg.exclude_paths == DEFAULT_EXCLUDE_PATHS
    assert cfg.git_commit_limit == 50
    assert "chunk_size" in caplog.text
    assert "max_files_analyze" in caplog.text


def test_from_dict_accepts_valid_values():
    cfg = AnalysisConfig.from_dict({"chunk_size": 8, "exclude_paths": ["gen"], "enable_parallel": False})

    assert cfg.chunk_size == 8
    assert cfg.exclude_paths == ["gen"]
    assert cfg.enable_parallel is False
