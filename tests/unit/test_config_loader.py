from __future__ import annotations
import pytest
from pathlib import Path
from idcard_import.config.loader import ConfigError, ImportConfig, load_config
from idcard_import.models import RecordType


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.tokenizer == "naive"
    assert cfg.log_directory == "./logs"
    assert cfg.tables[RecordType.EMPLOYEE] == "staff_members"
    assert cfg.tables[RecordType.STUDENT] == "students"
    assert cfg.database.port == 5432
    assert cfg.database.dsn is None


def test_load_config_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ImportConfig()


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_invalid_yaml(write_config: Path):
    write_config.write_text("tokenizer: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "invalid yaml" in str(e.value)


def test_load_config_rejects_unknown_tokenizer(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("tokenizer: naive", "tokenizer: excel")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_rejects_unsafe_table(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("staff_members", "'staff; drop'")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)


def test_load_config_non_mapping(write_config: Path):
    write_config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)
