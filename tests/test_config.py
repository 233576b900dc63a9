# ============================================================================
# CONFIGURATION TESTS
# ============================================================================
# STATUS: Tests - Config file loading and environment defaults
# PURPOSE: Verify PipelineConfig validation, file resolution, env overrides
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Tests

Covers:
1. PipelineConfig aliases, defaults and init method selection
2. load_config: resolution order and every failure mode
3. Defaults.from_env overrides

Run with:
    pytest tests/test_config.py -v
"""

import json
import logging
from pathlib import Path

import pytest

from core.config import (
    ContainerDefaults,
    DatabaseDefaults,
    Defaults,
    PipelineConfig,
    ReadinessDefaults,
    load_config,
    resolve_config_path,
)
from core.contracts import InitMethod
from core.errors import ConfigurationError


def write_config(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ============================================================================
# PIPELINE CONFIG MODEL
# ============================================================================

class TestPipelineConfig:

    def test_accepts_camel_case_keys(self):
        config = PipelineConfig.model_validate({
            "ddlScript": "schema.sql",
            "outputDir": "src/generated",
            "schemaName": "public",
        })

        assert config.ddl_script == Path("schema.sql")
        assert config.output_dir == Path("src/generated")
        assert config.schema_name == "public"
        assert config.migration_working_dir == Path(".")

    def test_output_file(self):
        config = PipelineConfig(ddl_script="x.sql", output_dir="out", schema_name="sales")
        assert config.output_file == Path("out") / "sales.ts"

    def test_ddl_script_selected(self):
        config = PipelineConfig(ddl_script="x.sql", output_dir="out", schema_name="public")
        assert config.require_init_method() == InitMethod.DDL_SCRIPT

    def test_migration_selected(self):
        config = PipelineConfig(migration_cmd="make migrate", output_dir="out", schema_name="public")
        assert config.require_init_method() == InitMethod.MIGRATION_CMD

    def test_ddl_script_wins_over_migration(self, caplog):
        config = PipelineConfig(
            ddl_script="x.sql",
            migration_cmd="make migrate",
            output_dir="out",
            schema_name="public",
        )
        with caplog.at_level(logging.WARNING):
            assert config.require_init_method() == InitMethod.DDL_SCRIPT
        assert "using ddlScript" in caplog.text

    def test_blank_values_mean_unset(self):
        config = PipelineConfig.model_validate({
            "ddlScript": "  ",
            "migrationCmd": "",
            "migrationWorkingDir": "",
            "outputDir": "out",
            "schemaName": "public",
        })
        assert config.init_method is None
        assert config.migration_working_dir == Path(".")

    def test_no_method_raises(self):
        config = PipelineConfig(output_dir="out", schema_name="public")
        with pytest.raises(ConfigurationError, match="Either ddlScript or migrationCmd"):
            config.require_init_method()

    def test_is_frozen(self):
        config = PipelineConfig(ddl_script="x.sql", output_dir="out", schema_name="public")
        with pytest.raises(Exception):
            config.schema_name = "other"


# ============================================================================
# LOADING
# ============================================================================

class TestLoadConfig:

    def test_loads_explicit_path(self, tmp_path):
        path = write_config(tmp_path / "app.json", {
            "migrationCmd": "npx knex migrate:latest",
            "migrationWorkingDir": "backend",
            "outputDir": "src/generated",
            "schemaName": "public",
        })

        config = load_config(path)

        assert config.migration_cmd == "npx knex migrate:latest"
        assert config.migration_working_dir == Path("backend")

    def test_env_var_used_without_explicit_path(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / "env.json", {
            "ddlScript": "x.sql", "outputDir": "out", "schemaName": "public",
        })
        monkeypatch.setenv("CONFIG", str(path))

        assert resolve_config_path() == path
        assert load_config().schema_name == "public"

    def test_default_file_in_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        write_config(tmp_path / ".tsooq.json", {
            "ddlScript": "x.sql", "outputDir": "out", "schemaName": "app",
        })

        assert load_config().schema_name == "app"

    def test_explicit_path_beats_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONFIG", str(tmp_path / "env.json"))
        assert resolve_config_path(tmp_path / "cli.json") == tmp_path / "cli.json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_config(path)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes('{"schemaName": "café"}'.encode("latin-1"))

        with pytest.raises(ConfigurationError, match="could not be read") as exc_info:
            load_config(path)

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_not_an_object(self, tmp_path):
        path = write_config(tmp_path / "list.json", ["ddlScript"])
        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(path)

    def test_missing_schema_name(self, tmp_path):
        path = write_config(tmp_path / "c.json", {"ddlScript": "x.sql", "outputDir": "out"})
        with pytest.raises(ConfigurationError, match="schemaName"):
            load_config(path)

    def test_missing_init_method(self, tmp_path):
        path = write_config(tmp_path / "c.json", {"outputDir": "out", "schemaName": "public"})
        with pytest.raises(ConfigurationError, match="Either ddlScript or migrationCmd"):
            load_config(path)


# ============================================================================
# DEFAULTS
# ============================================================================

class TestDefaults:

    def test_builtin_values(self):
        defaults = Defaults()
        assert defaults.container.image_ref == "postgres:12.4-alpine"
        assert defaults.container.container_name == "db-setup"
        assert defaults.container.host_port == 45432
        assert defaults.database.user == "setup"
        assert defaults.database.database == "setup"
        assert defaults.readiness.interval_seconds == 1.0
        assert defaults.readiness.timeout_seconds == 60.0
        assert defaults.readiness.max_attempts is None

    def test_container_env(self):
        env = DatabaseDefaults(user="u", password="p", database="d").container_env()
        assert env == ["POSTGRES_USER=u", "POSTGRES_PASSWORD=p", "POSTGRES_DB=d"]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TSOOQ_DB_IMAGE_TAG", "15-alpine")
        monkeypatch.setenv("TSOOQ_DB_PORT", "55432")
        monkeypatch.setenv("TSOOQ_DB_PASSWORD", "other")
        monkeypatch.setenv("TSOOQ_READY_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("TSOOQ_READY_MAX_ATTEMPTS", "3")

        defaults = Defaults.from_env()

        assert defaults.container.image_ref == "postgres:15-alpine"
        assert defaults.container.host_port == 55432
        assert defaults.database.password == "other"
        assert defaults.readiness.timeout_seconds == 5.0
        assert defaults.readiness.max_attempts == 3

    def test_summary_hides_password(self):
        summary = Defaults(database=DatabaseDefaults(password="hunter2")).summary()
        assert "hunter2" not in str(summary)

    def test_frozen(self):
        with pytest.raises(Exception):
            ContainerDefaults().host_port = 1
        with pytest.raises(Exception):
            ReadinessDefaults().timeout_seconds = 1
