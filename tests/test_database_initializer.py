# ============================================================================
# SCHEMA INITIALIZER TESTS
# ============================================================================
# STATUS: Tests - DDL script and migration command initialization
# PURPOSE: Verify method selection, rollback mapping, exit status handling
# CREATED: 18 OCT 2026
# ============================================================================
"""
Schema Initializer Tests

DDL tests use a MagicMock repository. Migration tests run real child
processes via the current interpreter so exit codes and environment are
exercised end to end.

Run with:
    pytest tests/test_database_initializer.py -v
"""

import logging
import shlex
import sys
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.config.pipeline import PipelineConfig
from core.contracts import InitMethod
from core.errors import (
    ConfigurationError,
    DatabaseError,
    PipelineCancelledError,
    SchemaInitError,
)
from infrastructure.database_initializer import SchemaInitializer
from infrastructure.postgresql import ConnectionParams


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def params():
    return ConnectionParams(host="localhost", port=45432, dbname="setup", user="setup", password="s3cr3t")


@pytest.fixture
def repo():
    return MagicMock()


@pytest.fixture
def initializer():
    return SchemaInitializer(poll_interval=0.05, terminate_timeout=5.0)


def python_cmd(code: str) -> str:
    """Shell command running ``code`` with the current interpreter."""
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


# ============================================================================
# METHOD SELECTION
# ============================================================================

class TestInitialize:

    def test_ddl_script(self, initializer, repo, params, tmp_path):
        script = tmp_path / "schema.sql"
        script.write_text("CREATE TABLE order_item (id integer NOT NULL);", encoding="utf-8")
        config = PipelineConfig(ddl_script=script, output_dir=tmp_path, schema_name="public")

        assert initializer.initialize(config, repo, params) == InitMethod.DDL_SCRIPT
        repo.execute_script.assert_called_once_with("CREATE TABLE order_item (id integer NOT NULL);")

    def test_ddl_script_preferred_over_migration(self, initializer, repo, params, tmp_path):
        script = tmp_path / "schema.sql"
        script.write_text("SELECT 1;", encoding="utf-8")
        config = PipelineConfig(
            ddl_script=script,
            migration_cmd=python_cmd("raise SystemExit(3)"),
            output_dir=tmp_path,
            schema_name="public",
        )

        assert initializer.initialize(config, repo, params) == InitMethod.DDL_SCRIPT

    def test_migration(self, initializer, repo, params, tmp_path):
        config = PipelineConfig(
            migration_cmd=python_cmd("pass"),
            migration_working_dir=tmp_path,
            output_dir=tmp_path,
            schema_name="public",
        )

        assert initializer.initialize(config, repo, params) == InitMethod.MIGRATION_CMD
        repo.execute_script.assert_not_called()

    def test_no_method(self, initializer, repo, params, tmp_path):
        config = PipelineConfig(output_dir=tmp_path, schema_name="public")

        with pytest.raises(ConfigurationError, match="no initialization method"):
            initializer.initialize(config, repo, params)
        repo.execute_script.assert_not_called()


# ============================================================================
# DDL SCRIPT
# ============================================================================

class TestApplyDdlScript:

    def test_failed_script_raises_schema_init_error(self, initializer, repo, tmp_path):
        script = tmp_path / "bad.sql"
        script.write_text("CREATE TABLEE broken ();", encoding="utf-8")
        repo.execute_script.side_effect = DatabaseError("script execution failed: syntax error", "script execution")

        with pytest.raises(SchemaInitError, match="rolled back") as exc_info:
            initializer.apply_ddl_script(script, repo)

        assert isinstance(exc_info.value.__cause__, DatabaseError)

    def test_non_utf8_script(self, initializer, repo, tmp_path):
        script = tmp_path / "latin1.sql"
        script.write_bytes("-- café\nCREATE TABLE t (id integer);".encode("latin-1"))

        with pytest.raises(SchemaInitError, match="Cannot read DDL script") as exc_info:
            initializer.apply_ddl_script(script, repo)

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        repo.execute_script.assert_not_called()

    def test_missing_script(self, initializer, repo, tmp_path):
        with pytest.raises(SchemaInitError, match="Cannot read DDL script"):
            initializer.apply_ddl_script(tmp_path / "absent.sql", repo)
        repo.execute_script.assert_not_called()


# ============================================================================
# MIGRATION COMMAND
# ============================================================================

class TestRunMigration:

    def test_success(self, initializer, params, tmp_path):
        initializer.run_migration(python_cmd("print('migrated')"), tmp_path, params)

    def test_nonzero_exit(self, initializer, params, tmp_path):
        with pytest.raises(SchemaInitError) as exc_info:
            initializer.run_migration(python_cmd("raise SystemExit(3)"), tmp_path, params)

        assert exc_info.value.returncode == 3
        assert "status 3" in str(exc_info.value)

    def test_exports_connection_environment(self, initializer, params, tmp_path):
        code = (
            "import os, sys\n"
            "ok = (os.environ['PGPORT'] == '45432' and os.environ['PGUSER'] == 'setup'\n"
            "      and os.environ['DATABASE_URL'].startswith('postgresql://'))\n"
            "sys.exit(0 if ok else 9)"
        )
        initializer.run_migration(python_cmd(code), tmp_path, params)

    def test_runs_in_working_directory(self, initializer, params, tmp_path):
        work = tmp_path / "backend"
        work.mkdir()
        code = "import os; open('marker.txt', 'w').write(os.getcwd())"

        initializer.run_migration(python_cmd(code), work, params)

        assert (work / "marker.txt").exists()

    def test_output_forwarded_to_log(self, initializer, params, tmp_path, caplog):
        code = "import sys; print('applied 0001_init'); print('deprecated flag', file=sys.stderr)"

        with caplog.at_level(logging.INFO, logger="infrastructure.database_initializer.migration"):
            initializer.run_migration(python_cmd(code), tmp_path, params)

        records = {r.getMessage(): r.levelno for r in caplog.records}
        assert records.get("applied 0001_init") == logging.INFO
        assert records.get("deprecated flag") == logging.WARNING

    def test_missing_working_directory(self, initializer, params, tmp_path):
        with pytest.raises(SchemaInitError, match="Cannot start migration command"):
            initializer.run_migration(python_cmd("pass"), tmp_path / "absent", params)

    def test_cancel_terminates_child(self, initializer, params, tmp_path):
        event = threading.Event()
        event.set()

        with pytest.raises(PipelineCancelledError):
            initializer.run_migration(python_cmd("import time; time.sleep(30)"), tmp_path, params, event)
