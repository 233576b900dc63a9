# ============================================================================
# CLI TESTS
# ============================================================================
# STATUS: Tests - tsooq-gen command line
# PURPOSE: Verify argument handling and exit code mapping
# CREATED: 18 OCT 2026
# ============================================================================
"""
CLI Tests

The coordinator, logging setup and signal handlers are patched.

Run with:
    pytest tests/test_cli.py -v
"""

import json
import signal
import threading
from unittest.mock import MagicMock, patch

import pytest

import main
from core.errors import PipelineCancelledError, SchemaInitError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "tsooq.json"
    path.write_text(json.dumps({
        "ddlScript": "schema.sql",
        "outputDir": str(tmp_path / "out"),
        "schemaName": "public",
    }), encoding="utf-8")
    return path


@pytest.fixture
def cli():
    """Patch process-wide side effects of main()."""
    with patch("main.configure_logging") as configure, \
            patch("main._install_signal_handlers") as install, \
            patch("main.PipelineCoordinator") as coordinator_cls:
        yield MagicMock(configure=configure, install=install, coordinator_cls=coordinator_cls)


class TestMain:

    def test_success(self, cli, config_file):
        cli.coordinator_cls.return_value.run.return_value = MagicMock(output_path="out/public.ts", tables=["a"])

        assert main.main(["--config", str(config_file)]) == main.EXIT_OK

        config = cli.coordinator_cls.call_args.args[0]
        assert config.schema_name == "public"
        assert cli.coordinator_cls.call_args.kwargs["keep_container"] is False

    def test_keep_container_flag(self, cli, config_file):
        main.main(["--config", str(config_file), "--keep-container"])
        assert cli.coordinator_cls.call_args.kwargs["keep_container"] is True

    def test_verbose_and_json_logs(self, cli, config_file):
        main.main(["--config", str(config_file), "-v", "--json-logs"])
        cli.configure.assert_called_once_with(level="DEBUG", json_output=True)

    def test_missing_config_exits_1(self, cli, tmp_path):
        assert main.main(["--config", str(tmp_path / "absent.json")]) == main.EXIT_FAILED
        cli.coordinator_cls.assert_not_called()

    def test_undecodable_config_exits_1(self, cli, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes('{"ddlScript": "é.sql"}'.encode("latin-1"))

        assert main.main(["--config", str(path)]) == main.EXIT_FAILED
        cli.coordinator_cls.assert_not_called()

    def test_pipeline_error_exits_1(self, cli, config_file):
        cli.coordinator_cls.return_value.run.side_effect = SchemaInitError("bad ddl")
        assert main.main(["--config", str(config_file)]) == main.EXIT_FAILED

    def test_cancelled_exits_130(self, cli, config_file):
        cli.coordinator_cls.return_value.run.side_effect = PipelineCancelledError("Run cancelled")
        assert main.main(["--config", str(config_file)]) == main.EXIT_CANCELLED

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["--version"])
        assert exc_info.value.code == 0
        assert "tsooq-gen" in capsys.readouterr().out


class TestSignalHandlers:

    def test_signal_sets_cancel_event(self):
        event = threading.Event()
        previous = signal.getsignal(signal.SIGINT)
        try:
            main._install_signal_handlers(event)
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
        finally:
            signal.signal(signal.SIGINT, previous)
            if hasattr(signal, "SIGTERM"):
                signal.signal(signal.SIGTERM, signal.SIG_DFL)

        assert event.is_set()
