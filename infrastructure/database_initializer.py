# ============================================================================
# SCHEMA INITIALIZER
# ============================================================================
# STATUS: Infrastructure - Bring the disposable database to its target schema
# PURPOSE: Apply a DDL script in one transaction or run a migration command
# CREATED: 18 OCT 2026
# ============================================================================
"""
SchemaInitializer - bring a fresh database to the project's schema.

Two methods, chosen by PipelineConfig (first match wins):

1. ddlScript: the whole file is sent as one batch inside BEGIN/COMMIT on a
   single pooled connection. Any failure rolls the transaction back, so the
   database is left exactly as it was.
2. migrationCmd: the command runs through the shell in migrationWorkingDir
   with PGHOST/PGPORT/PGDATABASE/PGUSER/PGPASSWORD/DATABASE_URL pointing at
   the disposable database. Output is forwarded to the log line by line. A
   non-zero exit status is a failure.

With neither configured, ConfigurationError is raised before any database
access.

Usage:
    initializer = SchemaInitializer()
    method = initializer.initialize(config, repo, params)
"""

import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import Callable, IO, Optional

from core.config.pipeline import PipelineConfig
from core.contracts import InitMethod
from core.errors import (
    ConfigurationError,
    DatabaseError,
    PipelineCancelledError,
    SchemaInitError,
)
from infrastructure.postgresql import ConnectionParams, PostgreSQLRepository

logger = logging.getLogger(__name__)
child_logger = logging.getLogger(f"{__name__}.migration")


def _forward_stream(stream: IO[str], emit: Callable[[str], None]) -> None:
    """Forward each line of a child process stream to ``emit``."""
    try:
        for line in stream:
            line = line.rstrip("\r\n")
            if line:
                emit(line)
    finally:
        stream.close()


class SchemaInitializer:
    """
    Apply the configured schema initialization to the disposable database.

    Holds no per-run state.
    """

    def __init__(self, poll_interval: float = 0.5, terminate_timeout: float = 10.0):
        """
        Args:
            poll_interval: How often a running migration checks for cancellation
            terminate_timeout: Grace period after terminate() before kill()
        """
        self.poll_interval = poll_interval
        self.terminate_timeout = terminate_timeout

    def initialize(
        self,
        config: PipelineConfig,
        repository: PostgreSQLRepository,
        params: ConnectionParams,
        cancel_event: Optional[threading.Event] = None,
    ) -> InitMethod:
        """
        Initialize the schema using the configured method.

        Args:
            config: Pipeline configuration
            repository: Open repository for the disposable database
            params: Connection parameters (exported to migration commands)
            cancel_event: Optional event that aborts a running migration

        Returns:
            The InitMethod that was applied

        Raises:
            ConfigurationError: No initialization method configured
            SchemaInitError: Script failed (rolled back) or migration failed
            PipelineCancelledError: cancel_event set during migration
        """
        method = config.init_method

        if method == InitMethod.DDL_SCRIPT:
            self.apply_ddl_script(config.ddl_script, repository)
        elif method == InitMethod.MIGRATION_CMD:
            self.run_migration(
                config.migration_cmd,
                config.migration_working_dir,
                params,
                cancel_event=cancel_event,
            )
        else:
            raise ConfigurationError("no initialization method", stage="initialize_schema")

        return method

    # ========================================================================
    # DDL SCRIPT
    # ========================================================================

    def apply_ddl_script(self, script_path: Path, repository: PostgreSQLRepository) -> None:
        """
        Execute a DDL script as a single transaction.

        Raises:
            SchemaInitError: File unreadable, or any statement failed (the
                transaction has been rolled back)
        """
        logger.info(f"Running sql script {script_path}...")

        try:
            script = Path(script_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SchemaInitError(f"Cannot read DDL script {script_path}: {e}") from e

        try:
            repository.execute_script(script)
        except DatabaseError as e:
            raise SchemaInitError(f"DDL script {script_path} failed, rolled back: {e}") from e

        logger.info(f"   Script {script_path} committed")

    # ========================================================================
    # MIGRATION COMMAND
    # ========================================================================

    def run_migration(
        self,
        command: str,
        working_dir: Path,
        params: ConnectionParams,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """
        Run a migration shell command against the disposable database.

        Raises:
            SchemaInitError: Command could not start or exited non-zero
            PipelineCancelledError: cancel_event set while running
        """
        cancel_event = cancel_event or threading.Event()
        logger.info(f"Running migration command: {command} (cwd={working_dir})")

        env = {**os.environ, **params.libpq_env()}

        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                cwd=str(working_dir),
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise SchemaInitError(f"Cannot start migration command '{command}': {e}") from e

        readers = [
            threading.Thread(target=_forward_stream, args=(proc.stdout, child_logger.info), daemon=True),
            threading.Thread(target=_forward_stream, args=(proc.stderr, child_logger.warning), daemon=True),
        ]
        for reader in readers:
            reader.start()

        try:
            returncode = self._wait(proc, cancel_event)
        finally:
            for reader in readers:
                reader.join(timeout=self.terminate_timeout)

        if returncode != 0:
            raise SchemaInitError(
                f"Migration command '{command}' exited with status {returncode}",
                returncode=returncode,
            )

        logger.info("   Migration command completed")

    def _wait(self, proc: subprocess.Popen, cancel_event: threading.Event) -> int:
        """Wait for the child, terminating it if the run is cancelled."""
        while True:
            try:
                return proc.wait(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                if not cancel_event.is_set():
                    continue

            logger.warning("Cancellation requested - terminating migration command")
            proc.terminate()
            try:
                proc.wait(timeout=self.terminate_timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
            raise PipelineCancelledError("Cancelled during migration command", stage="initialize_schema")


__all__ = [
    "SchemaInitializer",
]
