# ============================================================================
# PIPELINE COORDINATOR
# ============================================================================
# STATUS: Service - Sequences one model generation run
# PURPOSE: container -> ready -> schema -> introspect -> emit -> teardown
# CREATED: 18 OCT 2026
# ============================================================================
"""
PipelineCoordinator - one generation run, start to finish.

Provides the workflow behind ``tsooq-gen``:
1. Validate config (fails before any container work)
2. Pull the postgres image
3. Create and start the container on the fixed host port
4. Wait until the database accepts connections
5. Initialize the schema (DDL script or migration command)
6. Introspect base tables, sorted by name
7. Emit <outputDir>/<schemaName>.ts
8. Stop and delete the container

Steps run strictly one after another. Once the container exists its
teardown runs on every exit path; a teardown failure during an already
failing run is logged and never replaces the original error. Failures
propagate unchanged; ``coordinator.result`` keeps the step history.

Usage:
    config = load_config()
    result = PipelineCoordinator(config).run()
    print(result.output_path)
"""

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from core.config.defaults import Defaults
from core.config.pipeline import PipelineConfig
from core.contracts import PipelineStage, StepStatus
from core.errors import ContainerError, PipelineCancelledError, PipelineError
from core.logging import ComponentType, log_checkpoint, log_context
from core.models.catalog import TableDefinition
from core.schema.model_generator import TypeScriptModelGenerator
from infrastructure.database_initializer import SchemaInitializer
from infrastructure.docker_engine import ContainerHandle, ContainerSpec, DockerEngineClient
from infrastructure.introspection import SchemaIntrospector
from infrastructure.postgresql import ConnectionParams, PostgreSQLRepository
from infrastructure.readiness import ReadinessPoller

logger = logging.getLogger(__name__)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class StepResult:
    """Result of a single pipeline step."""
    name: str
    status: str  # 'pending', 'success', 'failed', 'skipped'
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    duration_seconds: float = 0.0


@dataclass
class PipelineResult:
    """Complete result of one generation run."""
    run_id: str
    schema_name: str
    timestamp: str
    success: bool = False
    stage: PipelineStage = PipelineStage.INIT
    output_path: Optional[str] = None
    tables: List[str] = field(default_factory=list)
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def step(self, name: str) -> Optional[StepResult]:
        """Most recent step with ``name``."""
        for step in reversed(self.steps):
            if step.name == name:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "schema_name": self.schema_name,
            "timestamp": self.timestamp,
            "success": self.success,
            "stage": self.stage.value,
            "output_path": self.output_path,
            "tables": list(self.tables),
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "message": s.message,
                    "error": s.error,
                    "details": s.details,
                    "duration_seconds": s.duration_seconds,
                }
                for s in self.steps
            ],
            "errors": self.errors,
            "warnings": self.warnings,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == StepStatus.SUCCESS.value]),
                "failed": len([s for s in self.steps if s.status == StepStatus.FAILED.value]),
                "skipped": len([s for s in self.steps if s.status == StepStatus.SKIPPED.value]),
            },
        }


# ============================================================================
# PIPELINE COORDINATOR
# ============================================================================

class PipelineCoordinator:
    """
    Sequences one generation run and owns the container for its duration.

    Collaborators are created from ``defaults`` unless injected.
    """

    def __init__(
        self,
        config: PipelineConfig,
        defaults: Optional[Defaults] = None,
        docker: Optional[DockerEngineClient] = None,
        poller: Optional[ReadinessPoller] = None,
        initializer: Optional[SchemaInitializer] = None,
        generator: Optional[TypeScriptModelGenerator] = None,
        repository_factory: Optional[Callable[[ConnectionParams], PostgreSQLRepository]] = None,
        introspector_factory: Optional[Callable[[PostgreSQLRepository], SchemaIntrospector]] = None,
        cancel_event: Optional[threading.Event] = None,
        keep_container: bool = False,
    ):
        """
        Args:
            config: Validated pipeline configuration
            defaults: Container/database/readiness settings (env if omitted)
            docker: Docker Engine client
            poller: Readiness poller
            initializer: Schema initializer
            generator: TypeScript model generator
            repository_factory: Builds the repository for the run
            introspector_factory: Builds the introspector for a repository
            cancel_event: Set from outside to abort the run
            keep_container: Skip teardown (leaves the database running)
        """
        self.config = config
        self.defaults = defaults or Defaults.from_env()
        self._owns_docker = docker is None
        self.docker = docker
        self.poller = poller or ReadinessPoller.from_defaults(self.defaults.readiness)
        self.initializer = initializer or SchemaInitializer()
        self.generator = generator or TypeScriptModelGenerator()
        self.repository_factory = repository_factory or PostgreSQLRepository
        self.introspector_factory = introspector_factory or SchemaIntrospector
        self.cancel_event = cancel_event or threading.Event()
        self.keep_container = keep_container

        self.params = ConnectionParams.from_defaults(
            self.defaults.database,
            port=self.defaults.container.host_port,
        )
        self.stage = PipelineStage.INIT
        self.handle: Optional[ContainerHandle] = None
        self.result: Optional[PipelineResult] = None

    # ========================================================================
    # ENTRY POINT
    # ========================================================================

    def run(self) -> PipelineResult:
        """
        Execute the pipeline.

        Returns:
            PipelineResult with success=True

        Raises:
            PipelineError: The first failing step's error, after teardown
        """
        result = PipelineResult(
            run_id=uuid.uuid4().hex[:8],
            schema_name=self.config.schema_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.result = result
        self.stage = PipelineStage.INIT

        with log_context(
            run_id=result.run_id,
            schema_name=self.config.schema_name,
            component=ComponentType.PIPELINE,
        ):
            logger.info("=" * 70)
            logger.info("TSOOQ-GEN - MODEL GENERATION")
            logger.info(f"   Schema: {self.config.schema_name}")
            logger.info(f"   Output: {self.config.output_file}")
            logger.info(f"   Image:  {self.defaults.container.image_ref} (port {self.defaults.container.host_port})")
            logger.info("=" * 70)

            try:
                if self.docker is None:
                    self.docker = DockerEngineClient.from_defaults(self.defaults.container)
                self._run_steps(result)
                result.success = True
            except Exception as e:
                result.errors.append(str(e))
                if not self.stage.is_terminal():
                    self._advance(PipelineStage.FAILED)
                logger.error(f"Run failed at stage {self.stage.value}: {e}")
                raise
            finally:
                if self._owns_docker and self.docker is not None:
                    self.docker.close()
                    self.docker = None
                self._log_summary(result)

        return result

    # ========================================================================
    # STEPS
    # ========================================================================

    def _run_steps(self, result: PipelineResult) -> None:
        container = self.defaults.container

        with self._step(result, "validate_config") as step:
            method = self.config.require_init_method()
            step.message = f"Initialization via {method.value}"

        self._check_cancelled()
        with self._step(result, "pull_image") as step:
            self.docker.pull_image(container.image, container.tag)
            step.message = f"Pulled {container.image_ref}"
        self._advance(PipelineStage.IMAGE_PULLED)

        with self._container(result) as handle:
            self._check_cancelled()
            with self._step(result, "start_container") as step:
                self.docker.start(handle)
                step.message = f"Started {handle.name}"
            self._advance(PipelineStage.CONTAINER_STARTED)

            self._check_cancelled()
            with self._step(result, "wait_ready") as step:
                attempts = self.poller.wait_ready(self.params, cancel_event=self.cancel_event)
                step.message = f"Database ready after {attempts} attempt(s)"
                step.details = {"attempts": attempts}
            self._advance(PipelineStage.DATABASE_READY)

            with self.repository_factory(self.params) as repository:
                self._check_cancelled()
                with self._step(result, "initialize_schema") as step:
                    method = self.initializer.initialize(
                        self.config,
                        repository,
                        self.params,
                        cancel_event=self.cancel_event,
                    )
                    step.message = f"Schema initialized via {method.value}"
                self._advance(PipelineStage.SCHEMA_INITIALIZED)

                self._check_cancelled()
                with self._step(result, "introspect") as step:
                    tables = self._introspect(self.introspector_factory(repository))
                    result.tables = [t.table_name for t in tables]
                    step.message = f"Loaded {len(tables)} tables from {self.config.schema_name}"
                    step.details = {"tables": result.tables}
                self._advance(PipelineStage.INTROSPECTED)

            self._check_cancelled()
            with self._step(result, "emit") as step:
                path = self.generator.emit(tables, self.config.output_dir, self.config.schema_name)
                result.output_path = str(path)
                step.message = f"Wrote {path}"
            self._advance(PipelineStage.EMITTED)

        if not self.keep_container:
            self._advance(PipelineStage.TORN_DOWN)

    def _introspect(self, introspector: SchemaIntrospector) -> List[TableDefinition]:
        """Describe every base table, in sorted name order."""
        schema_name = self.config.schema_name
        table_names = sorted(introspector.list_tables(schema_name))
        logger.info(f"Introspecting {len(table_names)} tables in {schema_name}...")

        tables = []
        for table_name in table_names:
            self._check_cancelled()
            tables.append(introspector.describe_table(schema_name, table_name))
        return tables

    # ========================================================================
    # CONTAINER SCOPE
    # ========================================================================

    @contextmanager
    def _container(self, result: PipelineResult) -> Iterator[ContainerHandle]:
        """
        Create the container and guarantee its teardown.

        Teardown errors propagate only when the body succeeded.
        """
        spec = ContainerSpec.for_postgres(self.defaults.container, self.defaults.database)

        self._check_cancelled()
        with self._step(result, "create_container") as step:
            handle = self.docker.create_container(spec)
            step.message = f"Created {handle.name} ({handle.short_id})"
            step.details = {"container_id": handle.id}
        self.handle = handle
        self._advance(PipelineStage.CONTAINER_CREATED)

        with log_context(container_id=handle.id):
            body_failed = False
            try:
                yield handle
            except BaseException:
                body_failed = True
                raise
            finally:
                self._teardown(result, handle, suppress_errors=body_failed)

    def _teardown(self, result: PipelineResult, handle: ContainerHandle, suppress_errors: bool) -> None:
        """Stop and delete the container; delete runs even if stop fails."""
        if self.keep_container:
            message = f"Container {handle.name} kept running on port {self.defaults.container.host_port}"
            logger.warning(message)
            result.warnings.append(message)
            result.steps.append(StepResult(name="teardown", status=StepStatus.SKIPPED.value, message=message))
            return

        errors: List[ContainerError] = []
        actions = (
            ("stop_container", self.docker.stop, "Stopped"),
            ("delete_container", self.docker.delete, "Deleted"),
        )
        for name, action, verb in actions:
            try:
                with self._step(result, name) as step:
                    action(handle)
                    step.message = f"{verb} {handle.name}"
            except ContainerError as e:
                errors.append(e)

        if not errors:
            self.handle = None
            return

        if suppress_errors:
            for error in errors:
                message = f"Teardown problem (container {handle.name} may still exist): {error}"
                logger.warning(message)
                result.warnings.append(message)
            return

        raise errors[0]

    # ========================================================================
    # HELPERS
    # ========================================================================

    @contextmanager
    def _step(self, result: PipelineResult, name: str) -> Iterator[StepResult]:
        """Record one step: status, timing, error."""
        step = StepResult(name=name, status=StepStatus.PENDING.value)
        result.steps.append(step)
        started = time.monotonic()
        try:
            yield step
        except Exception as e:
            step.status = StepStatus.FAILED.value
            step.error = str(e)
            step.message = step.message or f"{name} failed"
            raise
        else:
            step.status = StepStatus.SUCCESS.value
        finally:
            step.duration_seconds = round(time.monotonic() - started, 3)
            logger.debug(f"   Step {name}: {step.status} ({step.duration_seconds}s)")

    def _advance(self, target: PipelineStage) -> None:
        """Move to the next stage, validating the transition."""
        if not self.stage.can_transition_to(target):
            raise PipelineError(
                f"Invalid stage transition {self.stage.value} -> {target.value}",
                stage=self.stage.value,
            )
        self.stage = target
        if self.result is not None:
            self.result.stage = target
        with log_context(stage=target.value):
            log_checkpoint(target.value, logger=logger)

    def _check_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise PipelineCancelledError("Run cancelled", stage=self.stage.value)

    def _log_summary(self, result: PipelineResult) -> None:
        summary = result.to_dict()["summary"]
        logger.info("=" * 70)
        logger.info(f"GENERATION {'COMPLETE' if result.success else 'FAILED'}")
        logger.info(f"   Steps: {summary['successful']} succeeded, {summary['failed']} failed")
        if result.output_path:
            logger.info(f"   Output: {result.output_path}")
        if result.errors:
            logger.warning(f"   Errors: {result.errors}")
        logger.info("=" * 70)


# ============================================================================
# CONVENIENCE FUNCTION
# ============================================================================

def generate_models(
    config: PipelineConfig,
    defaults: Optional[Defaults] = None,
    cancel_event: Optional[threading.Event] = None,
    keep_container: bool = False,
) -> PipelineResult:
    """
    Run the full pipeline for ``config``.

    Convenience function for scripts.

    Returns:
        PipelineResult of the successful run

    Raises:
        PipelineError: Any step failure
    """
    coordinator = PipelineCoordinator(
        config,
        defaults=defaults,
        cancel_event=cancel_event,
        keep_container=keep_container,
    )
    return coordinator.run()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'PipelineCoordinator',
    'PipelineResult',
    'StepResult',
    'generate_models',
]
