# ============================================================================
# PIPELINE CONFIGURATION
# ============================================================================
# STATUS: Core - Per-project JSON configuration
# PURPOSE: Load and validate .tsooq.json into an explicit config value
# CREATED: 18 OCT 2026
# ============================================================================
"""
Pipeline Configuration

The per-project JSON file names how to initialize the schema and where to
write the generated module:

    {
        "ddlScript": "db/schema.sql",
        "outputDir": "src/generated",
        "schemaName": "public"
    }

or, with an external migration tool:

    {
        "migrationCmd": "npx knex migrate:latest",
        "migrationWorkingDir": "backend",
        "outputDir": "src/generated",
        "schemaName": "public"
    }

The file is located via the ``--config`` flag, else the CONFIG environment
variable, else ``./.tsooq.json``. The loaded PipelineConfig is passed
explicitly into the coordinator.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.contracts import InitMethod
from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "./.tsooq.json"
CONFIG_ENV_VAR = "CONFIG"


class PipelineConfig(BaseModel):
    """
    Validated pipeline configuration.

    Exactly one initialization method is expected. When both ``ddlScript``
    and ``migrationCmd`` are present the DDL script wins.
    """

    ddl_script: Optional[Path] = Field(
        default=None,
        alias="ddlScript",
        description="SQL file executed in a single transaction",
    )
    migration_cmd: Optional[str] = Field(
        default=None,
        alias="migrationCmd",
        description="Shell command that migrates the database",
    )
    migration_working_dir: Path = Field(
        default=Path("."),
        alias="migrationWorkingDir",
        description="Working directory for migrationCmd",
    )
    output_dir: Path = Field(
        ...,
        alias="outputDir",
        description="Directory receiving <schemaName>.ts",
    )
    schema_name: str = Field(
        ...,
        min_length=1,
        alias="schemaName",
        description="Database schema to introspect",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("ddl_script", "migration_cmd", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("migration_working_dir", mode="before")
    @classmethod
    def _blank_to_cwd(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return Path(".")
        return value

    @property
    def init_method(self) -> Optional[InitMethod]:
        """Selected initialization method (first match), or None."""
        if self.ddl_script is not None:
            return InitMethod.DDL_SCRIPT
        if self.migration_cmd is not None:
            return InitMethod.MIGRATION_CMD
        return None

    def require_init_method(self) -> InitMethod:
        """
        Return the initialization method or fail.

        Raises:
            ConfigurationError: If neither ddlScript nor migrationCmd is set
        """
        method = self.init_method
        if method is None:
            raise ConfigurationError(
                "Either ddlScript or migrationCmd must be provided",
                stage="init",
            )
        if self.ddl_script is not None and self.migration_cmd is not None:
            logger.warning("Both ddlScript and migrationCmd set - using ddlScript")
        return method

    @property
    def output_file(self) -> Path:
        """Path of the generated module."""
        return self.output_dir / f"{self.schema_name}.ts"


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Pick the config file: explicit path, then $CONFIG, then ./.tsooq.json."""
    if path:
        return Path(path)
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)


def load_config(path: Optional[Union[str, Path]] = None) -> PipelineConfig:
    """
    Load and validate the pipeline configuration file.

    Args:
        path: Optional explicit config file path

    Returns:
        PipelineConfig

    Raises:
        ConfigurationError: Missing file, invalid JSON, schema violation,
            or no initialization method
    """
    config_path = resolve_config_path(path)

    if not config_path.is_file():
        raise ConfigurationError(f"Config file {config_path} not found", stage="init")

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {config_path} is not valid JSON: {e}", stage="init") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Config file {config_path} could not be read: {e}", stage="init") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a JSON object", stage="init")

    try:
        config = PipelineConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid config {config_path}: {problems}", stage="init") from e

    config.require_init_method()

    logger.debug(f"Loaded config from {config_path}: schema={config.schema_name}")
    return config


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "PipelineConfig",
    "resolve_config_path",
    "load_config",
]
