"""Logging section of the configuration."""

from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .config_utils import expand_path_variables


class LoggingConfig(BaseModel):
    """How the root logger is set up by the CLI and the server."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["simple", "detailed", "json"] = Field(
        default="simple",
        description="Console format; log files always get JSON lines"
    )
    file: Optional[str] = Field(
        default=None,
        description="Optional rotating log file (supports ${VAR} expansion)"
    )
    max_file_size_mb: int = Field(default=10, ge=1)
    backup_count: int = Field(default=5, ge=0)

    @field_validator('level', 'format', mode='before')
    @classmethod
    def normalize_case(cls, v: Any, info: ValidationInfo) -> Any:
        """Accept level and format names in any case."""
        if not isinstance(v, str):
            return v
        return v.upper() if info.field_name == 'level' else v.lower()

    def setup_kwargs(self, app_name: Optional[str] = None) -> Dict[str, Any]:
        """Keyword arguments for :func:`mirror_me.common.logging.setup_logging`."""
        log_file = Path(expand_path_variables(self.file, app_name=app_name)) if self.file else None
        return {
            "level": self.level,
            "format": self.format,
            "log_file": log_file,
            "max_file_size_mb": self.max_file_size_mb,
            "backup_count": self.backup_count,
        }
