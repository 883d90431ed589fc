"""Application settings."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitpublisher.build.host import ScmConfig
from gitpublisher.build.model import BuildResult
from gitpublisher.core.base import BaseConfig
from gitpublisher.core.log import Logger
from gitpublisher.core.yaml_settings import YamlWithIncludesSettingsSource

APP_NAME = "gitpublisher"

# Names usable in {...} templates inside string and path settings,
# e.g. {platformdirs.user_state_dir} or {config.log_root}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}


class GitConfig(BaseConfig):
    """How git is invoked."""

    timeout: int = Field(
        default=600,
        description=(
            "Timeout in seconds for each git command; a command that "
            "runs longer is killed and reported as failed"
        ),
    )


class PublishConfig(BaseConfig):
    """Commit, tag and push behaviour."""

    marker_prefix: str = Field(
        default="hudson",
        description=(
            "Prefix of the tag the checkout step leaves on the build "
            "revision; '<prefix>-<project>-<number>' is deleted first"
        ),
    )
    threshold: BuildResult = Field(
        default=BuildResult.UNSTABLE,
        description="Worst build result that is still committed and pushed",
    )
    default_branch: str = Field(
        default="master",
        description="Branch pushed to when the job builds any branch",
    )
    wildcard_branch: str = Field(
        default="**",
        description="Branch spec that means 'any branch'",
    )
    message_prefix: str = Field(
        default="Build: ",
        description="Prefix of commit and tag messages",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    git: GitConfig = Field(
        default_factory=GitConfig,
        description="Git command settings"
    )
    publish: PublishConfig = Field(
        default_factory=PublishConfig,
        description="Commit, tag and push settings"
    )
    scm: ScmConfig = Field(
        default_factory=ScmConfig,
        description="Remotes, branches and git executable of the job"
    )

    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=lambda: Path(
            platformdirs.user_log_dir(APP_NAME, appauthor=False)
        ),
        description=(
            "Root directory for log files "
            "(supports {platformdirs.*} templates)"
        ),
    )
    records_dir: Path = Field(
        default_factory=lambda: Path(
            platformdirs.user_state_dir(APP_NAME, appauthor=False)
        ) / "records",
        description="Directory holding one JSON record per build",
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Initialize the global logger once settings are loaded."""
        from gitpublisher.core.log import setup_logger
        from gitpublisher.core.yaml_settings import _cleanup_bootstrap_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        setup_logger(
            log_root=self.log_root,
            run_name=APP_NAME,
            console=self.logger.console,
            otlp=self.logger.otlp,
            file=self.logger.file,
            level=self.logger.level,
        )
        _cleanup_bootstrap_logger()
        return self

    def close(self):
        """Close the global logger along with child sections."""
        from gitpublisher.core.log import logger
        logger.close()
        super().close()


class State(BaseSettings):
    """Settings for one gitpublisher invocation.

    Sources, highest priority first: init arguments, YAML files
    (package defaults < user config < ./gitpublisher.yaml < --include),
    .env, environment variables (GITPUBLISHER_CONFIG__GIT__TIMEOUT=60),
    file secrets.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="gitpublisher.yaml",
        env_file=".env",
        env_prefix="GITPUBLISHER_",
        env_nested_delimiter="__",
        cli_parse_args=True,
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Expand {...} templates in every string and path setting."""
        self._substitute_recursive(self)
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i in range(len(obj)):
                obj[i] = self._substitute_value(obj[i])

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._substitute_string(value)
        elif isinstance(value, Path):
            return Path(self._substitute_string(str(value)))
        elif isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
        return value

    def _substitute_string(self, value: str) -> str:
        """Replace {dotted.path} references with their values.

        The first component is looked up in TEMPLATE_NAMESPACE, or on
        this State otherwise. Callables are called with the application
        name, which suits the platformdirs functions. Unresolvable
        references are left as they are.

        Examples:
            "{platformdirs.user_state_dir}/records"
            → "~/.local/state/gitpublisher/records"
            "{config.log_root}/archive"
            → "/var/log/gitpublisher/archive"
        """
        def replace_template(match):
            parts = match.group(1).split(".")
            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            else:
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)
                if callable(obj):
                    obj = obj(APP_NAME, appauthor=False)
                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z._]+)\}', replace_template, value)


__all__ = ["State", "Config", "GitConfig", "PublishConfig"]
