"""YAML settings source with include support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

# Logger used while settings are still loading; created lazily
_bootstrap_logger = None


def _get_bootstrap_logger():
    global _bootstrap_logger
    if _bootstrap_logger is None:
        from gitpublisher.core.log import Logger
        _bootstrap_logger = Logger()
        _bootstrap_logger.setup(log_root=Path.home(), run_name="bootstrap")
    return _bootstrap_logger


def _cleanup_bootstrap_logger():
    """Close the bootstrap logger once the real one is configured."""
    global _bootstrap_logger
    if _bootstrap_logger:
        _bootstrap_logger.close()
        _bootstrap_logger = None


def cli_includes(argv: list[str]) -> list[str]:
    """Return the values of every --include option in argv."""
    includes = []
    args = iter(argv[1:])
    for arg in args:
        if arg == "--include":
            value = next(args, None)
            if value is not None:
                includes.append(value)
        elif arg.startswith("--include="):
            includes.append(arg.split("=", 1)[1])
    return includes


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML source merging defaults, user, project and included files.

    Files are deep-merged in this order, later files winning:
    package defaults/default.yaml < user config dir gitpublisher.yaml
    < ./gitpublisher.yaml < files named with --include. Any file may
    pull in others with a top-level include: key.
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_file=None):
        if yaml_file is None:
            yaml_file = cli_includes(sys.argv) or None
        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files):
        result = {}

        files_to_load = [
            Path(__file__).parent.parent / "defaults" / "default.yaml",
            Path(user_config_dir("gitpublisher", appauthor=False))
            / "gitpublisher.yaml",
            Path("gitpublisher.yaml"),
        ]
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            files_to_load.extend(Path(f).expanduser() for f in files)

        loaded = set()
        for file_path in files_to_load:
            # The model's own yaml_file arrives here as well
            if file_path.resolve() in loaded:
                continue
            loaded.add(file_path.resolve())
            if file_path.is_file():
                with _get_bootstrap_logger().span(
                    "Configuration loading",
                    file=str(file_path),
                ):
                    data = self._load_file_recursive(file_path, set())
                    result = self._deep_merge(result, data)
            else:
                _get_bootstrap_logger().debug(
                    "Configuration file not found (skipping)",
                    file=str(file_path),
                )

        return result

    def _load_file_recursive(
        self, filepath: Path, visited: set[Path]
    ) -> dict:
        """Load a YAML file with its include: directives resolved.

        Included files are merged underneath the including file, so
        the including file's own keys win.

        Raises:
            ValueError: If an include cycle is found
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        includes = data.pop("include", None) or []
        if isinstance(includes, str):
            includes = [includes]

        for inc in includes:
            inc_path = Path(inc).expanduser()
            if not inc_path.is_absolute():
                inc_path = filepath.parent / inc_path
            inc_data = self._load_file_recursive(inc_path, visited.copy())
            data = self._deep_merge(inc_data, data)

        return data

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Return base with override merged in recursively."""
        result = base.copy()
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
