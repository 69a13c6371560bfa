# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the hgen project file (``hgen.yaml``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePath

import yaml

from hgen.emit import Strategy, UnknownStrategyError

# ###############
# Public Interface
# ###############

PROJECT_FILE_NAME = "hgen.yaml"


class ProjectConfigError(Exception):
    """Raised when a project file is invalid or cannot be loaded."""


@dataclass
class OutputSpec:
    """One artifact to generate.

    Attributes:
        path: Output path, relative to the project directory.
        strategy: Explicit target; inferred from the extension of *path* when None.
    """

    path: str
    strategy: Strategy | None = None

    def resolve_strategy(self) -> Strategy:
        """Return the explicit strategy or the one implied by the file extension.

        Raises:
            UnknownStrategyError: If no strategy is set and the extension is not recognised.
        """
        if self.strategy is not None:
            return self.strategy
        return Strategy.from_path(PurePath(self.path))


@dataclass
class ProjectConfig:
    """The parsed configuration of an hgen project.

    Attributes:
        input: Entry schema file, relative to the project directory.
        outputs: Artifacts to generate, in order.
        reflection: Whether targets emit reflection tables.
    """

    input: str
    outputs: list[OutputSpec] = field(default_factory=list)
    reflection: bool = True


def load_project_config(path: Path) -> ProjectConfig:
    """Load and parse an hgen project file.

    Args:
        path: Path to the ``hgen.yaml`` file.

    Returns:
        A ProjectConfig instance populated from the file.

    Raises:
        ProjectConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ProjectConfigError(f"Project file not found: {path}") from None
    except OSError as exc:
        raise ProjectConfigError(f"Cannot read project file: {exc}") from exc

    return parse_project_config(text, source_label=str(path))


def parse_project_config(text: str, source_label: str = "<string>") -> ProjectConfig:
    """Parse project YAML text into a ProjectConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        ProjectConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ProjectConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise ProjectConfigError(f"{source_label}: project file must be a YAML mapping")

    input_path = _require_string(data, "input", source_label)

    reflection = data.get("reflection", True)
    if not isinstance(reflection, bool):
        raise ProjectConfigError(f"{source_label}: 'reflection' must be true or false")

    if "outputs" not in data:
        raise ProjectConfigError(f"{source_label}: missing required field 'outputs'")
    raw_outputs = data["outputs"]
    if not isinstance(raw_outputs, list) or not raw_outputs:
        raise ProjectConfigError(f"{source_label}: 'outputs' must be a non-empty list")
    outputs = [_parse_output(entry, index, source_label) for index, entry in enumerate(raw_outputs)]

    return ProjectConfig(input=input_path, outputs=outputs, reflection=reflection)


# ################
# Implementation
# ################


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising ProjectConfigError if missing."""
    if key not in mapping:
        raise ProjectConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str) or not value:
        raise ProjectConfigError(f"{source_label}: '{key}' must be a non-empty string")
    return value


def _parse_output(entry: object, index: int, source_label: str) -> OutputSpec:
    """Parse a single entry of the ``outputs`` list."""
    location = f"{source_label}: outputs[{index}]"

    if isinstance(entry, str):
        entry = {"path": entry}
    if not isinstance(entry, dict):
        raise ProjectConfigError(f"{location} must be a path or a YAML mapping")

    path = _require_string(entry, "path", location)

    strategy: Strategy | None = None
    if "strategy" in entry:
        name = _require_string(entry, "strategy", location)
        try:
            strategy = Strategy.from_name(name)
        except UnknownStrategyError as exc:
            raise ProjectConfigError(f"{location}: {exc}") from exc

    return OutputSpec(path=path, strategy=strategy)
