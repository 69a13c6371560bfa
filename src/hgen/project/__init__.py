# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project configuration for hgen."""

from hgen.project.config import (
    PROJECT_FILE_NAME,
    OutputSpec,
    ProjectConfig,
    ProjectConfigError,
    load_project_config,
    parse_project_config,
)

__all__ = [
    "PROJECT_FILE_NAME",
    "OutputSpec",
    "ProjectConfig",
    "ProjectConfigError",
    "load_project_config",
    "parse_project_config",
]
