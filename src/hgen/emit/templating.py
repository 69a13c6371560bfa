# Copyright 2026 hgen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Jinja2 rendering for the source-code targets.

Each target keeps its file skeleton under ``templates/<target>/`` and
renders it through a :class:`TemplateEngine`. Type names and codec
expressions are computed by the target's emitter and handed to the
template as callables, so errors raised by them (for example
:class:`~hgen.emit.common.UnsupportedConstructError`) reach the caller
unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound
from jinja2 import TemplateError as JinjaTemplateError

from hgen.emit.common import EmitError

# ###############
# Public Interface
# ###############

TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateError(EmitError):
    """Raised when a template is missing or cannot be rendered."""


class TemplateEngine:
    """A Jinja2 environment bound to one template directory.

    Block tags on a line of their own leave no trace in the output
    (``trim_blocks`` and ``lstrip_blocks``), and the final newline of a
    template file is kept. Undefined variables are errors.
    """

    def __init__(self, template_dir: Path, filters: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self.template_dir = template_dir
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.filters.update(filters or {})

    def render_template(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Render *template_name* with *context*.

        Raises:
            TemplateError: If the template does not exist, does not parse,
                or uses an undefined variable.
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as exc:
            raise TemplateError(f"Template '{exc.name}' not found in '{self.template_dir}'") from exc
        except JinjaTemplateError as exc:
            raise TemplateError(f"Failed to render template '{template_name}': {exc}") from exc
