"""Rendering of the spec, desktop entry and macros files."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jinja2
from jinja2 import meta

from .exceptions import TemplateRenderError
from .models import PackageOptions

_TEMPLATE_DIR = Path(__file__).parent / "templates"

SPEC_TEMPLATE = "spec.j2"
DESKTOP_TEMPLATE = "desktop.j2"
MACROS_TEMPLATE = "macros.j2"

# Variables a template may use beyond the PackageOptions fields.
TEMPLATE_EXTRAS: Mapping[str, frozenset[str]] = {
    SPEC_TEMPLATE: frozenset(),
    DESKTOP_TEMPLATE: frozenset(),
    MACROS_TEMPLATE: frozenset({"dir"}),
}


def _get_template_env(template_dir: Path) -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(template_dir),
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        autoescape=False,
    )


class TemplateRenderer:
    def __init__(
        self,
        template_dir: Path | None = None,
        extras: Mapping[str, frozenset[str]] | None = None,
    ) -> None:
        self.template_dir = template_dir or _TEMPLATE_DIR
        self.extras = dict(TEMPLATE_EXTRAS if extras is None else extras)
        self.env = _get_template_env(self.template_dir)
        self.validate()

    def validate(self) -> None:
        """
        Checks that every variable each template references is guaranteed to
        be in its rendering context, so a typo fails at startup rather than
        producing a corrupt package.
        """
        allowed = PackageOptions.field_names() - {"rename"}
        for name, extras in self.extras.items():
            try:
                source, _, _ = self.env.loader.get_source(self.env, name)
                referenced = meta.find_undeclared_variables(self.env.parse(source))
            except jinja2.TemplateError as e:
                raise TemplateRenderError(f"Invalid template '{name}': {e}") from e
            unknown = referenced - allowed - extras
            if unknown:
                raise TemplateRenderError(
                    f"Template '{name}' references unknown fields: "
                    f"{', '.join(sorted(unknown))}"
                )

    def render(self, name: str, options: PackageOptions, **extra: Any) -> str:
        try:
            template = self.env.get_template(name)
            return template.render(options.template_context(**extra))
        except jinja2.TemplateError as e:
            raise TemplateRenderError(f"Error rendering '{name}': {e}") from e

    def render_string(self, source: str, options: PackageOptions, **extra: Any) -> str:
        try:
            return self.env.from_string(source).render(options.template_context(**extra))
        except jinja2.TemplateError as e:
            raise TemplateRenderError(f"Error rendering '{source}': {e}") from e
