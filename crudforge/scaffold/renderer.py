"""Jinja2 rendering of scaffold artifacts into Python source.

Templates live in ``crudforge/scaffold/templates/``. The route-wiring file is
assembled from two snippets (the model import and the ``build_routes`` call);
the same snippets are the anchors used to upgrade an existing route file to a
dedicated controller, so generated files and upgrades never drift apart.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from crudforge.scaffold.artifacts import (
    ControllerArtifact,
    RouteArtifact,
    SchemaArtifact,
    ValidationArtifact,
)
from crudforge.utils.naming import pluralize, to_snake_case

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

DEFAULT_PACKAGE = "crudforge"


class TemplateRenderer:
    """Renders scaffold artifacts with the templates under `template_dir`."""

    def __init__(
        self,
        template_dir: Optional[Union[str, Path]] = None,
        package: str = DEFAULT_PACKAGE,
    ):
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.package = package
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_path: str, context: Dict[str, Any]) -> str:
        template = self.env.get_template(template_path)
        return template.render(package=self.package, **context)

    # -- Artifacts ---------------------------------------------------------

    def render_schema(self, schema: SchemaArtifact) -> str:
        base_names = ["FieldSpec", "create_schema"]
        if schema.needs_utcnow:
            base_names.append("utcnow")
        return self.render("model.py.j2", {
            "resource": schema.resource,
            "schema": schema,
            "collection": pluralize(to_snake_case(schema.resource.pascal)),
            "base_names": base_names,
        })

    def render_validation(self, validation: ValidationArtifact) -> str:
        base_names = ["RequestSchema", "ValidationSchemas"]
        if validation.needs_object_id:
            base_names.insert(0, "ObjectIdStr")
        return self.render("validation.py.j2", {
            "resource": validation.resource,
            "validation": validation,
            "base_names": base_names,
        })

    def render_controller(self, controller: ControllerArtifact) -> str:
        return self.render("controller.py.j2", {"resource": controller.resource})

    def render_route(self, route: RouteArtifact) -> str:
        return self.render("route.py.j2", self._route_context(route))

    # -- Route anchors -----------------------------------------------------

    def route_import(self, route: RouteArtifact) -> str:
        """The import block that differs between generic and dedicated wiring."""
        return self.render("snippets/route_import.py.j2", self._route_context(route))

    def route_binding(self, route: RouteArtifact) -> str:
        """The `build_routes(...)` call, plus the example custom route when dedicated."""
        return self.render("snippets/route_binding.py.j2", self._route_context(route))

    def _route_context(self, route: RouteArtifact) -> Dict[str, Any]:
        return {"resource": route.resource, "route": route}
