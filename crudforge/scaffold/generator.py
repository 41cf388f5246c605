"""
Scaffolding orchestrator.

ScaffoldGenerator turns a resource name (and, for a model, its field
descriptors) into files under a project root laid out like this one:

    <package>/models/<snake>.py             schema           (model)
    <package>/schemas/<snake>.py            validation pair  (model; crud if missing)
    <package>/api/endpoints/<plural>.py     route wiring     (model; crud creates or upgrades)
    <package>/controllers/<snake>.py        controller       (crud)

All text is rendered before anything is written.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from crudforge.scaffold.artifacts import (
    build_controller_artifact,
    build_route_artifact,
    build_schema_artifact,
    build_validation_artifact,
    upgrade_route,
)
from crudforge.scaffold.descriptors import FieldDescriptor, ResourceName
from crudforge.scaffold.renderer import DEFAULT_PACKAGE, TemplateRenderer
from crudforge.scaffold.writer import WriteResult, update_existing, write_new


class ModelNotFoundError(Exception):
    """`crud` was asked for a resource whose model file does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Model file not found: {path}")


@dataclass(frozen=True)
class ProjectLayout:
    root: Path
    package: str = DEFAULT_PACKAGE

    @property
    def package_dir(self) -> Path:
        return self.root / self.package

    def model_path(self, resource: ResourceName) -> Path:
        return self.package_dir / "models" / f"{resource.snake}.py"

    def validation_path(self, resource: ResourceName) -> Path:
        return self.package_dir / "schemas" / f"{resource.snake}.py"

    def route_path(self, resource: ResourceName) -> Path:
        return self.package_dir / "api" / "endpoints" / f"{resource.plural}.py"

    def controller_path(self, resource: ResourceName) -> Path:
        return self.package_dir / "controllers" / f"{resource.snake}.py"


class ScaffoldGenerator:
    """Writes model, validation, controller and route files for a resource."""

    def __init__(
        self,
        root: Path,
        package: str = DEFAULT_PACKAGE,
        renderer: Optional[TemplateRenderer] = None,
    ):
        self.layout = ProjectLayout(Path(root), package)
        self.renderer = renderer or TemplateRenderer(package=package)

    def generate_model(self, name: str, fields: Sequence[FieldDescriptor]) -> List[WriteResult]:
        """Schema, validation pair and generic route wiring. Existing files are kept."""
        resource = ResourceName.parse(name)
        schema_text = self.renderer.render_schema(build_schema_artifact(resource, fields))
        validation_text = self.renderer.render_validation(build_validation_artifact(resource, fields))
        route_text = self.renderer.render_route(build_route_artifact(resource))

        return [
            write_new("Model", self.layout.model_path(resource), schema_text),
            write_new("Validation", self.layout.validation_path(resource), validation_text),
            write_new("Route", self.layout.route_path(resource), route_text),
        ]

    def model_exists(self, name: str) -> bool:
        return self.layout.model_path(ResourceName.parse(name)).exists()

    def generate_crud(self, name: str) -> List[WriteResult]:
        """
        Dedicated controller for an existing model.

        Also writes an empty validation pair if none exists, and points the
        route wiring at the new controller: a missing route file is created
        dedicated, an existing generic one is upgraded in place.
        """
        resource = ResourceName.parse(name)
        model_path = self.layout.model_path(resource)
        if not model_path.exists():
            raise ModelNotFoundError(model_path)

        generic = build_route_artifact(resource)
        dedicated = upgrade_route(generic)
        controller_text = self.renderer.render_controller(build_controller_artifact(resource))
        validation_text = self.renderer.render_validation(build_validation_artifact(resource))
        route_text = self.renderer.render_route(dedicated)
        dedicated_import = self.renderer.route_import(dedicated)
        anchors = (
            (self.renderer.route_import(generic), dedicated_import),
            (self.renderer.route_binding(generic), self.renderer.route_binding(dedicated)),
        )

        results = [
            write_new("Controller", self.layout.controller_path(resource), controller_text),
            write_new("Validation", self.layout.validation_path(resource), validation_text),
        ]
        route_path = self.layout.route_path(resource)
        if route_path.exists():
            marker = dedicated_import.splitlines()[0]
            results.append(update_existing("Route", route_path, marker, anchors))
        else:
            results.append(write_new("Route", route_path, route_text))
        return results
