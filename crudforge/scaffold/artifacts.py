"""
Scaffold Artifacts

Pure descriptions of the files the generator writes. Building an artifact
never touches the filesystem; the renderer turns artifacts into source text
and the writer puts that text on disk.

    descriptors --build_*--> artifacts --TemplateRenderer--> text --writer--> files
"""
import re
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from crudforge.scaffold.descriptors import FieldDescriptor, FieldType, ResourceName

# Storage type expression per field type, as written into the model file
STORAGE_TYPES = {
    FieldType.STRING: "str",
    FieldType.NUMBER: "float",
    FieldType.BOOLEAN: "bool",
    FieldType.DATE: "datetime",
    FieldType.REFERENCE: "ObjectId",
    FieldType.ARRAY: "List[str]",
    FieldType.OBJECT: "dict",
}

# Request validation annotation per field type
VALIDATION_TYPES = {
    FieldType.STRING: "str",
    FieldType.NUMBER: "float",
    FieldType.BOOLEAN: "bool",
    FieldType.DATE: "datetime",
    FieldType.REFERENCE: "ObjectIdStr",
    FieldType.ARRAY: "List[Any]",
    FieldType.OBJECT: "Dict[str, Any]",
}


@dataclass(frozen=True)
class SchemaField:
    name: str
    type_expr: str
    required: bool = False
    unique: bool = False
    default_expr: Optional[str] = None

    def spec_expr(self) -> str:
        """The `FieldSpec(...)` call for this field."""
        args = [self.type_expr]
        if self.required:
            args.append("required=True")
        if self.unique:
            args.append("unique=True")
        if self.default_expr is not None:
            args.append(f"default={self.default_expr}")
        return f"FieldSpec({', '.join(args)})"


@dataclass(frozen=True)
class SchemaArtifact:
    resource: ResourceName
    fields: Tuple[SchemaField, ...] = ()

    @property
    def needs_list(self) -> bool:
        return any(field.type_expr.startswith("List[") for field in self.fields)

    @property
    def needs_object_id(self) -> bool:
        return any(field.type_expr == "ObjectId" for field in self.fields)

    @property
    def needs_datetime(self) -> bool:
        return any(field.type_expr == "datetime" for field in self.fields)

    @property
    def needs_utcnow(self) -> bool:
        return any(field.default_expr == "utcnow" for field in self.fields)


@dataclass(frozen=True)
class ValidationRule:
    name: str
    annotation: str
    required: bool = False

    def declaration(self) -> str:
        if self.required:
            return f"{self.name}: {self.annotation}"
        return f"{self.name}: Optional[{self.annotation}] = None"


@dataclass(frozen=True)
class ValidationArtifact:
    """A create/update rule pair. Update rules are the create rules, all optional."""
    resource: ResourceName
    create_rules: Tuple[ValidationRule, ...] = ()
    update_rules: Tuple[ValidationRule, ...] = ()

    @property
    def rules(self) -> Tuple[ValidationRule, ...]:
        return self.create_rules + self.update_rules

    @property
    def typing_names(self) -> List[str]:
        names = set()
        for rule in self.rules:
            if not rule.required:
                names.add("Optional")
            names.update(re.findall(r"\b(?:Any|Dict|List)\b", rule.annotation))
        return sorted(names)

    @property
    def needs_datetime(self) -> bool:
        return any(rule.annotation == "datetime" for rule in self.rules)

    @property
    def needs_object_id(self) -> bool:
        return any(rule.annotation == "ObjectIdStr" for rule in self.rules)


@dataclass(frozen=True)
class ControllerArtifact:
    resource: ResourceName


@dataclass(frozen=True)
class RouteArtifact:
    """Route wiring for a resource, either generic or bound to a dedicated controller."""
    resource: ResourceName
    dedicated: bool = False

    @property
    def controller_alias(self) -> Optional[str]:
        if not self.dedicated:
            return None
        return f"{self.resource.snake}_controller"


# ============================================================================
# BUILDERS
# ============================================================================

def storage_default(descriptor: FieldDescriptor) -> Optional[str]:
    """
    Default expression for the model file.

    Booleans default to False and dates to the creation time unless the
    operator gave a default. Operator defaults apply to string, number and
    boolean fields only.
    """
    text = descriptor.default
    if descriptor.type is FieldType.STRING and text is not None:
        return repr(text)
    if descriptor.type is FieldType.NUMBER and text is not None:
        return repr(float(text))
    if descriptor.type is FieldType.BOOLEAN:
        return "True" if text == "true" else "False"
    if descriptor.type is FieldType.DATE:
        return "utcnow"
    return None


def build_schema_artifact(
    resource: ResourceName,
    descriptors: Sequence[FieldDescriptor],
) -> SchemaArtifact:
    fields = tuple(
        SchemaField(
            name=descriptor.name,
            type_expr=STORAGE_TYPES[descriptor.type],
            required=descriptor.required,
            unique=descriptor.unique,
            default_expr=storage_default(descriptor),
        )
        for descriptor in descriptors
    )
    return SchemaArtifact(resource, fields)


def build_validation_artifact(
    resource: ResourceName,
    descriptors: Sequence[FieldDescriptor] = (),
) -> ValidationArtifact:
    """Without descriptors the artifact is an empty rule pair to fill in by hand."""
    create_rules = tuple(
        ValidationRule(
            name=descriptor.name,
            annotation=VALIDATION_TYPES[descriptor.type],
            required=descriptor.required,
        )
        for descriptor in descriptors
    )
    update_rules = tuple(replace(rule, required=False) for rule in create_rules)
    return ValidationArtifact(resource, create_rules, update_rules)


def build_controller_artifact(resource: ResourceName) -> ControllerArtifact:
    return ControllerArtifact(resource)


def build_route_artifact(resource: ResourceName, dedicated: bool = False) -> RouteArtifact:
    return RouteArtifact(resource, dedicated=dedicated)


def upgrade_route(route: RouteArtifact) -> RouteArtifact:
    """Rebind a route artifact to the dedicated controller. Idempotent."""
    if route.dedicated:
        return route
    return replace(route, dedicated=True)
