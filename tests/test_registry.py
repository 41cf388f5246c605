"""Tests for resource registration and route building."""
import pytest

from crudforge.models.base import create_schema
from crudforge.registry import ResourceDefinition, ResourceRegistry, default_registry
from crudforge.schemas.user import UserValidation


def route_table(router):
    return {(route.path, method) for route in router.routes for method in route.methods}


class TestResourceDefinition:
    def test_route_path_from_name(self):
        definition = ResourceDefinition(schema=create_schema("OrderItem"))
        assert definition.route_path == "/orderitems"

    def test_explicit_path(self):
        definition = ResourceDefinition(schema=create_schema("Person"), path="/people")
        assert definition.route_path == "/people"

    def test_bind_uses_collection_name(self, database):
        definition = ResourceDefinition(schema=create_schema("OrderItem"))
        handle = definition.bind(database, default_limit=5)

        assert handle.collection is database["order_items"]
        assert handle.default_limit == 5

    def test_generic_router(self, database):
        definition = ResourceDefinition(schema=create_schema("Widget"), validation=UserValidation)
        router = definition.build_router(database)

        assert route_table(router) == {
            ("", "POST"),
            ("", "GET"),
            ("/{resource_id}", "GET"),
            ("/{resource_id}", "PUT"),
            ("/{resource_id}", "PATCH"),
            ("/{resource_id}", "DELETE"),
            ("/{resource_id}/permanent", "DELETE"),
        }
        assert router.tags == ["widgets"]


class TestResourceRegistry:
    def test_duplicate_paths_are_rejected(self):
        registry = ResourceRegistry([ResourceDefinition(schema=create_schema("Thing"))])
        with pytest.raises(ValueError):
            registry.register(ResourceDefinition(schema=create_schema("Thing")))

    def test_order_is_kept(self):
        registry = ResourceRegistry([
            ResourceDefinition(schema=create_schema("Zebra")),
            ResourceDefinition(schema=create_schema("Ant")),
        ])
        assert registry.paths == ["/zebras", "/ants"]
        assert len(registry) == 2
        assert registry.get("/ants").name == "Ant"
        assert registry.get("/bees") is None

    def test_default_registry_serves_users(self):
        registry = default_registry()
        assert registry.paths == ["/users"]
        assert registry.get("/users").schema.collection_name == "users"
