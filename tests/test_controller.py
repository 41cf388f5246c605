"""Tests for the generic resource controller."""
import json
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from pymongo import ASCENDING, DESCENDING

from crudforge.controllers import base as controller
from crudforge.controllers.base import (
    ResourceHandle,
    parse_list_query,
    parse_positive_int,
    parse_sort,
)
from crudforge.core.exceptions import BadRequestError, InvalidIdentifierError
from crudforge.models import base as models_base
from crudforge.models.base import FieldSpec, create_schema

task_schema = create_schema("Task", {
    "title": FieldSpec(str, required=True),
    "priority": FieldSpec(int, default=1),
    "assignee": FieldSpec(ObjectId),
})


@pytest.fixture
def handle(database):
    return ResourceHandle(collection=database[task_schema.collection_name], schema=task_schema)


def body(response):
    return json.loads(response.body)


# ---------------------------------------------------------------------------
# Query parsing
# ---------------------------------------------------------------------------

class TestQueryParsing:
    @pytest.mark.parametrize("raw,expected", [
        (None, 7),
        ("3", 3),
        ("0", 7),
        ("-2", 7),
        ("abc", 7),
    ])
    def test_parse_positive_int(self, raw, expected):
        assert parse_positive_int(raw, 7) == expected

    def test_default_sort_is_newest_first(self):
        assert parse_sort(None) == [("createdAt", DESCENDING)]

    def test_sort_directions(self):
        assert parse_sort('{"title": 1, "priority": "desc"}') == [
            ("title", ASCENDING),
            ("priority", DESCENDING),
        ]

    @pytest.mark.parametrize("raw", ['{"title": "up"}', '{"title": true}', "[1]", "{oops"])
    def test_invalid_sort(self, raw):
        with pytest.raises(BadRequestError) as exc_info:
            parse_sort(raw)
        assert exc_info.value.detail == "Invalid sort format"

    @pytest.mark.parametrize("raw", ["{not json", '"text"', "[]"])
    def test_invalid_filter(self, raw):
        with pytest.raises(BadRequestError) as exc_info:
            parse_list_query({"filter": raw}, task_schema)
        assert exc_info.value.detail == "Invalid filter format"

    def test_is_active_param_overrides_filter(self):
        query = parse_list_query({"filter": '{"isActive": true}', "isActive": "false"}, task_schema)
        assert query.filter == {"isActive": False}

    def test_any_value_but_true_means_inactive(self):
        query = parse_list_query({"isActive": "yes"}, task_schema)
        assert query.filter == {"isActive": False}

    def test_pagination_defaults(self):
        query = parse_list_query({}, task_schema, default_limit=25)
        assert (query.page, query.limit, query.skip) == (1, 25, 0)

    def test_skip(self):
        query = parse_list_query({"page": "3", "limit": "5"}, task_schema)
        assert query.skip == 10

    def test_reference_filters_are_cast(self):
        assignee = ObjectId()
        query = parse_list_query({"filter": json.dumps({"assignee": str(assignee)})}, task_schema)
        assert query.filter == {"assignee": assignee}


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

class TestOperations:
    async def test_create_returns_public_document(self, handle):
        response = await controller.create(handle, {"title": "Write tests"})

        assert response.status_code == 201
        content = body(response)
        assert content["status"] == "success"
        assert content["message"] == "Resource created successfully"
        assert content["data"]["title"] == "Write tests"
        assert content["data"]["priority"] == 1
        assert ObjectId.is_valid(content["data"]["id"])
        assert "_id" not in content["data"]
        assert "__v" not in content["data"]

    async def test_list_meta(self, handle):
        for index in range(12):
            await controller.create(handle, {"title": f"task {index}", "priority": index})

        response = await controller.list_resources(handle, {"page": "2", "limit": "5"})

        content = body(response)
        assert len(content["data"]) == 5
        assert content["meta"] == {"page": 2, "limit": 5, "total": 12, "pages": 3}

    async def test_second_page_under_default_sort(self, handle, monkeypatch):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        ticks = iter(range(100))
        monkeypatch.setattr(models_base, "utcnow", lambda: start + timedelta(minutes=next(ticks)))
        for index in range(25):
            await controller.create(handle, {"title": f"task {index}"})

        content = body(await controller.list_resources(handle, {"page": "2", "limit": "10"}))

        # Newest first: ranks 11 to 20 are tasks 14 down to 5
        assert [item["title"] for item in content["data"]] == [f"task {index}" for index in range(14, 4, -1)]

    async def test_second_page_under_explicit_sort(self, handle):
        # 7 and 25 are coprime, so the priorities are 0..24 in scrambled order
        for index in range(25):
            await controller.create(handle, {"title": f"task {index}", "priority": index * 7 % 25})

        content = body(await controller.list_resources(handle, {
            "page": "2",
            "limit": "10",
            "sort": '{"priority": 1}',
        }))

        assert [item["priority"] for item in content["data"]] == list(range(10, 20))

    async def test_list_sort_and_filter(self, handle):
        for priority in (3, 1, 2):
            await controller.create(handle, {"title": f"p{priority}", "priority": priority})

        response = await controller.list_resources(handle, {
            "filter": '{"priority": {"$gte": 2}}',
            "sort": '{"priority": 1}',
        })

        content = body(response)
        assert [item["priority"] for item in content["data"]] == [2, 3]
        assert content["meta"]["total"] == 2

    async def test_empty_list_has_zero_pages(self, handle):
        content = body(await controller.list_resources(handle, {}))
        assert content["data"] == []
        assert content["meta"] == {"page": 1, "limit": 10, "total": 0, "pages": 0}

    async def test_get_missing_document(self, handle):
        response = await controller.get_by_id(handle, str(ObjectId()))
        assert response.status_code == 404
        assert body(response) == {"status": "error", "message": "Resource not found"}

    async def test_get_malformed_id(self, handle):
        with pytest.raises(InvalidIdentifierError):
            await controller.get_by_id(handle, "123")

    async def test_update_returns_new_state(self, handle):
        created = body(await controller.create(handle, {"title": "Old"}))["data"]

        response = await controller.update(handle, created["id"], {"title": "New"})

        content = body(response)
        assert content["message"] == "Resource updated successfully"
        assert content["data"]["title"] == "New"
        assert content["data"]["createdAt"] == created["createdAt"]

    async def test_soft_delete_keeps_document(self, handle):
        created = body(await controller.create(handle, {"title": "Keep me"}))["data"]

        response = await controller.soft_delete(handle, created["id"])
        assert body(response) == {
            "status": "success",
            "message": "Resource deleted successfully",
            "data": None,
        }

        # Repeating the soft delete still succeeds
        again = await controller.soft_delete(handle, created["id"])
        assert again.status_code == 200

        fetched = body(await controller.get_by_id(handle, created["id"]))["data"]
        assert fetched["isActive"] is False

    async def test_hard_delete_removes_document(self, handle):
        created = body(await controller.create(handle, {"title": "Bye"}))["data"]

        response = await controller.hard_delete(handle, created["id"])
        assert body(response)["message"] == "Resource permanently deleted"
        assert body(response)["data"]["id"] == created["id"]

        assert (await controller.get_by_id(handle, created["id"])).status_code == 404
        assert (await controller.hard_delete(handle, created["id"])).status_code == 404
