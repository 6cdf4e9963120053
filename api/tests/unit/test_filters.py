"""Unit tests for the document filter language and in-memory evaluation."""

import pytest

from docpager.errors.problem_details import InvalidFilterError
from docpager.pagination import InMemoryDocumentStore, SortDirection, SortSpec, parse_filter, with_id_before
from docpager.pagination.filters import iter_conditions, json_kind


class TestIterConditions:
    """Test filter flattening and validation."""

    def test_empty_filters(self):
        assert iter_conditions(None) == []
        assert iter_conditions({}) == []

    def test_plain_values_are_equality(self):
        assert iter_conditions({"name": "Alice", "age": 30}) == [
            ("name", "$eq", "Alice"),
            ("age", "$eq", 30),
        ]

    def test_operator_mapping(self):
        assert iter_conditions({"age": {"$gte": 18, "$lt": 65}}) == [
            ("age", "$gte", 18),
            ("age", "$lt", 65),
        ]

    def test_embedded_object_is_equality(self):
        assert iter_conditions({"address": {"city": "Oslo"}}) == [
            ("address", "$eq", {"city": "Oslo"})
        ]

    def test_and_is_flattened(self):
        conditions = iter_conditions({"$and": [{"_id": {"$lt": 5}}, {"_id": {"$gt": 1}}]})

        assert conditions == [("_id", "$lt", 5), ("_id", "$gt", 1)]

    @pytest.mark.parametrize("filter", [
        {"age": {"$regex": "^A"}},
        {"$or": [{"a": 1}]},
        {"age": {"$gt": 1, "plain": 2}},
        {"age": {"$in": 3}},
        {"age": {"$exists": "yes"}},
        {"age": {"$lt": [1, 2]}},
        {"age": {"$gt": None}},
        {"_id": "abc"},
        {"_id": {"$lt": True}},
        {"_id": {"$in": [1, "2"]}},
        {"_id": [1]},
        {"_id": {"$ne": [1, 2]}},
        {"_id": {"$lt": [5]}},
        {"a..b": 1},
        {"$and": {"a": 1}},
        ["not", "a", "mapping"],
    ])
    def test_invalid_filters(self, filter):
        with pytest.raises(InvalidFilterError):
            iter_conditions(filter)

    def test_invalid_filter_reports_field(self):
        with pytest.raises(InvalidFilterError) as exc_info:
            iter_conditions({"age": {"$regex": "x"}})

        assert exc_info.value.field == "age"
        assert exc_info.value.status == 400

    @pytest.mark.parametrize("value,kind", [
        (None, "null"), (True, "boolean"), (3, "number"), (2.5, "number"),
        ("x", "string"), ([1], "array"), ({"a": 1}, "object"),
    ])
    def test_json_kind(self, value, kind):
        assert json_kind(value) == kind


class TestWithIdBefore:
    """Test cursor boundary augmentation."""

    def test_no_filter(self):
        assert with_id_before(None, 10) == {"_id": {"$lt": 10}}
        assert with_id_before({}, 10) == {"_id": {"$lt": 10}}

    def test_merges_with_filter(self):
        assert with_id_before({"age": 30}, 10) == {"_id": {"$lt": 10}, "age": 30}

    def test_existing_id_condition_is_kept(self):
        filter = {"_id": {"$gte": 3}}

        assert with_id_before(filter, 10) == {
            "$and": [{"_id": {"$lt": 10}}, {"_id": {"$gte": 3}}]
        }
        assert filter == {"_id": {"$gte": 3}}


class TestParseFilter:
    """Test parsing filters from query strings."""

    def test_missing_or_blank(self):
        assert parse_filter(None) == {}
        assert parse_filter("  ") == {}

    def test_valid_json(self):
        assert parse_filter('{"age": {"$gt": 20}}') == {"age": {"$gt": 20}}

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "42", '{"a": {"$bad": 1}}'])
    def test_invalid(self, raw):
        with pytest.raises(InvalidFilterError):
            parse_filter(raw)


class TestInMemoryMatching:
    """Test filter evaluation in the in-memory store."""

    @pytest.fixture
    def store(self):
        return InMemoryDocumentStore("mixed", [
            {"name": "Alice", "age": 30, "tags": ["a", "b"], "address": {"city": "Oslo"}},
            {"name": "Bob", "age": 25, "active": True},
            {"name": "Charlie", "age": "unknown", "active": False},
            {"name": "David", "age": 28, "nickname": None},
            {"name": "Eve", "age": 1, "active": 1},
        ])

    async def names(self, store, filter, sort=None):
        return [document.body["name"] for document in await store.find_matching(filter, sort)]

    @pytest.mark.asyncio
    async def test_equality(self, store):
        assert await self.names(store, {"name": "Bob"}) == ["Bob"]
        assert await self.names(store, {"tags": ["a", "b"]}) == ["Alice"]

    @pytest.mark.asyncio
    async def test_boolean_does_not_equal_number(self, store):
        assert await self.names(store, {"active": True}) == ["Bob"]
        assert await self.names(store, {"active": 1}) == ["Eve"]

    @pytest.mark.asyncio
    async def test_dotted_paths(self, store):
        assert await self.names(store, {"address.city": "Oslo"}) == ["Alice"]

    @pytest.mark.asyncio
    async def test_comparisons_skip_other_types(self, store):
        assert await self.names(store, {"age": {"$gte": 25}}) == ["Alice", "Bob", "David"]
        assert await self.names(store, {"age": {"$lt": "v"}}) == ["Charlie"]

    @pytest.mark.asyncio
    async def test_ne_matches_missing_fields(self, store):
        assert await self.names(store, {"active": {"$ne": True}}) == [
            "Alice", "Charlie", "David", "Eve"
        ]

    @pytest.mark.asyncio
    async def test_in_and_nin(self, store):
        assert await self.names(store, {"age": {"$in": [25, 28]}}) == ["Bob", "David"]
        assert await self.names(store, {"age": {"$nin": [25, 28, 30]}}) == ["Charlie", "Eve"]

    @pytest.mark.asyncio
    async def test_exists(self, store):
        assert await self.names(store, {"nickname": {"$exists": True}}) == ["David"]
        assert await self.names(store, {"active": {"$exists": False}}) == ["Alice", "David"]

    @pytest.mark.asyncio
    async def test_null_equality_requires_explicit_null(self, store):
        assert await self.names(store, {"nickname": None}) == ["David"]

    @pytest.mark.asyncio
    async def test_id_conditions(self, store):
        assert await self.names(store, {"_id": {"$lte": 2}}) == ["Alice", "Bob"]
        assert await self.names(store, {"_id": {"$in": [5, 1]}}) == ["Alice", "Eve"]
        assert await self.names(store, {"_id": 3}) == ["Charlie"]

    @pytest.mark.asyncio
    async def test_sort_orders_kinds_and_missing(self, store):
        """Missing sorts first, numbers before booleans, ids break ties."""
        sort = SortSpec("active", SortDirection.ASCENDING)

        assert await self.names(store, {}, sort) == ["Alice", "David", "Eve", "Charlie", "Bob"]

    @pytest.mark.asyncio
    async def test_sort_descending_keeps_id_tie_break(self):
        store = InMemoryDocumentStore("ties", [
            {"k": 1, "name": "a"}, {"k": 2, "name": "b"}, {"k": 1, "name": "c"}, {"k": 2, "name": "d"}
        ])
        sort = SortSpec("k", SortDirection.DESCENDING)

        assert await self.names(store, {}, sort) == ["b", "d", "a", "c"]

    @pytest.mark.asyncio
    async def test_skip_and_limit(self, store):
        documents = await store.find_matching({}, SortSpec.by_id_descending(), skip=1, limit=2)

        assert [document.id for document in documents] == [4, 3]

    @pytest.mark.asyncio
    async def test_count_matches_find(self, store):
        filter = {"age": {"$gt": 20}}

        assert await store.count_matching(filter) == len(await store.find_matching(filter))

    @pytest.mark.asyncio
    async def test_arrays_sort_by_canonical_json_text(self):
        store = InMemoryDocumentStore("lists", [
            {"name": "short", "v": [3]}, {"name": "long", "v": [1, 2]}
        ])

        assert await self.names(store, {}, SortSpec("v")) == ["long", "short"]
