import pytest

from apps.api.services.collection_query import (
    CollectionQuery,
    CollectionQueryService,
    as_text,
    pluralize,
    resolve_path,
)
from core.exceptions import InvalidQueryError
from core.storage.fixture_store import FixtureStore


def run(store, params, **kwargs):
    query = CollectionQuery.from_params(params)
    return CollectionQueryService(store).run("posts", query, **kwargs)


def test_from_params_splits_filters_and_operators():
    query = CollectionQuery.from_params(
        [
            ("title", "a"),
            ("title", "b"),
            ("views_gte", "10"),
            ("author.name_like", "^al"),
            ("_sort", "views,title"),
            ("_order", "DESC"),
            ("_page", "2"),
            ("_embed", "comments,likes"),
        ]
    )
    assert query.filters == {"title": ["a", "b"]}
    assert query.operators == [("views", "gte", "10"), ("author.name", "like", "^al")]
    assert query.sort == ["views", "title"]
    assert query.order == ["desc"]
    assert query.page == 2
    assert query.embed == ["comments", "likes"]


@pytest.mark.parametrize("name", ["_page", "_limit", "_start", "_end"])
def test_from_params_rejects_non_integers(name):
    with pytest.raises(InvalidQueryError):
        CollectionQuery.from_params([(name, "ten")])


def test_missing_fields_sort_last(store):
    store.create_item("posts", {"title": "no views"})
    ascending = run(store, [("_sort", "views")]).items
    descending = run(store, [("_sort", "views"), ("_order", "desc")]).items
    assert [item["id"] for item in ascending] == [2, 1, 3, 4]
    assert [item["id"] for item in descending] == [3, 1, 2, 4]


def test_ne_keeps_records_without_the_field(store):
    store.create_item("posts", {"title": "no views"})
    result = run(store, [("views_ne", "100")])
    assert [item["id"] for item in result.items] == [2, 3, 4]


def test_string_comparison_when_not_numeric(store):
    result = run(store, [("title_gte", "S")])
    assert [item["title"] for item in result.items] == ["Second post"]


def test_invalid_like_pattern(store):
    with pytest.raises(InvalidQueryError):
        run(store, [("title_like", "[unclosed")])


def test_page_defaults_to_ten_items():
    store = FixtureStore({"posts": [{"id": index} for index in range(1, 26)]})
    result = run(store, [("_page", "3")], page_url=lambda page: f"/posts?_page={page}")
    assert [item["id"] for item in result.items] == [21, 22, 23, 24, 25]
    assert result.headers["X-Total-Count"] == "25"
    assert result.headers["Link"] == '</posts?_page=1>; rel="first", </posts?_page=2>; rel="prev", </posts?_page=3>; rel="last"'


def test_first_page_links(store):
    result = run(store, [("_page", "1"), ("_limit", "1")], page_url=lambda page: f"?_page={page}")
    assert result.headers["Link"] == '<?_page=1>; rel="first", <?_page=2>; rel="next", <?_page=3>; rel="last"'


def test_no_headers_without_slicing(store):
    assert run(store, []).headers == {}


def test_embed_ignores_unknown_collections(store):
    result = run(store, [("_embed", "likes"), ("_expand", "user")])
    assert all("likes" not in item and "user" not in item for item in result.items)


def test_resolve_path_and_as_text():
    record = {"author": {"name": "alice", "tags": ["x", "y"]}}
    assert resolve_path(record, "author.name") == "alice"
    assert resolve_path(record, "author.tags.1") == "y"
    assert as_text(True) == "true"
    assert as_text(None) == "null"
    assert as_text(2.0) == "2"
    assert as_text([1, 2]) == "[1,2]"


@pytest.mark.parametrize("singular, plural", [("post", "posts"), ("category", "categories"), ("box", "boxes"), ("day", "days")])
def test_pluralize(singular, plural):
    assert pluralize(singular) == plural


@pytest.mark.parametrize(
    "params",
    [
        [("_", "1700000000")],
        [("callback", "cb")],
        [("nosuchfield", "1")],
        [("nosuchfield_gte", "1")],
    ],
)
def test_unknown_and_transport_params_are_ignored(store, params):
    result = run(store, params)
    assert [item["id"] for item in result.items] == [1, 2, 3]


def test_known_filter_still_applies_next_to_unknown(store):
    result = run(store, [("author.name", "bob"), ("nosuchfield", "1")])
    assert [item["id"] for item in result.items] == [2]
