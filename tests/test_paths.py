from aip_reviewer.spec.naming import (
    is_custom_method,
    is_singular,
    looks_like_verb,
    pluralize_segment,
    singularize_segment,
    strip_verb_prefix,
)
from aip_reviewer.spec.paths import (
    CasingStyle,
    convert_casing,
    detect_casing_style,
    is_collection_endpoint,
    is_version_prefix,
    last_word,
    parent_path,
    replace_segments,
    resource_segments,
    split_path,
    split_words,
)
from aip_reviewer.spec.singleton import find_singleton_resources, is_singleton_path


def _spec(*paths: str) -> dict:
    return {"openapi": "3.0.3", "paths": {p: {"get": {}} for p in paths}}


class TestSegments:
    def test_split_path(self):
        assert split_path("/v1/users/{id}") == ["v1", "users", "{id}"]
        assert split_path("/") == []

    def test_resource_segments_drop_params_and_custom_methods(self):
        assert resource_segments("/users/{id}/orders") == ["users", "orders"]
        assert resource_segments("/users/{id}:cancel") == ["users"]
        assert resource_segments("/users:search") == []

    def test_version_prefix(self):
        assert is_version_prefix("v1")
        assert is_version_prefix("v2.1")
        assert is_version_prefix("api")
        assert not is_version_prefix("users")

    def test_replace_segments_by_position(self):
        assert replace_segments("/user/{id}/user", {0: "users"}) == "/users/{id}/user"

    def test_parent_path(self):
        assert parent_path("/a/b/c", 2) == "/a/b"
        assert parent_path("/a/b/c", 0) == "/"


class TestCollectionEndpoint:
    def test_plural_resource_is_collection(self):
        assert is_collection_endpoint("/users")
        assert is_collection_endpoint("/v1/users/{id}/orders")

    def test_non_collections(self):
        assert not is_collection_endpoint("/health")
        assert not is_collection_endpoint("/users/{id}")
        assert not is_collection_endpoint("/metadata")
        assert not is_collection_endpoint("/users:search")
        assert not is_collection_endpoint("/v1")
        assert not is_collection_endpoint("/")

    def test_singleton_policy_is_configurable(self):
        assert not is_collection_endpoint("/widgets", singleton_endpoints=frozenset({"widgets"}))

    def test_compound_segment_uses_head_word(self):
        assert is_collection_endpoint("/order-items")
        assert not is_collection_endpoint("/order-item")


class TestCasing:
    def test_detect(self):
        assert detect_casing_style("user_profiles") == CasingStyle.SNAKE
        assert detect_casing_style("user-profiles") == CasingStyle.KEBAB
        assert detect_casing_style("userProfiles") == CasingStyle.CAMEL
        assert detect_casing_style("UserProfiles") == CasingStyle.PASCAL
        assert detect_casing_style("users") == CasingStyle.LOWER

    def test_split_words(self):
        assert split_words("userProfiles") == ["user", "Profiles"]
        assert split_words("HTTPServers") == ["HTTP", "Servers"]
        assert split_words("order-line_items") == ["order", "line", "items"]

    def test_last_word(self):
        assert last_word("orderItems") == "Items"
        assert last_word("users") == "users"

    def test_convert(self):
        assert convert_casing("fooBar", CasingStyle.KEBAB) == "foo-bar"
        assert convert_casing("foo-bar", CasingStyle.CAMEL) == "fooBar"
        assert convert_casing("foo_bar", CasingStyle.PASCAL) == "FooBar"
        assert convert_casing("FooBar", CasingStyle.SNAKE) == "foo_bar"


class TestSingletons:
    def test_declared_path_without_param_child(self):
        singletons = find_singleton_resources(_spec("/health", "/users", "/users/{id}"))
        assert "/health" in singletons
        assert "/users" not in singletons

    def test_undeclared_prefix_is_inferred(self):
        singletons = find_singleton_resources(_spec("/v1/database/backup"))
        assert "/v1/database" in singletons
        assert "/v1" not in singletons

    def test_prefix_with_param_child_is_not_singleton(self):
        singletons = find_singleton_resources(_spec("/v1/projects/export", "/v1/projects/{id}"))
        assert "/v1/projects" not in singletons

    def test_empty_spec(self):
        assert find_singleton_resources({}) == frozenset()

    def test_is_singleton_path_covers_children(self):
        singletons = frozenset({"/v1/database"})
        assert is_singleton_path("/v1/database", singletons)
        assert is_singleton_path("/v1/database/backup", singletons)
        assert not is_singleton_path("/v1/databases", singletons)


class TestNaming:
    def test_colon_suffix_is_custom_method(self):
        assert is_custom_method("users:search", "/users:search", frozenset())

    def test_verb_prefixed_compound_is_custom_method(self):
        assert is_custom_method("export-csv", "/orders/{id}/export-csv", frozenset())

    def test_action_on_resource_is_custom_method(self):
        assert is_custom_method("cancel", "/orders/{id}/cancel", frozenset())
        assert is_custom_method("reset", "/config/reset", frozenset({"/config"}))

    def test_action_on_collection_is_not_custom_method(self):
        assert not is_custom_method("cancel", "/orders/cancel", frozenset())

    def test_looks_like_verb(self):
        assert looks_like_verb("getUsers")
        assert looks_like_verb("create")
        assert looks_like_verb("create-order")
        assert not looks_like_verb("users")
        assert not looks_like_verb("listings")
        assert not looks_like_verb("addresses")

    def test_strip_verb_prefix(self):
        assert strip_verb_prefix("getUsers") == "users"
        assert strip_verb_prefix("create-order") == "order"
        assert strip_verb_prefix("get") == "resource"

    def test_is_singular(self):
        assert is_singular("user")
        assert is_singular("orderItem")
        assert not is_singular("users")
        assert not is_singular("order-items")

    def test_pluralize_segment_keeps_style(self):
        assert pluralize_segment("order-item") == "order-items"
        assert pluralize_segment("orderItem") == "orderItems"
        assert pluralize_segment("person") == "people"

    def test_singularize_segment(self):
        assert singularize_segment("order-items") == "order-item"
        assert singularize_segment("users") == "user"
