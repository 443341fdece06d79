"""Unit tests for field metadata resolution.

WHY: Every output key, group tag and omission flag the traversal engine
acts on comes from the resolver. A wrong index path or a renamed key
silently corrupts every document of that type.

HOW: Tests cover json-spec and groups-spec parsing, exclusion rules,
embedded flattening (index paths, attribute paths, display names),
non-dataclass inputs, and reflection failures.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from jsongroup.core.fields import (
    FieldInfo,
    group_field,
    parse_groups_tag,
    parse_json_tag,
    resolve_fields,
    tags,
)
from jsongroup.errors import ReflectionError

from conftest import ComplexUser, Profile, User


class TestParseJsonTag:
    """parse_json_tag splits name and omission options."""

    def test_empty_spec_keeps_field_name(self):
        assert parse_json_tag("email", "") == ("email", False, False)

    def test_name_only(self):
        assert parse_json_tag("email", "mail") == ("mail", False, False)

    def test_empty_name_with_options(self):
        assert parse_json_tag("email", ",omitempty") == ("email", True, False)

    def test_both_options(self):
        assert parse_json_tag("n", "n,omitempty,omitzero") == ("n", True, True)

    def test_unknown_options_ignored(self):
        assert parse_json_tag("n", "n,string,omitzero") == ("n", False, True)


class TestParseGroupsTag:
    """parse_groups_tag trims names and drops empty segments."""

    def test_comma_separated(self):
        assert parse_groups_tag("public, admin") == ("public", "admin")

    def test_empty_segments_dropped(self):
        assert parse_groups_tag(",public,, ,admin,") == ("public", "admin")

    def test_iterable_accepted(self):
        assert parse_groups_tag(["public", " admin "]) == ("public", "admin")

    def test_missing(self):
        assert parse_groups_tag(None) == ()
        assert parse_groups_tag("") == ()


class TestTagHelpers:
    def test_tags_builds_metadata(self):
        assert tags("id,omitempty", "public") == {"json": "id,omitempty", "groups": "public"}

    def test_tags_custom_key_and_embedded(self):
        meta = tags(groups="a", embedded=True, tag_key="roles")
        assert meta == {"roles": "a", "embedded": True}

    def test_group_field_merges_existing_metadata(self):
        @dataclass
        class T:
            x: int = group_field("a", json="x", default=0, metadata={"doc": "X"})

        info = resolve_fields(T, "groups")[0]
        assert info.key == "x"
        assert info.groups == ("a",)


class TestResolveFields:
    """resolve_fields produces declaration-ordered FieldInfo tables."""

    def test_declaration_order_and_keys(self):
        fields = resolve_fields(User, "groups")
        assert [f.key for f in fields] == [
            "id", "name", "email", "password", "address", "tags", "settings",
        ]
        assert fields[1].omitempty is True
        assert fields[2].groups == ("admin", "internal")

    def test_private_and_excluded_fields_skipped(self):
        @dataclass
        class T:
            visible: int = 0
            _hidden: int = 0
            skipped: int = field(default=0, metadata=tags("-"))

        fields = resolve_fields(T, "groups")
        assert [f.name for f in fields] == ["visible"]

    def test_untagged_field_uses_attribute_name(self):
        @dataclass
        class T:
            plain: str = ""

        (info,) = resolve_fields(T, "groups")
        assert info == FieldInfo(index=(0,), attr_path=("plain",), name="plain", key="plain")

    def test_custom_tag_key(self):
        @dataclass
        class T:
            a: int = field(default=0, metadata={"roles": "ops"})

        assert resolve_fields(T, "roles")[0].groups == ("ops",)
        assert resolve_fields(T, "groups")[0].groups == ()

    def test_non_dataclass_resolves_empty(self):
        assert resolve_fields(int, "groups") == ()
        assert resolve_fields(dict, "groups") == ()

    def test_instance_is_not_a_type(self):
        assert resolve_fields(User(), "groups") == ()


class TestEmbeddedFlattening:
    """Embedded dataclass members are hoisted into the parent table."""

    def test_index_and_attr_paths_prefixed(self):
        fields = resolve_fields(Profile, "groups")
        created = fields[0]
        assert created.key == "created_at"
        assert created.index == (0, 0)
        assert created.attr_path == ("base", "created_at")
        assert created.name == "base.created_at"

    def test_output_keys_not_renamed(self):
        keys = [f.key for f in resolve_fields(Profile, "groups")]
        assert keys == ["created_at", "updated_at", "age", "bio", "private"]

    def test_nested_embedding(self):
        fields = resolve_fields(ComplexUser, "groups")
        by_key = {f.key: f for f in fields}
        assert "profile" not in by_key
        assert by_key["created_at"].attr_path == ("profile", "base", "created_at")
        assert by_key["created_at"].index == (1, 0, 0)
        assert by_key["id"].attr_path == ("user", "id")

    def test_embedding_field_groups_ignored(self):
        fields = resolve_fields(ComplexUser, "groups")
        by_key = {f.key: f for f in fields}
        assert by_key["bio"].groups == ("public",)

    def test_string_annotation_resolved(self):
        fields = resolve_fields(_Forward, "groups")
        assert [f.key for f in fields] == ["created_at", "updated_at", "own"]

    def test_non_dataclass_embedded_stays_anonymous(self):
        @dataclass
        class T:
            extra: Any = group_field(embedded=True, default=None)

        (info,) = resolve_fields(T, "groups")
        assert info.anonymous is True
        assert info.key == "extra"

    def test_value_of_follows_path(self, complex_user):
        by_key = {f.key: f for f in resolve_fields(ComplexUser, "groups")}
        assert by_key["created_at"].value_of(complex_user) == "2023-01-01"

    def test_value_of_none_intermediate(self):
        info = FieldInfo(index=(0, 0), attr_path=("a", "b"), name="a.b", key="b")

        @dataclass
        class Holder:
            a: Optional[Any] = None

        assert info.value_of(Holder()) is None


class TestReflectionFailures:
    def test_unresolvable_annotation(self):
        @dataclass
        class Broken:
            inner: "DoesNotExist" = group_field(embedded=True, default=None)  # noqa: F821

        with pytest.raises(ReflectionError) as excinfo:
            resolve_fields(Broken, "groups")
        assert excinfo.value.cause is not None

    def test_embedding_cycle(self):
        with pytest.raises(ReflectionError, match="embedding cycle"):
            resolve_fields(_Ping, "groups")


@dataclass
class _Base:
    created_at: str = ""
    updated_at: str = ""


@dataclass
class _Forward:
    base: "_Base" = group_field(embedded=True, default_factory=_Base)
    own: int = 0


@dataclass
class _Ping:
    pong: "_Pong" = group_field(embedded=True, default=None)


@dataclass
class _Pong:
    ping: "_Ping" = group_field(embedded=True, default=None)
