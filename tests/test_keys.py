"""Tests for foreign key / target key resolution."""

import pytest

from relate_orm import AssociationError, CompositeKeyArityError, Entity, Field, KeyDescriptor
from relate_orm.associations import resolve_keys

from tests.models import Author, Comment, Membership, Post


class Reader(Entity):
    _table_name = "readers"

    label = Field(str)


def test_default_foreign_key_is_camelized_alias_and_primary_key() -> None:
    """The default key is the alias joined with the target primary key."""
    keys = resolve_keys(Reader, Author, "Author")
    assert keys.foreign_key_names == ("AuthorId",)
    assert keys.target_keys == ("id",)


def test_default_foreign_key_for_underscored_source() -> None:
    """Underscored sources get an underscored default key."""
    keys = resolve_keys(Comment, Author, "Author")
    assert keys.foreign_key_names == ("author_id",)


def test_default_foreign_key_uses_alias() -> None:
    """An alias replaces the target name."""
    keys = resolve_keys(Reader, Author, "Writer")
    assert keys.foreign_key_names == ("WriterId",)


def test_string_foreign_key() -> None:
    """A string names the foreign key."""
    keys = resolve_keys(Reader, Author, "Author", foreign_key="writer_id")
    assert keys.foreign_keys == (KeyDescriptor(name="writer_id"),)


def test_descriptor_without_name_gets_default_name() -> None:
    """An unnamed descriptor keeps its settings under the default name."""
    keys = resolve_keys(Reader, Author, "Author", foreign_key={"allow_null": False})
    assert keys.foreign_keys[0].name == "AuthorId"
    assert keys.foreign_keys[0].allow_null is False


def test_unknown_descriptor_key_is_rejected() -> None:
    """Descriptor dicts only accept known settings."""
    with pytest.raises(TypeError):
        resolve_keys(Reader, Author, "Author", foreign_key={"name": "x", "colour": "red"})


def test_composite_keys_are_positionally_paired() -> None:
    """Composite keys pair by position."""
    keys = resolve_keys(
        Reader,
        Membership,
        "Membership",
        foreign_key=[{"name": "tenantId"}, {"name": "userId"}],
        target_key=["tenant", "userId"],
    )
    assert keys.foreign_key_names == ("tenantId", "userId")
    assert keys.target_keys == ("tenant", "userId")
    assert keys.single_primary_target_key is None


@pytest.mark.parametrize(
    "foreign_key, target_key",
    [
        (["a", "b"], ["x"]),
        (["a", "b"], "x"),
        ("a", ["x"]),
        (None, ["x"]),
    ],
)
def test_composite_arity_mismatch(foreign_key, target_key) -> None:
    """Both options must be lists of the same length."""
    with pytest.raises(CompositeKeyArityError) as exc_info:
        resolve_keys(Reader, Membership, "Membership", foreign_key=foreign_key, target_key=target_key)
    assert "composite key arity mismatch" in exc_info.value.message


def test_composite_elements_need_a_name() -> None:
    """Composite descriptors must be named."""
    with pytest.raises(AssociationError):
        resolve_keys(Reader, Membership, "Membership", foreign_key=[{"allow_null": False}], target_key=["tenant"])


def test_single_primary_target_key() -> None:
    """A non primary target key disables the primary key lookup."""
    assert resolve_keys(Reader, Author, "Author").single_primary_target_key == "AuthorId"
    keys = resolve_keys(Reader, Author, "Author", target_key="name")
    assert keys.single_primary_target_key is None


def test_identifier_fields_only_cover_existing_attributes() -> None:
    """identifier_fields stays empty until the keys are injected."""
    assert resolve_keys(Reader, Author, "Author").identifier_fields == ()
    assert resolve_keys(Post, Author, "Author").identifier_fields == ("AuthorId",)
    assert resolve_keys(Comment, Post, "Post").identifier_fields == ("post_id",)
