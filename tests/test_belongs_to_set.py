"""Tests for assigning and creating the associated instance."""

import pytest

from relate_orm import AssociationError, ValidationError

from tests.models import (
    SAVE_LOG,
    AuditEntry,
    Author,
    Draft,
    Membership,
    PinnedPost,
    Post,
    PostAuthor,
)


async def test_set_instance_persists_foreign_key(db) -> None:
    """Setting an instance copies its primary key and saves."""
    ann = await Author.create({"name": "Ann"})
    post = await Post.create({"title": "Hello"})

    await post.setAuthor(ann)

    assert post.AuthorId == ann.id
    reloaded = await Post.get_by_id(post.id)
    assert reloaded.AuthorId == ann.id


async def test_set_only_updates_foreign_key_column(db, statements) -> None:
    """The save issued by set writes the key column only."""
    ann = await Author.create({"name": "Ann"})
    post = await Post.create({"title": "Hello"})
    post.title = "Changed in memory"

    await post.setAuthor(ann, logging=statements.append)

    assert len(statements) == 1
    assert statements[0].startswith("UPDATE posts SET AuthorId = ?")
    reloaded = await Post.get_by_id(post.id)
    assert reloaded.title == "Hello"


async def test_set_marks_save_as_association_driven(db) -> None:
    """Hooks see association=True and the key fields."""
    ann = await Author.create({"name": "Ann"})
    post = await Post.create({"title": "Hello"})
    SAVE_LOG.clear()

    await post.setAuthor(ann)

    assert SAVE_LOG == [("Post", True, ["AuthorId"])]


async def test_use_hooks_false_skips_save_hooks(db) -> None:
    """use_hooks=False saves without running hooks."""
    ann = await Author.create({"name": "Ann"})
    draft = await Draft.create({"title": "Draft"})
    SAVE_LOG.clear()

    await draft.setAuthor(ann)

    assert SAVE_LOG == []
    assert (await Draft.get_by_id(draft.id)).AuthorId == ann.id


async def test_set_none_without_save_stays_in_memory(db, statements) -> None:
    """save=False changes the attribute and issues no SQL."""
    ann = await Author.create({"name": "Ann"})
    post = await Post.create({"title": "Hello", "AuthorId": ann.id})

    result = await post.setAuthor(None, save=False, logging=statements.append)

    assert result is None
    assert post.AuthorId is None
    assert statements == []
    assert (await Post.get_by_id(post.id)).AuthorId == ann.id


async def test_set_none_dissociates(db) -> None:
    """Setting None clears the stored key."""
    ann = await Author.create({"name": "Ann"})
    post = await Post.create({"title": "Hello", "AuthorId": ann.id})

    await post.setAuthor(None)

    assert (await Post.get_by_id(post.id)).AuthorId is None


async def test_set_raw_key(db) -> None:
    """key= stores a raw target key."""
    ann = await Author.create({"name": "Ann"})
    post = await Post.create({"title": "Hello"})

    await post.setAuthor(key=ann.id)

    assert (await post.getAuthor()).id == ann.id


async def test_set_rejects_instance_and_key_together(db) -> None:
    """An instance and key= together are ambiguous."""
    ann = await Author.create({"name": "Ann"})
    post = Post(title="Hello")
    with pytest.raises(ValueError):
        await post.setAuthor(ann, key=ann.id)


async def test_set_rejects_other_entity_types(db) -> None:
    """Only target instances are accepted positionally."""
    other = await Post.create({"title": "Not an author"})
    post = Post(title="Hello")
    with pytest.raises(TypeError):
        await post.setAuthor(other, save=False)
    assert post.AuthorId is None


async def test_set_composite_from_instance_and_key(db) -> None:
    """Composite keys take an instance or a tuple of values."""
    membership = await Membership.create({"tenant": "acme", "userId": 7})
    entry = await AuditEntry.create({"action": "login"})

    await entry.setMembership(membership)
    reloaded = await AuditEntry.get_by_id(entry.id)
    assert (reloaded.tenantId, reloaded.userId) == ("acme", 7)

    await entry.setMembership(key=("umbrella", 8), save=False)
    assert (entry.tenantId, entry.userId) == ("umbrella", 8)

    with pytest.raises(AssociationError):
        await entry.setMembership(key="acme", save=False)


async def test_set_on_unsaved_source_inserts_it(db) -> None:
    """An unsaved source is inserted whole by the setter's save."""
    ann = await Author.create({"name": "Ann"})
    post = Post(title="Fresh")

    await post.setAuthor(ann)

    assert post.id is not None
    reloaded = await Post.get_by_id(post.id)
    assert reloaded.AuthorId == ann.id
    assert reloaded.title == "Fresh"


async def test_set_on_unsaved_source_validates_every_field(db, statements) -> None:
    """The insert writes every column, so a missing title fails validation first."""
    ann = await Author.create({"name": "Ann"})
    post = Post()

    with pytest.raises(ValidationError) as exc:
        await post.setAuthor(ann, logging=statements.append)

    assert exc.value.details["field"] == "title"
    assert statements == []
    assert await Post.query().count() == 0


async def test_create_links_new_target(db) -> None:
    """createAuthor inserts the author then links it."""
    post = await Post.create({"title": "Hello"})

    author = await post.createAuthor({"name": "Zoe"})

    assert isinstance(author, Author)
    assert author.id is not None
    assert post.AuthorId == author.id
    assert (await Post.get_by_id(post.id)).AuthorId == author.id
    assert (await post.getAuthor()).name == "Zoe"


async def test_create_through_alias(db) -> None:
    """Aliased create writes the aliased key."""
    post = await Post.create({"title": "Hello"})
    editor = await post.createEditor({"name": "Eve"})
    assert post.editor_id == editor.id


async def test_create_failure_leaves_source_untouched(db) -> None:
    """A failed target insert never reaches the link step."""
    post = await Post.create({"title": "Hello"})

    with pytest.raises(ValidationError):
        await post.createAuthor({})

    assert post.AuthorId is None
    assert await Author.unscoped().count() == 0


async def test_create_in_transaction_rolls_back_together(db) -> None:
    """Both statements roll back with the transaction."""
    post = await Post.create({"title": "Hello"})

    with pytest.raises(RuntimeError):
        async with db.transaction() as t:
            author = await PostAuthor.create(post, {"name": "Temp"}, transaction=t)
            assert post.AuthorId == author.id
            raise RuntimeError("abort")

    assert await Author.unscoped().count() == 0
    assert (await Post.get_by_id(post.id)).AuthorId is None


async def test_create_in_transaction_commits(db) -> None:
    """Both statements commit with the transaction."""
    post = await Post.create({"title": "Hello"})

    async with db.transaction() as t:
        author = await post.createAuthor({"name": "Kept"}, transaction=t)

    assert (await Post.get_by_id(post.id)).AuthorId == author.id
    assert t.finished == "commit"


async def test_subclass_instances_use_inherited_accessors(db) -> None:
    """A subclass of Post stores its own key column and runs Post's save hook."""
    ann = await Author.create({"name": "Ann"})
    pinned = await PinnedPost.create({"title": "Pinned"})
    SAVE_LOG.clear()

    await pinned.setAuthor(ann)

    assert SAVE_LOG == [("PinnedPost", True, ["AuthorId"])]
    reloaded = await PinnedPost.get_by_id(pinned.id)
    assert (await reloaded.getAuthor()).name == "Ann"
    assert await Post.query().count() == 0
