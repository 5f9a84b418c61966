"""Unit tests for TodoService: CRUD, listing, statistics, batches and caching."""

from __future__ import annotations

import json

import pytest
from sqlalchemy import delete, func, select

from tests.factories.todo import TodoFactory
from tests.factories.user import UserFactory
from todo_api.models import Todo
from todo_api.repositories.todo import TodoRepository
from todo_api.services._shared.errors import RecordNotFoundError, ServiceValidationError
from todo_api.services.todos.dto import TodoCreateIn, TodoQueryIn, TodoUpdateIn
from todo_api.services.todos.service import TodoService


@pytest.fixture()
def owner():
    return UserFactory()


class TestTodoCommands:
    @pytest.fixture()
    def service(self, null_cache) -> TodoService:
        return TodoService(cache=null_cache)

    def test_create(self, service, owner):
        out = service.create(TodoCreateIn(title="Write tests", description="soon"), owner.id)

        assert out.id is not None
        assert out.user_id == owner.id
        assert out.completed is False
        assert out.description == "soon"

    def test_create_rejects_blank_title(self, service, owner):
        with pytest.raises(ServiceValidationError):
            service.create(TodoCreateIn(title="   "), owner.id)

    def test_create_for_deleted_owner_is_not_found(self, service, session):
        user = UserFactory()
        user_id = user.id
        session.delete(user)
        session.commit()

        with pytest.raises(RecordNotFoundError) as exc:
            service.create(TodoCreateIn(title="Orphan"), user_id)

        assert exc.value.entity == "User"
        assert exc.value.key == user_id
        assert session.scalar(select(func.count(Todo.id))) == 0

    def test_update_only_touches_provided_fields(self, service, owner):
        todo = TodoFactory(user=owner, title="Old", description="keep me")

        out = service.update(todo.id, owner.id, TodoUpdateIn.of(completed=True))

        assert out.completed is True
        assert out.title == "Old"
        assert out.description == "keep me"

    def test_update_can_clear_description(self, service, owner):
        todo = TodoFactory(user=owner, description="remove me")

        out = service.update(todo.id, owner.id, TodoUpdateIn.of(description=None))

        assert out.description is None

    def test_foreign_todo_behaves_like_missing(self, service, owner, session):
        foreign = TodoFactory()
        session.commit()

        for call in (
            lambda: service.find_one(foreign.id, owner.id),
            lambda: service.update(foreign.id, owner.id, TodoUpdateIn.of(title="x")),
            lambda: service.remove(foreign.id, owner.id),
        ):
            with pytest.raises(RecordNotFoundError) as exc:
                call()
            assert str(exc.value) == f"Todo with identifier {foreign.id} not found"

        with pytest.raises(RecordNotFoundError) as missing:
            service.find_one(999999, owner.id)
        assert str(missing.value) == "Todo with identifier 999999 not found"

    def test_remove(self, service, owner, session):
        todo = TodoFactory(user=owner)
        todo_id = todo.id

        assert service.remove(todo_id, owner.id) == {"success": True}
        assert session.get(Todo, todo_id) is None


class TestTodoBatches:
    @pytest.fixture()
    def service(self, null_cache) -> TodoService:
        return TodoService(cache=null_cache)

    def test_update_many_all_owned(self, service, owner, session):
        todos = [TodoFactory(user=owner) for _ in range(3)]
        ids = [t.id for t in todos]

        result = service.update_many(ids, TodoUpdateIn.of(completed=True), owner.id)

        assert result.count == 3
        session.expunge_all()
        assert all(session.get(Todo, i).completed for i in ids)

    def test_update_many_with_missing_id_changes_nothing(self, service, owner, session):
        a = TodoFactory(user=owner).id
        b = TodoFactory(user=owner).id
        foreign = TodoFactory().id
        owner_id = owner.id
        # survive the rollback of the failed batch
        session.commit()

        with pytest.raises(RecordNotFoundError) as exc:
            service.update_many([a, foreign, 424242, b], TodoUpdateIn.of(completed=True), owner_id)

        assert exc.value.key == foreign
        session.expunge_all()
        assert session.get(Todo, a).completed is False
        assert session.get(Todo, b).completed is False

    @pytest.mark.parametrize("operation", ["update", "delete"])
    def test_row_removed_after_check_aborts_batch(
        self, service, owner, session, monkeypatch, operation
    ):
        ids = [TodoFactory(user=owner).id for _ in range(2)]
        owner_id = owner.id
        session.commit()
        check = TodoRepository.owned_ids

        def check_then_lose_row(repo, wanted, user_id):
            owned = check(repo, wanted, user_id)
            # a concurrent writer removes the second todo once the check passed
            repo.session.execute(delete(Todo).where(Todo.id == ids[1]))
            return owned

        monkeypatch.setattr(TodoRepository, "owned_ids", check_then_lose_row)

        with pytest.raises(RecordNotFoundError) as exc:
            if operation == "update":
                service.update_many(ids, TodoUpdateIn.of(completed=True), owner_id)
            else:
                service.delete_many(ids, owner_id)

        assert exc.value.key == ids[1]
        session.expunge_all()
        assert session.get(Todo, ids[0]).completed is False

    def test_update_many_validates_values(self, service, owner):
        a = TodoFactory(user=owner)

        with pytest.raises(ServiceValidationError):
            service.update_many([a.id], TodoUpdateIn.of(title=""), owner.id)

    def test_delete_many_all_owned(self, service, owner):
        ids = [TodoFactory(user=owner).id for _ in range(2)]

        assert service.delete_many(ids, owner.id).count == 2
        assert service.get_statistics(owner.id).total == 0

    def test_delete_many_with_missing_id_changes_nothing(self, service, owner, session):
        ids = [TodoFactory(user=owner).id for _ in range(2)]
        session.commit()

        with pytest.raises(RecordNotFoundError) as exc:
            service.delete_many([ids[0], 31337, ids[1]], owner.id)

        assert exc.value.key == 31337
        assert service.get_statistics(owner.id).total == 2


class TestTodoQueries:
    @pytest.fixture()
    def service(self, null_cache) -> TodoService:
        return TodoService(cache=null_cache)

    def test_second_page_of_newest_first(self, service, owner):
        TodoFactory(user=owner, title="oldest")
        middle = TodoFactory(user=owner, title="middle")
        TodoFactory(user=owner, title="newest")

        page = service.find_all(TodoQueryIn(page=2, limit=1), owner.id)

        assert [t.id for t in page.items] == [middle.id]
        assert (page.total, page.page, page.limit, page.total_pages) == (3, 2, 1, 3)

    def test_defaults_and_trimmed_search(self, service, owner):
        TodoFactory(user=owner, title="Pay rent", description=None)
        TodoFactory(user=owner, title="Walk", description=None)

        page = service.find_all(TodoQueryIn(search="  rent  "), owner.id)

        assert page.page == 1
        assert page.limit == 10
        assert [t.title for t in page.items] == ["Pay rent"]

    def test_sort_by_title_ascending(self, service, owner):
        for title in ("b", "c", "a"):
            TodoFactory(user=owner, title=title)

        page = service.find_all(TodoQueryIn(sort_by="title", sort_order="asc"), owner.id)

        assert [t.title for t in page.items] == ["a", "b", "c"]

    def test_statistics(self, service, owner):
        TodoFactory(user=owner, completed=True)
        TodoFactory(user=owner, completed=True)
        TodoFactory(user=owner, completed=False)

        stats = service.get_statistics(owner.id)

        assert (stats.total, stats.completed, stats.pending) == (3, 2, 1)
        assert stats.completion_rate == pytest.approx(66.6666, rel=1e-4)

    def test_statistics_without_todos(self, service, owner):
        stats = service.get_statistics(owner.id)

        assert (stats.total, stats.completed, stats.pending, stats.completion_rate) == (0, 0, 0, 0)


class TestTodoCaching:
    @pytest.fixture()
    def service(self, redis_cache) -> TodoService:
        return TodoService(cache=redis_cache)

    def test_listing_is_cached_under_query_key(self, service, owner, fake_redis):
        TodoFactory(user=owner)

        service.find_all(TodoQueryIn(), owner.id)

        keys = fake_redis.keys(f"todos:{owner.id}:*")
        assert len(keys) == 1
        fragment = json.loads(keys[0].split(":", 2)[2])
        assert fragment == {
            "completed": None,
            "limit": 10,
            "page": 1,
            "search": None,
            "sortBy": "createdAt",
            "sortOrder": "desc",
        }
        assert 0 < fake_redis.ttl(keys[0]) <= 300

    def test_cache_hit_serves_stored_page(self, service, owner):
        TodoFactory(user=owner, title="cached")
        first = service.find_all(TodoQueryIn(), owner.id)

        # written behind the service's back: not visible until invalidation
        TodoFactory(user=owner, title="sneaky")
        second = service.find_all(TodoQueryIn(), owner.id)

        assert second.total == first.total == 1
        assert [t.title for t in second.items] == ["cached"]

    def test_writes_invalidate_listings_and_stats(self, service, owner, fake_redis):
        service.find_all(TodoQueryIn(), owner.id)
        service.find_all(TodoQueryIn(page=2), owner.id)
        service.get_statistics(owner.id)
        other = UserFactory()
        service.find_all(TodoQueryIn(), other.id)

        service.create(TodoCreateIn(title="new"), owner.id)

        assert fake_redis.keys(f"todos:{owner.id}:*") == []
        assert fake_redis.get(f"todos:stats:{owner.id}") is None
        assert len(fake_redis.keys(f"todos:{other.id}:*")) == 1
        assert service.get_statistics(owner.id).total == 1

    def test_failed_batch_keeps_cache(self, service, owner, fake_redis):
        service.get_statistics(owner.id)

        with pytest.raises(RecordNotFoundError):
            service.delete_many([123456], owner.id)

        assert fake_redis.get(f"todos:stats:{owner.id}") is not None

    def test_stats_cached(self, service, owner, fake_redis):
        TodoFactory(user=owner, completed=True)

        stats = service.get_statistics(owner.id)

        cached = json.loads(fake_redis.get(f"todos:stats:{owner.id}"))
        assert cached["total"] == stats.total == 1
        assert cached["completion_rate"] == 100

    def test_corrupt_entry_is_a_miss(self, service, owner, fake_redis):
        fake_redis.set(f"todos:stats:{owner.id}", "{not json")

        assert service.get_statistics(owner.id).total == 0

    def test_unreachable_cache_degrades(self, broken_cache, owner):
        service = TodoService(cache=broken_cache)
        TodoFactory(user=owner)

        assert service.find_all(TodoQueryIn(), owner.id).total == 1
        assert service.create(TodoCreateIn(title="still works"), owner.id).id
        assert service.get_statistics(owner.id).total == 2
