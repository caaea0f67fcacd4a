"""Tests for registering and deleting users, and user colours."""

from shared_calendar.registry import (
    FALLBACK_COLOR,
    USER_COLORS,
    delete_user,
    save_user,
    user_color,
)

from conftest import NEXT_WEEK


class TestSaveUser:
    def test_new_name_is_registered_trimmed(self, store, cache):
        assert save_user(store, cache, "  Ana ") == "Ana"
        assert cache.user_names == ["Ana"]

    def test_blank_name_is_ignored(self, store, cache):
        assert save_user(store, cache, "   ") is None
        store.append.assert_not_called()

    def test_known_name_not_duplicated(self, store, cache):
        save_user(store, cache, "Ana")
        assert save_user(store, cache, "Ana") == "Ana"
        assert store.append.call_count == 1


class TestDeleteUser:
    def test_cascade_removes_reservations_in_every_week(self, store, cache, add_reservation):
        save_user(store, cache, "Ana")
        save_user(store, cache, "Bo")
        add_reservation(user="Ana")
        add_reservation(user="Ana", week_start=NEXT_WEEK)
        add_reservation(user="Bo")

        assert delete_user(store, cache, "Ana") == 2
        assert cache.user_names == ["Bo"]
        assert [r.user for r in cache.reservations] == ["Bo"]

    def test_without_cascade_reservations_stay(self, store, cache, add_reservation):
        save_user(store, cache, "Ana")
        add_reservation(user="Ana")
        assert delete_user(store, cache, "Ana", cascade=False) == 0
        assert cache.user_names == []
        assert len(cache.reservations) == 1

    def test_duplicate_registry_documents_all_removed(self, store, cache, settings):
        """Two clients saving the same name leave two documents; both go."""
        store.append(settings.users_collection, {"name": "Ana"})
        store.append(settings.users_collection, {"name": " Ana "})
        store.append(settings.users_collection, {"name": "Bo"})
        assert len(cache.user_ids("Ana")) == 2

        delete_user(store, cache, "Ana")

        assert cache.user_names == ["Bo"]
        assert cache.user_ids("Ana") == []
        assert store.delete_by_id.call_count == 2

    def test_unknown_user(self, store, cache):
        assert delete_user(store, cache, "Nobody") == 0
        store.delete_by_id.assert_not_called()


class TestUserColor:
    def test_stable_for_a_name(self):
        assert user_color("Ana") == user_color("Ana")
        assert user_color("Ana") in USER_COLORS

    def test_independent_of_whitespace(self):
        assert user_color(" Ana ") == user_color("Ana")

    def test_fallback_for_empty_name(self):
        assert user_color("") == FALLBACK_COLOR
        assert user_color(None) == FALLBACK_COLOR

    def test_palette_spread(self):
        colors = {user_color(f"user-{i}") for i in range(50)}
        assert len(colors) > 1
