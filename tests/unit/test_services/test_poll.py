"""Unit tests for poll service."""
import random

import pytest

from anonymchat.db.store import StoreKind
from anonymchat.services.poll import create_poll, delete_poll, get_poll, list_polls, vote_in_poll


def _option(poll, text):
    return next(option for option in poll.options if option.text == text)


@pytest.mark.unit
class TestPollCreation:

    def test_create_poll_success(self, store):
        poll = create_poll(store, "Favourite colour?", ["Red", "Blue"])

        assert poll.id.startswith("poll_")
        assert poll.nickname == "Admin"
        assert poll.question == "Favourite colour?"
        assert [o.text for o in poll.options] == ["Red", "Blue"]
        assert all(o.id.startswith("opt_") and o.votes == 0 for o in poll.options)
        assert len({o.id for o in poll.options}) == 2
        assert poll.total_votes == 0
        assert get_poll(store, poll.id) == poll

    @pytest.mark.parametrize("count", [2, 10])
    def test_option_count_bounds_accepted(self, store, count):
        poll = create_poll(store, "Pick one", [f"Option {i}" for i in range(count)])
        assert len(poll.options) == count

    def test_one_option_rejected(self, store):
        with pytest.raises(ValueError, match="at least 2 options"):
            create_poll(store, "Pick one", ["Only"])

    def test_eleven_options_rejected(self, store):
        with pytest.raises(ValueError, match="at most 10 options"):
            create_poll(store, "Pick one", [f"Option {i}" for i in range(11)])

        assert store.read(StoreKind.POLLS) == []

    def test_blank_options_are_dropped_before_counting(self, store):
        with pytest.raises(ValueError, match="at least 2 options"):
            create_poll(store, "Pick one", ["Yes", "   ", ""])

        poll = create_poll(store, "Pick one", ["Yes", "", " No "])
        assert [o.text for o in poll.options] == ["Yes", "No"]

    def test_empty_question_rejected(self, store):
        with pytest.raises(ValueError, match="Poll question cannot be empty"):
            create_poll(store, "  ", ["Red", "Blue"])

    def test_list_polls_newest_first(self, store):
        first = create_poll(store, "First?", ["a", "b"])
        second = create_poll(store, "Second?", ["a", "b"])

        assert [p.id for p in list_polls(store)] == [second.id, first.id]


@pytest.mark.unit
class TestVoting:

    def test_vote_blue_twice(self, store):
        poll = create_poll(store, "Colour?", ["Red", "Blue"])
        blue = _option(poll, "Blue")

        vote_in_poll(store, poll.id, blue.id)
        updated = vote_in_poll(store, poll.id, blue.id)

        assert updated.total_votes == 2
        assert _option(updated, "Blue").votes == 2
        assert _option(updated, "Red").votes == 0
        assert get_poll(store, poll.id) == updated

    def test_total_matches_sum_after_many_votes(self, store):
        poll = create_poll(store, "Pick", ["a", "b", "c", "d"])
        rng = random.Random(1234)

        for _ in range(100):
            vote_in_poll(store, poll.id, rng.choice(poll.options).id)

        stored = get_poll(store, poll.id)
        assert stored.total_votes == 100
        assert stored.total_votes == sum(o.votes for o in stored.options)

    def test_vote_unknown_poll(self, store):
        assert vote_in_poll(store, "poll_missing", "opt_missing") is None

    def test_vote_unknown_option(self, store):
        poll = create_poll(store, "Colour?", ["Red", "Blue"])

        assert vote_in_poll(store, poll.id, "opt_missing") is None
        assert get_poll(store, poll.id).total_votes == 0


@pytest.mark.unit
class TestPollDeletion:

    def test_delete_poll(self, store):
        keep = create_poll(store, "Keep?", ["a", "b"])
        doomed = create_poll(store, "Delete?", ["a", "b"])

        assert delete_poll(store, doomed.id) is True
        assert [p.id for p in list_polls(store)] == [keep.id]

    def test_delete_unknown_poll(self, store):
        assert delete_poll(store, "poll_missing") is False
