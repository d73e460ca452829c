"""
StackIt Backend — Vote Engine Tests
=====================================

What:  The vote state machine on Questions and Answers, without a database.

What we test:
    ✅ upvote then remove restores the previous sets and count
    ✅ repeating a vote is a no-op
    ✅ switching sides leaves the user in exactly one set
    ✅ vote_count == |upvotes| - |downvotes| after every mutation
    ✅ self-votes are Forbidden and change nothing
    ✅ votes on deleted entities are NotFound
"""

from uuid import uuid4

import pytest

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.models.answer import Answer
from stackit.models.question import Question
from stackit.models.votes import VoteSet, VoteType
from stackit.services.vote_engine import apply_vote


def make_question(**overrides):
    fields = dict(
        id=uuid4(),
        title="How do I read a file line by line?",
        description="Looking for the idiomatic way to stream a large file.",
        author_id=uuid4(),
        upvotes=[],
        downvotes=[],
        vote_count=0,
        is_deleted=False,
    )
    fields.update(overrides)
    return Question(**fields)


def make_answer(**overrides):
    fields = dict(
        id=uuid4(),
        content="Iterate over the file object; it yields one line at a time.",
        author_id=uuid4(),
        question_id=uuid4(),
        upvotes=[],
        downvotes=[],
        vote_count=0,
        is_deleted=False,
    )
    fields.update(overrides)
    return Answer(**fields)


def assert_consistent(entity):
    assert entity.vote_count == len(entity.upvotes) - len(entity.downvotes)
    assert not set(entity.upvotes) & set(entity.downvotes)


class TestVoteSet:
    def test_apply_upvote(self):
        votes = VoteSet()
        votes.apply("u1", VoteType.UPVOTE)
        assert votes.upvotes == ["u1"]
        assert votes.downvotes == []
        assert votes.score == 1

    def test_switch_moves_user_to_end_of_other_side(self):
        votes = VoteSet(upvotes=["a", "b"], downvotes=["c"])
        votes.apply("a", VoteType.DOWNVOTE)
        assert votes.upvotes == ["b"]
        assert votes.downvotes == ["c", "a"]

    def test_duplicate_user_in_stored_lists_keeps_one_direction(self):
        votes = VoteSet(upvotes=["a"], downvotes=["a"])
        assert votes.upvotes == ["a"]
        assert votes.downvotes == []
        assert len(votes) == 1

    def test_remove_absent_user_is_noop(self):
        votes = VoteSet(upvotes=["a"])
        votes.apply("zzz", VoteType.REMOVE)
        assert votes.upvotes == ["a"]


@pytest.mark.parametrize("factory", [make_question, make_answer])
class TestApplyVote:
    def test_upvote_then_remove_round_trips(self, factory):
        entity = factory(upvotes=["x"], downvotes=["y"], vote_count=0)
        voter = uuid4()
        before = (list(entity.upvotes), list(entity.downvotes), entity.vote_count)

        apply_vote(entity, voter, VoteType.UPVOTE)
        assert_consistent(entity)
        apply_vote(entity, voter, VoteType.REMOVE)
        assert_consistent(entity)

        assert (entity.upvotes, entity.downvotes, entity.vote_count) == before

    def test_upvote_twice_equals_once(self, factory):
        entity = factory()
        voter = uuid4()
        apply_vote(entity, voter, VoteType.UPVOTE)
        once = (list(entity.upvotes), list(entity.downvotes), entity.vote_count)
        apply_vote(entity, voter, VoteType.UPVOTE)
        assert (entity.upvotes, entity.downvotes, entity.vote_count) == once
        assert entity.vote_count == 1

    def test_downvote_then_upvote_leaves_single_upvote(self, factory):
        entity = factory()
        voter = uuid4()
        apply_vote(entity, voter, VoteType.DOWNVOTE)
        assert entity.vote_count == -1
        assert_consistent(entity)

        apply_vote(entity, voter, VoteType.UPVOTE)
        assert entity.upvotes.count(str(voter)) == 1
        assert str(voter) not in entity.downvotes
        assert entity.vote_count == 1
        assert_consistent(entity)

    def test_returns_new_count(self, factory):
        entity = factory(upvotes=["a", "b"], downvotes=[], vote_count=2)
        assert apply_vote(entity, uuid4(), VoteType.DOWNVOTE) == 1

    def test_many_voters(self, factory):
        entity = factory()
        voters = [uuid4() for _ in range(5)]
        for i, voter in enumerate(voters):
            apply_vote(entity, voter, VoteType.UPVOTE if i % 2 == 0 else VoteType.DOWNVOTE)
            assert_consistent(entity)
        assert entity.vote_count == 1
        apply_vote(entity, voters[1], VoteType.REMOVE)
        assert entity.vote_count == 2
        assert_consistent(entity)

    def test_self_vote_forbidden_and_unchanged(self, factory):
        author = uuid4()
        entity = factory(author_id=author, upvotes=["someone"], vote_count=1)

        with pytest.raises(ForbiddenError, match="Cannot vote on your own"):
            apply_vote(entity, author, VoteType.UPVOTE)

        assert entity.upvotes == ["someone"]
        assert entity.downvotes == []
        assert entity.vote_count == 1

    def test_deleted_entity_not_found(self, factory):
        entity = factory(is_deleted=True)
        with pytest.raises(NotFoundError):
            apply_vote(entity, uuid4(), VoteType.UPVOTE)
        assert entity.upvotes == []

    def test_accepts_plain_string_vote_type(self, factory):
        entity = factory()
        apply_vote(entity, uuid4(), "downvote")
        assert entity.vote_count == -1
