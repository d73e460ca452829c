"""
StackIt Backend — Question Service Tests
==========================================

What:  Question authoring, listing, retrieval and soft delete.

What we test:
    ✅ Tags are trimmed, lowercased, de-duplicated and capped
    ✅ Sort orders and the tag / search / unanswered filters
    ✅ Authenticated reads count as views, anonymous reads do not
    ✅ Soft-deleted questions disappear from every public read
    ✅ Only author or admin may edit or delete
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as SchemaValidationError

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.schemas.question import QuestionCreate, QuestionUpdate
from stackit.services.question_service import QuestionService


def question_data(title="Why is my async loop blocking?", tags=None):
    return QuestionCreate(
        title=title,
        description="The event loop stalls whenever a request hits the database.",
        tags=tags or ["python", "asyncio"],
    )


class TestQuestionSchemas:
    def test_tags_are_normalized(self):
        data = question_data(tags=[" Python ", "python", "FastAPI", "  "])
        assert data.tags == ["python", "fastapi"]

    def test_too_many_tags_rejected(self):
        with pytest.raises(SchemaValidationError):
            question_data(tags=["a", "b", "c", "d", "e", "f"])

    def test_only_blank_tags_rejected(self):
        with pytest.raises(SchemaValidationError, match="At least one valid tag"):
            question_data(tags=["   ", ""])

    def test_short_title_rejected(self):
        with pytest.raises(SchemaValidationError):
            question_data(title="   short   ")

    def test_padded_short_title_rejected_on_update(self):
        with pytest.raises(SchemaValidationError, match="Title must be between"):
            QuestionUpdate(title="    abc     ")

    def test_update_title_is_stripped(self):
        assert QuestionUpdate(title="  Why is my asyncio loop blocked?  ").title == (
            "Why is my asyncio loop blocked?"
        )

    def test_camel_case_aliases_accepted(self):
        update = QuestionUpdate.model_validate({"tags": ["SQL"]})
        assert update.tags == ["sql"]
        assert update.title is None


class TestCreateAndUpdate:
    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_create_question(self, db_session, make_user):
        alice = await make_user("alice")

        question = await self.service.create_question(db_session, question_data(), alice)

        assert question.author_id == alice.id
        assert question.tags == ["python", "asyncio"]
        assert question.vote_count == 0
        assert question.answer_count == 0
        assert question.has_accepted_answer is False
        assert alice.questions_count == 1

    @pytest.mark.asyncio
    async def test_update_replaces_tags_keeping_shared_ones(self, db_session, make_user):
        alice = await make_user("alice")
        question = await self.service.create_question(db_session, question_data(), alice)

        await self.service.update_question(
            db_session, question.id, QuestionUpdate(tags=["asyncio", "sqlalchemy"]), alice
        )

        assert question.tags == ["asyncio", "sqlalchemy"]
        detail = await self.service.get_question(db_session, question.id)
        assert detail.tags == ["asyncio", "sqlalchemy"]

    @pytest.mark.asyncio
    async def test_update_by_stranger_forbidden_admin_allowed(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        admin = await make_user("root", role="admin")
        question = await self.service.create_question(db_session, question_data(), alice)

        with pytest.raises(ForbiddenError):
            await self.service.update_question(
                db_session, question.id, QuestionUpdate(title="Hijacked question title"), bob
            )

        await self.service.update_question(
            db_session, question.id, QuestionUpdate(title="  Edited by moderation team  "), admin
        )
        assert question.title == "Edited by moderation team"


class TestQueries:
    def setup_method(self):
        self.service = QuestionService()

    async def _seed(self, db, make_user):
        alice = await make_user("alice")
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        specs = [
            ("First: asyncio event loop basics", ["python", "asyncio"], 5, 10, 0),
            ("Second: SQLAlchemy session scope", ["python", "sqlalchemy"], -1, 50, 2),
            ("Third: Postgres index tuning", ["postgres"], 2, 0, 0),
        ]
        questions = []
        for offset, (title, tags, votes, views, answers) in enumerate(specs):
            q = await self.service.create_question(db, question_data(title, tags), alice)
            q.vote_count = votes
            q.views = views
            q.answer_count = answers
            q.created_at = base + timedelta(hours=offset)
            questions.append(q)
        await db.flush()
        return questions

    @pytest.mark.asyncio
    async def test_newest_first_by_default(self, db_session, make_user):
        first, second, third = await self._seed(db_session, make_user)

        page = await self.service.list_questions(db_session)

        assert [q.id for q in page.questions] == [third.id, second.id, first.id]
        assert page.pagination.total == 1
        assert page.pagination.has_prev is False

    @pytest.mark.asyncio
    async def test_sort_by_votes_and_views(self, db_session, make_user):
        first, second, third = await self._seed(db_session, make_user)

        by_votes = await self.service.list_questions(db_session, sort="votes")
        by_views = await self.service.list_questions(db_session, sort="views")

        assert [q.id for q in by_votes.questions] == [first.id, third.id, second.id]
        assert [q.id for q in by_views.questions] == [second.id, first.id, third.id]

    @pytest.mark.asyncio
    async def test_unanswered_filter(self, db_session, make_user):
        first, _, third = await self._seed(db_session, make_user)

        page = await self.service.list_questions(db_session, sort="unanswered")

        assert [q.id for q in page.questions] == [third.id, first.id]

    @pytest.mark.asyncio
    async def test_tag_and_search_filters(self, db_session, make_user):
        first, second, third = await self._seed(db_session, make_user)

        tagged = await self.service.list_questions(db_session, tag="PYTHON")
        searched = await self.service.list_questions(db_session, search="postgres")

        assert {q.id for q in tagged.questions} == {first.id, second.id}
        assert [q.id for q in searched.questions] == [third.id]

    @pytest.mark.asyncio
    async def test_pagination(self, db_session, make_user):
        first, _, _ = await self._seed(db_session, make_user)

        page = await self.service.list_questions(db_session, page=2, limit=2)

        assert [q.id for q in page.questions] == [first.id]
        assert page.pagination.current == 2
        assert page.pagination.total == 2
        assert page.pagination.has_next is False
        assert page.pagination.has_prev is True

    @pytest.mark.asyncio
    async def test_popular_tags_ignore_deleted(self, db_session, make_user):
        first, second, third = await self._seed(db_session, make_user)
        third.is_deleted = True

        tags = await self.service.popular_tags(db_session)

        assert [(t.name, t.count) for t in tags] == [
            ("python", 2),
            ("asyncio", 1),
            ("sqlalchemy", 1),
        ]

    @pytest.mark.asyncio
    async def test_views_count_only_for_signed_in_readers(self, db_session, make_user):
        first, _, _ = await self._seed(db_session, make_user)
        bob = await make_user("bob")

        await self.service.get_question(db_session, first.id, viewer=bob)
        detail = await self.service.get_question(db_session, first.id)

        assert detail.views == 11
        assert detail.answers == []


class TestDeleteAndVote:
    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_soft_delete_hides_question(self, db_session, make_user):
        alice = await make_user("alice")
        question = await self.service.create_question(db_session, question_data(), alice)

        await self.service.delete_question(db_session, question.id, alice)

        assert question.is_deleted is True
        assert alice.questions_count == 0
        with pytest.raises(NotFoundError):
            await self.service.get_question(db_session, question.id)
        page = await self.service.list_questions(db_session)
        assert page.questions == []

    @pytest.mark.asyncio
    async def test_delete_by_stranger_forbidden(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        question = await self.service.create_question(db_session, question_data(), alice)

        with pytest.raises(ForbiddenError):
            await self.service.delete_question(db_session, question.id, bob)
        assert question.is_deleted is False

    @pytest.mark.asyncio
    async def test_vote_on_question(self, db_session, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        question = await self.service.create_question(db_session, question_data(), alice)

        assert await self.service.vote(db_session, question.id, bob, "upvote") == 1
        with pytest.raises(ForbiddenError):
            await self.service.vote(db_session, question.id, alice, "upvote")

        detail = await self.service.get_question(db_session, question.id)
        assert detail.vote_count == 1
        assert detail.upvotes == [str(bob.id)]
