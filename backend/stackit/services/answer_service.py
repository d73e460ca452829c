"""
StackIt Backend — Answer Service (incl. Acceptance Workflow)
=============================================================

What:  Posting, editing, deleting, voting on, accepting and commenting on
       Answers.
Who:   Answer routes.

Acceptance Workflow (POST /api/answers/{id}/accept):
    ┌───────────────┐   ┌──────────────┐   ┌───────────────┐   ┌────────────┐
    │ previous      │──▶│ target       │──▶│ question      │──▶│ author     │
    │ is_accepted=F │   │ is_accepted=T│   │ accepted_id=X │   │ count += 1 │
    └───────────────┘   └──────────────┘   └───────────────┘   └────────────┘
    Then an `accept` notification goes to the answer author (unless they
    accepted it themselves).

    The steps run in sequence inside the request session. There is no
    compensation if a later step fails; with the session-per-request
    dependency the whole request is rolled back instead.

    The author counter accumulates: a re-acceptance elsewhere does not take
    the point back unless TRANSFER_ACCEPTED_COUNT is enabled.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.config import settings
from stackit.exceptions import ConflictError, ForbiddenError, NotFoundError
from stackit.models.answer import Answer, Comment
from stackit.models.notification import NotificationType
from stackit.models.question import Question
from stackit.models.user import User
from stackit.models.votes import VoteType
from stackit.schemas.answer import AnswerCreate, AnswerUpdate
from stackit.services.auth_service import is_admin
from stackit.services.notification_service import notification_service
from stackit.services.vote_engine import apply_vote

logger = logging.getLogger(__name__)


class AnswerService:
    """Business logic for the Answer half of the Content Store."""

    async def get_live_answer(self, db: AsyncSession, answer_id: UUID) -> Answer:
        answer = await db.get(Answer, answer_id)
        if answer is None or answer.is_deleted:
            raise NotFoundError(resource="answer", resource_id=str(answer_id))
        return answer

    async def _get_parent(self, db: AsyncSession, answer: Answer) -> Question:
        question = await db.get(Question, answer.question_id)
        if question is None or question.is_deleted:
            raise NotFoundError(resource="question", resource_id=str(answer.question_id))
        return question

    # ── Authoring ─────────────────────────────────────────────────────────

    async def create_answer(self, db: AsyncSession, data: AnswerCreate, author: User) -> Answer:
        """
        Posts an answer and notifies the question author.

        Raises:
            NotFoundError:  question missing or deleted
            ConflictError:  question closed, or the author already has a live answer there
            ForbiddenError: the author is answering their own question
        """
        question = await db.get(Question, data.question_id)
        if question is None or question.is_deleted:
            raise NotFoundError(resource="question", resource_id=str(data.question_id))
        if question.is_closed:
            raise ConflictError("Question is closed")
        if question.author_id == author.id:
            raise ForbiddenError("Cannot answer your own question")

        existing = await db.scalar(
            select(Answer.id).where(
                Answer.question_id == question.id,
                Answer.author_id == author.id,
                Answer.is_deleted.is_(False),
            )
        )
        if existing is not None:
            raise ConflictError("You have already answered this question")

        answer = Answer(
            content=data.content,
            author=author,
            question_id=question.id,
            upvotes=[],
            downvotes=[],
            vote_count=0,
            is_accepted=False,
            is_deleted=False,
            comments=[],
        )
        db.add(answer)
        question.answer_count += 1
        author.answers_count += 1
        await db.flush()
        logger.info("Answer %s posted on question %s by %s", answer.id, question.id, author.id)

        if question.author_id is not None:
            await notification_service.notify(
                db,
                NotificationType.ANSWER,
                recipient_id=question.author_id,
                sender=author,
                title="New answer to your question",
                message=f'{author.username} answered your question: "{question.title}"',
                question_id=question.id,
                answer_id=answer.id,
            )
        return answer

    async def update_answer(
        self, db: AsyncSession, answer_id: UUID, data: AnswerUpdate, actor: User
    ) -> Answer:
        answer = await self.get_live_answer(db, answer_id)
        if answer.author_id != actor.id and not is_admin(actor):
            raise ForbiddenError("Not authorized to update this answer")
        answer.content = data.content
        await db.flush()
        return answer

    async def delete_answer(self, db: AsyncSession, answer_id: UUID, actor: User) -> None:
        """Soft delete: the answer leaves its question's list and its author's count."""
        answer = await self.get_live_answer(db, answer_id)
        if answer.author_id != actor.id and not is_admin(actor):
            raise ForbiddenError("Not authorized to delete this answer")

        answer.is_deleted = True
        question = await db.get(Question, answer.question_id)
        if question is not None and question.answer_count > 0:
            question.answer_count -= 1
        if answer.author_id is not None:
            author = await db.get(User, answer.author_id)
            if author is not None and author.answers_count > 0:
                author.answers_count -= 1
        await db.flush()
        logger.info("Answer %s soft-deleted by %s", answer.id, actor.id)

    # ── Votes ─────────────────────────────────────────────────────────────

    async def vote(self, db: AsyncSession, answer_id: UUID, actor: User, vote_type: VoteType) -> int:
        answer = await db.get(Answer, answer_id)
        if answer is None:
            raise NotFoundError(resource="answer", resource_id=str(answer_id))
        count = apply_vote(answer, actor.id, vote_type)
        await db.flush()
        return count

    # ── Acceptance ────────────────────────────────────────────────────────

    async def accept_answer(self, db: AsyncSession, answer_id: UUID, actor: User) -> Answer:
        """
        Marks `answer_id` as its question's accepted answer.

        Only the question author may accept. Re-accepting the current answer
        is allowed and repeats the bookkeeping, matching a fresh acceptance.
        """
        answer = await self.get_live_answer(db, answer_id)
        question = await self._get_parent(db, answer)
        if question.author_id != actor.id:
            raise ForbiddenError("Only question author can accept answers")

        # Step 1: previous acceptance, which may no longer exist
        previous_id = question.accepted_answer_id
        if previous_id is not None and previous_id != answer.id:
            previous = await db.get(Answer, previous_id)
            if previous is not None:
                previous.is_accepted = False
                if settings.transfer_accepted_count and previous.author_id is not None:
                    previous_author = await db.get(User, previous.author_id)
                    if previous_author is not None and previous_author.accepted_answers_count > 0:
                        previous_author.accepted_answers_count -= 1

        # Steps 2-3
        answer.is_accepted = True
        question.accepted_answer_id = answer.id

        # Step 4
        if answer.author_id is not None:
            answer_author = await db.get(User, answer.author_id)
            if answer_author is not None:
                answer_author.accepted_answers_count += 1
        await db.flush()
        logger.info(
            "Answer %s accepted on question %s (previous=%s)", answer.id, question.id, previous_id
        )

        if answer.author_id is not None:
            await notification_service.notify(
                db,
                NotificationType.ACCEPT,
                recipient_id=answer.author_id,
                sender=actor,
                title="Your answer was accepted",
                message=f'{actor.username} accepted your answer to: "{question.title}"',
                question_id=question.id,
                answer_id=answer.id,
            )
        return answer

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(self, db: AsyncSession, answer_id: UUID, content: str, author: User) -> Answer:
        """Appends a comment, then fans out `mention` and `comment` notifications."""
        answer = await self.get_live_answer(db, answer_id)

        answer.comments.append(Comment(content=content, author=author))
        await db.flush()

        await notification_service.notify_mentions(
            db,
            content,
            sender=author,
            question_id=answer.question_id,
            answer_id=answer.id,
        )
        if answer.author_id is not None:
            await notification_service.notify(
                db,
                NotificationType.COMMENT,
                recipient_id=answer.author_id,
                sender=author,
                title="New comment on your answer",
                message=f"{author.username} commented on your answer",
                question_id=answer.question_id,
                answer_id=answer.id,
            )
        return answer


# ── Singleton Instance ────────────────────────────────────────────────────
answer_service = AnswerService()
