"""
StackIt Backend — ORM Models
==============================

Importing this package registers every table with `Base.metadata`
(used by Alembic autogenerate and by the test fixtures' create_all).
"""

from stackit.models.answer import Answer, Comment
from stackit.models.notification import Notification, NotificationType
from stackit.models.question import Question, QuestionTag
from stackit.models.user import User, UserRole
from stackit.models.votes import VotableMixin, VoteSet, VoteType

__all__ = [
    "Answer",
    "Comment",
    "Notification",
    "NotificationType",
    "Question",
    "QuestionTag",
    "User",
    "UserRole",
    "VotableMixin",
    "VoteSet",
    "VoteType",
]
