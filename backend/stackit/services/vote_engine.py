"""
StackIt Backend — Vote Engine
===============================

What:  The single entry point for changing the vote state of a Question or
       an Answer.
How:   Checks run first (live entity, not the author), then the entity's
       VoteSet is mutated and written back with `store_votes()`, which also
       recomputes `vote_count`. Nothing else changes: no notification, no
       reputation.

Transition table (for user U, per entity):

    current  │ upvote   downvote   remove
    ─────────┼──────────────────────────────
    none     │ up       down       none
    up       │ up       down       none
    down     │ up       down       none
"""

import logging
from typing import Union
from uuid import UUID

from stackit.exceptions import ForbiddenError, NotFoundError
from stackit.models.answer import Answer
from stackit.models.question import Question
from stackit.models.votes import VoteType

logger = logging.getLogger(__name__)

Votable = Union[Question, Answer]


def apply_vote(entity: Votable, actor_id: UUID, vote_type: VoteType) -> int:
    """
    Applies `vote_type` from `actor_id` to `entity` and returns the new vote count.

    Raises:
        NotFoundError:  entity is soft-deleted
        ForbiddenError: actor is the entity's author (vote sets left unchanged)
    """
    kind = "answer" if isinstance(entity, Answer) else "question"
    if entity.is_deleted:
        raise NotFoundError(resource=kind, resource_id=str(entity.id))
    if entity.author_id is not None and entity.author_id == actor_id:
        raise ForbiddenError(f"Cannot vote on your own {kind}")

    votes = entity.vote_set
    votes.apply(actor_id, VoteType(vote_type))
    count = entity.store_votes(votes)
    logger.debug("Vote %s by %s on %s %s → %d", vote_type, actor_id, kind, entity.id, count)
    return count
