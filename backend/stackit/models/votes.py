"""
StackIt Backend — Embedded Vote Sets
======================================

What:  The per-entity vote state shared by Questions and Answers.
How:   `VoteSet` maps user id → direction (+1 / -1). Because a user id is a
       single key, one user can never sit in both the upvote and the
       downvote set. `VotableMixin` persists the set as two JSON arrays plus
       the derived `vote_count`, all written together by `store_votes()`.
Who:   Mutated only through `stackit.services.vote_engine.apply_vote`.

Storage layout (per row):
    upvotes    JSON  ["<user-id>", ...]   insertion order preserved
    downvotes  JSON  ["<user-id>", ...]
    vote_count INT   len(upvotes) - len(downvotes)
"""

import enum
from typing import Dict, Iterable, List, Union
from uuid import UUID

from sqlalchemy import JSON, Integer
from sqlalchemy.orm import Mapped, mapped_column

UserRef = Union[str, UUID]

UP = 1
DOWN = -1


class VoteType(str, enum.Enum):
    """Vote actions accepted by the vote endpoints."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    REMOVE = "remove"


class VoteSet:
    """
    Set of votes keyed by user identity.

    Example:
        >>> votes = VoteSet(upvotes=["a"], downvotes=["b"])
        >>> votes.apply("b", VoteType.UPVOTE)
        >>> votes.upvotes, votes.downvotes, votes.score
        (['a', 'b'], [], 2)
    """

    def __init__(self, upvotes: Iterable[UserRef] = (), downvotes: Iterable[UserRef] = ()):
        self._votes: Dict[str, int] = {}
        for user_id in upvotes:
            self._votes.setdefault(str(user_id), UP)
        for user_id in downvotes:
            # A corrupt row listing the same user twice keeps the upvote
            self._votes.setdefault(str(user_id), DOWN)

    def apply(self, user_id: UserRef, vote_type: VoteType) -> None:
        """Applies one vote action for `user_id`; reapplying the same action is a no-op."""
        key = str(user_id)
        if vote_type is VoteType.REMOVE:
            self._votes.pop(key, None)
            return

        direction = UP if vote_type is VoteType.UPVOTE else DOWN
        if self._votes.get(key) == direction:
            return
        # Switching sides moves the user to the end of the other list
        self._votes.pop(key, None)
        self._votes[key] = direction

    @property
    def upvotes(self) -> List[str]:
        return [user_id for user_id, d in self._votes.items() if d == UP]

    @property
    def downvotes(self) -> List[str]:
        return [user_id for user_id, d in self._votes.items() if d == DOWN]

    @property
    def score(self) -> int:
        return sum(self._votes.values())

    def __len__(self) -> int:
        return len(self._votes)

    def __repr__(self) -> str:
        return f"<VoteSet(up={len(self.upvotes)}, down={len(self.downvotes)})>"


class VotableMixin:
    """
    Columns and accessors for an entity carrying embedded vote sets.

    The lists are always replaced (never mutated in place) so the JSON columns
    are flagged dirty by the ORM.
    """

    upvotes: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="User ids that upvoted, in vote order",
    )
    downvotes: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="User ids that downvoted, in vote order",
    )
    vote_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Derived: len(upvotes) - len(downvotes)",
    )

    @property
    def vote_set(self) -> VoteSet:
        """A detached copy of the stored votes; persist changes with store_votes()."""
        return VoteSet(self.upvotes or [], self.downvotes or [])

    def store_votes(self, votes: VoteSet) -> int:
        """Writes both sets and the recomputed count in one step. Returns the new count."""
        self.upvotes = votes.upvotes
        self.downvotes = votes.downvotes
        self.vote_count = votes.score
        return self.vote_count
