"""Vote ledger.

Enforces "one active vote per (subject, user)" and keeps the subject's cached
``vote_count`` equal to the sum of its vote rows.

Toggle semantics for a request with ``value``:

=============  ==============  ===========
existing row   row change      count delta
=============  ==============  ===========
none           insert value    +value
same value     delete          -value
opposite       update value    +2 * value
=============  ==============  ===========

The row change is a conditional write on the value that was read. When a
concurrent request by the same user changed the row first, the condition
fails, the ledger re-reads and plans again. The counter is only touched once
the row change was applied, so each applied request contributes exactly one
delta.
"""

import structlog

from src.core.exceptions import (
    CommentNotFoundError,
    InvalidVoteValueError,
    PostNotFoundError,
    VoteConflictError,
)

from .models import (
    VALID_VOTE_VALUES,
    SubjectKind,
    VoteAction,
    VoteOutcome,
    VotePlan,
)
from .store import VoteStore


logger = structlog.get_logger(__name__)


def validate_vote_value(value: object) -> int:
    """Return ``value`` if it is exactly +1 or -1.

    Booleans are rejected even though ``True == 1``.

    Raises:
        InvalidVoteValueError: For any other value
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidVoteValueError
    if value not in VALID_VOTE_VALUES:
        raise InvalidVoteValueError
    return value


def plan_vote(existing: int | None, value: int) -> VotePlan:
    """Decide the row change and counter delta for a vote request."""
    if existing is None:
        return VotePlan(action=VoteAction.CAST, delta=value, new_value=value)
    if existing == value:
        return VotePlan(action=VoteAction.RETRACT, delta=-value, new_value=None)
    return VotePlan(action=VoteAction.FLIP, delta=2 * value, new_value=value)


class VoteLedger:
    """Applies toggle votes to posts and comments."""

    def __init__(self, store: VoteStore, max_attempts: int = 5):
        self.store = store
        self.max_attempts = max_attempts

    async def apply_vote(
        self,
        kind: SubjectKind,
        subject_id: int,
        user_id: str,
        value: int,
    ) -> VoteOutcome:
        """Toggle, flip or cast a user's vote on a subject.

        Raises:
            InvalidVoteValueError: value is not +1 or -1 (nothing is read or written)
            PostNotFoundError / CommentNotFoundError: the subject does not exist
            VoteConflictError: concurrent requests kept winning the conditional write
        """
        value = validate_vote_value(value)

        post_id = await self.store.find_subject_post(kind, subject_id)
        if post_id is None:
            if kind == SubjectKind.POST:
                raise PostNotFoundError
            raise CommentNotFoundError

        for attempt in range(1, self.max_attempts + 1):
            existing = await self.store.get_vote(kind, subject_id, user_id)
            plan = plan_vote(existing, value)

            if not await self._write_row(kind, subject_id, user_id, existing, plan):
                logger.info(
                    "vote_write_conflict",
                    subject_kind=kind.value,
                    subject_id=subject_id,
                    attempt=attempt,
                )
                continue

            try:
                await self.store.increment_vote_count(kind, subject_id, plan.delta)
            except Exception:
                # The row is committed; the counter now lags until reconcile() runs
                logger.exception(
                    "vote_counter_update_failed",
                    subject_kind=kind.value,
                    subject_id=subject_id,
                    delta=plan.delta,
                )
                raise

            vote_count = await self.store.get_vote_count(kind, subject_id)
            logger.info(
                "vote_applied",
                subject_kind=kind.value,
                subject_id=subject_id,
                action=plan.action.value,
                delta=plan.delta,
            )
            return VoteOutcome(
                kind=kind,
                subject_id=subject_id,
                post_id=post_id,
                action=plan.action,
                delta=plan.delta,
                user_vote=plan.new_value,
                vote_count=vote_count,
            )

        logger.warning(
            "vote_conflict_exhausted",
            subject_kind=kind.value,
            subject_id=subject_id,
            attempts=self.max_attempts,
        )
        raise VoteConflictError

    async def _write_row(
        self,
        kind: SubjectKind,
        subject_id: int,
        user_id: str,
        existing: int | None,
        plan: VotePlan,
    ) -> bool:
        """Perform the conditional row change of a plan."""
        if plan.action == VoteAction.CAST:
            return await self.store.insert_vote(
                kind, subject_id, user_id, plan.new_value
            )
        if plan.action == VoteAction.RETRACT:
            return await self.store.delete_vote(kind, subject_id, user_id, existing)
        return await self.store.update_vote(
            kind, subject_id, user_id, plan.new_value, existing
        )

    async def get_viewer_votes(
        self, kind: SubjectKind, subject_ids: list[int], user_id: str | None
    ) -> dict[int, int]:
        """The viewer's own votes on the given subjects (empty for anonymous)."""
        if not user_id or not subject_ids:
            return {}
        return await self.store.get_user_votes(kind, subject_ids, user_id)

    async def reconcile(self, kind: SubjectKind, subject_id: int) -> int:
        """Bring a subject's counter back to the sum of its vote rows.

        Returns:
            The correction that was applied (0 when already consistent)
        """
        votes = await self.store.list_votes(kind, subject_id)
        expected = sum(vote.value for vote in votes)
        current = await self.store.get_vote_count(kind, subject_id)
        correction = expected - current

        if correction:
            await self.store.increment_vote_count(kind, subject_id, correction)
            logger.warning(
                "vote_counter_reconciled",
                subject_kind=kind.value,
                subject_id=subject_id,
                expected=expected,
                previous=current,
            )

        return correction
