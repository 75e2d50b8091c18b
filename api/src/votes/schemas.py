"""Pydantic schemas for voting."""

from pydantic import BaseModel, Field

from .models import VoteAction, VoteOutcome


class VoteRequest(BaseModel):
    """Cast, retract or flip a vote.

    Sending the current value again retracts the vote; sending the opposite
    value flips it.
    """

    value: int = Field(..., strict=True, description="1 (upvote) or -1 (downvote)")


class VoteResponse(BaseModel):
    """Result of a vote request."""

    success: bool = True
    action: VoteAction
    user_vote: int | None = None
    vote_count: int

    @classmethod
    def from_outcome(cls, outcome: VoteOutcome) -> "VoteResponse":
        """Create response from a ledger outcome."""
        return cls(
            action=outcome.action,
            user_vote=outcome.user_vote,
            vote_count=outcome.vote_count,
        )
