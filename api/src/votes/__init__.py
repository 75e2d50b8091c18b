"""Toggle votes on posts and comments."""

from .ledger import VoteLedger, plan_vote, validate_vote_value
from .models import VOTES_TABLES_CQL, SubjectKind, VoteAction, VoteOutcome
from .store import VoteStore


__all__ = [
    "VOTES_TABLES_CQL",
    "SubjectKind",
    "VoteAction",
    "VoteLedger",
    "VoteOutcome",
    "VoteStore",
    "plan_vote",
    "validate_vote_value",
]
