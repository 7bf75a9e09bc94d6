from fairvote.services.voting.ballots import cast_vote, validate_selections
from fairvote.services.voting.tally import (
    close_and_publish,
    owner_results,
    public_results,
    recount_from_ballots,
    reopen_voting,
)
from fairvote.services.voting.transaction import run_in_transaction

__all__ = [
    "cast_vote",
    "close_and_publish",
    "owner_results",
    "public_results",
    "recount_from_ballots",
    "reopen_voting",
    "run_in_transaction",
    "validate_selections",
]
