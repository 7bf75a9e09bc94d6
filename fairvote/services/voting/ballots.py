from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from fairvote.models import Ballot
from fairvote.models.timestamps import utcnow
from fairvote.services.elections import is_eligible, normalize_email
from fairvote.services.errors import (
    AlreadyVoted,
    ElectionClosed,
    NotEligible,
    NotFound,
    StoreUnavailable,
    TallyMissing,
    ValidationError,
)
from fairvote.services.voting.transaction import run_in_transaction


def validate_selections(election, selections):
    selections = [(item or "").strip() for item in selections]
    max_selections = election.max_selections

    if len(selections) < 1 or len(selections) > max_selections:
        raise ValidationError(
            f"Select between 1 and {max_selections} candidates before voting."
        )
    if len(set(selections)) != len(selections):
        raise ValidationError("Each candidate can only be selected once.")

    candidates = set(election.candidate_names)
    unknown = [item for item in selections if item not in candidates]
    if unknown:
        raise ValidationError(f"Unknown candidate: {unknown[0]}.")

    return selections


def cast_vote(store, election_id, voter, selections, max_attempts=None):
    try:
        election = store.get_election(election_id)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load election.") from exc
    if election is None:
        raise NotFound()
    if election.is_closed:
        raise ElectionClosed()
    if not is_eligible(election, voter.email):
        raise NotEligible()
    selections = validate_selections(election, selections)

    voter_id = voter.id
    voter_email = normalize_email(voter.email)

    def record_vote(store):
        if store.get_ballot(election_id, voter_id) is not None:
            raise AlreadyVoted()

        tally = store.get_tally(election_id)
        if tally is None:
            raise TallyMissing()

        # A close committed before the tally read is caught here; one committed
        # after it bumps the tally version, so the attempt retries.
        current = store.get_election(election_id, fresh=True)
        if current is None:
            raise NotFound()
        if current.is_closed:
            raise ElectionClosed()

        counts = dict(tally.counts or {})
        for candidate in selections:
            counts[candidate] = counts.get(candidate, 0) + 1
        tally.counts = counts
        tally.total_votes = (tally.total_votes or 0) + len(selections)
        tally.updated_at = utcnow()

        ballot = Ballot(
            election_id=election_id,
            voter_id=voter_id,
            voter_email=voter_email,
            selections=list(selections),
        )
        store.add(ballot)
        return ballot

    ballot = run_in_transaction(store, record_vote, max_attempts=max_attempts)
    current_app.logger.info(
        "Vote recorded for election %s by user %s (%d selections)",
        election_id,
        voter_id,
        len(selections),
    )
    return ballot
