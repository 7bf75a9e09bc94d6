from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from fairvote.models import Candidate, Election, EligibleVoter, Tally
from fairvote.services.errors import (
    NotFound,
    PermissionDenied,
    StoreUnavailable,
    ValidationError,
)


def normalize_email(value):
    return (value or "").strip().lower()


def unique_list(items):
    """Trimmed, non-blank items with duplicates dropped, first occurrence wins."""
    seen = set()
    result = []
    for item in items:
        value = (item or "").strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _split_lines(value):
    if value is None:
        return []
    if isinstance(value, str):
        return value.splitlines()
    return list(value)


def create_election(store, creator, title, candidates, max_selections, eligible_emails):
    title = (title or "").strip()
    candidate_names = unique_list(_split_lines(candidates))
    emails = unique_list(normalize_email(email) for email in _split_lines(eligible_emails))

    if not title:
        raise ValidationError("Please add a title for the voting post.")
    if len(candidate_names) < 2:
        raise ValidationError("Please add at least two candidates.")
    try:
        max_selections = int(max_selections)
    except (TypeError, ValueError):
        raise ValidationError("Max votes must be a whole number.") from None
    if max_selections < 1 or max_selections > len(candidate_names):
        raise ValidationError("Max votes must be between 1 and number of candidates.")
    if not emails:
        raise ValidationError("Please add at least one eligible voter email.")

    election = Election(
        title=title,
        created_by_id=creator.id,
        created_by_email=creator.email or "",
        max_selections=max_selections,
        is_closed=False,
        results_published=False,
    )
    try:
        store.add(election)
        store.flush()

        for position, name in enumerate(candidate_names):
            store.add(Candidate(election_id=election.id, name=name, position=position))
        for email in emails:
            store.add(EligibleVoter(election_id=election.id, email=email))

        store.add(
            Tally(
                election_id=election.id,
                title=title,
                candidates=candidate_names,
                created_by_id=creator.id,
                counts={name: 0 for name in candidate_names},
                total_votes=0,
                is_closed=False,
                is_published=False,
            )
        )
        store.commit()
    except SQLAlchemyError as exc:
        store.rollback()
        current_app.logger.exception("Could not create election %r", title)
        raise StoreUnavailable("Failed to create election. Please try again.") from exc

    current_app.logger.info(
        "Election %s created by user %s with %d candidates and %d eligible voters",
        election.id,
        creator.id,
        len(candidate_names),
        len(emails),
    )
    return election


def get_election(store, election_id):
    try:
        election = store.get_election(election_id)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load election.") from exc
    if election is None:
        raise NotFound()
    return election


def require_owner(election, user):
    if not is_owner(election, user):
        raise PermissionDenied()


def is_owner(election, user):
    return bool(
        election is not None
        and user is not None
        and getattr(user, "id", None) is not None
        and election.created_by_id == user.id
    )


def is_eligible(election, email):
    email = normalize_email(email)
    if not email:
        return False
    return any(voter.email == email for voter in election.eligible_voters)


def list_created_elections(store, user):
    try:
        return store.elections_created_by(user.id)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load elections. Please refresh and try again.") from exc


def list_eligible_elections(store, email):
    email = normalize_email(email)
    if not email:
        return []
    try:
        return store.elections_eligible_for(email)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load elections. Please refresh and try again.") from exc


def has_voted(store, election_id, voter_id):
    try:
        return store.get_ballot(election_id, voter_id) is not None
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load your ballot status.") from exc


def voted_election_ids(store, voter_id, election_ids):
    try:
        return store.voted_election_ids(voter_id, election_ids)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load elections. Please refresh and try again.") from exc
