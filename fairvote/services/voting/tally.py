from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from fairvote.models import Tally
from fairvote.models.timestamps import utcnow
from fairvote.services.elections import get_election, require_owner
from fairvote.services.errors import NotFound, StoreUnavailable


def recount_from_ballots(candidates, ballots):
    """Derive per-candidate counts and the total from stored ballots.

    Selections naming a candidate outside ``candidates`` still add to the
    total but get no count entry.
    """
    counts = {candidate: 0 for candidate in candidates}
    total_votes = 0

    for ballot in ballots:
        selections = ballot.selections or []
        for candidate in selections:
            if candidate in counts:
                counts[candidate] += 1
        total_votes += len(selections)

    return counts, total_votes


def build_option_results(candidates, counts, total_votes):
    option_results = []
    for candidate in candidates:
        count = counts.get(candidate, 0)
        percent = (count / total_votes * 100) if total_votes > 0 else 0
        option_results.append({"candidate": candidate, "count": count, "percent": percent})
    return option_results


def owner_results(store, election_id, actor):
    election = get_election(store, election_id)
    require_owner(election, actor)

    try:
        ballots = store.ballots_for(election.id)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load results.") from exc

    candidates = election.candidate_names
    counts, total_votes = recount_from_ballots(candidates, ballots)

    voters = []
    for ballot in ballots:
        if ballot.voter_email and ballot.voter_email not in voters:
            voters.append(ballot.voter_email)

    return {
        "counts": counts,
        "total_votes": total_votes,
        "voters": voters,
        "option_results": build_option_results(candidates, counts, total_votes),
    }


def public_results(store, election_id):
    try:
        tally = store.get_tally(election_id)
    except SQLAlchemyError as exc:
        raise StoreUnavailable("Failed to load results.") from exc
    if tally is None:
        raise NotFound("Results not found.")

    result = {
        "election_id": tally.election_id,
        "title": tally.title,
        "candidates": list(tally.candidates or []),
        "is_closed": tally.is_closed,
        "is_published": tally.is_published,
        "counts": None,
        "total_votes": None,
        "option_results": [],
    }
    if tally.is_published:
        counts = dict(tally.counts or {})
        total_votes = tally.total_votes or 0
        candidates = result["candidates"] or list(counts)
        result["counts"] = counts
        result["total_votes"] = total_votes
        result["option_results"] = build_option_results(candidates, counts, total_votes)
    return result


def _merge_tally(store, election, tally, **fields):
    # Build every column before touching the session; loading the candidate
    # relationship autoflushes, and a half-filled new Tally would be flushed.
    fields.update(
        title=election.title,
        candidates=election.candidate_names,
        created_by_id=election.created_by_id,
        updated_at=utcnow(),
    )
    if tally is None:
        tally = Tally(election_id=election.id, created_at=utcnow(), **fields)
        store.add(tally)
        return tally

    for name, value in fields.items():
        setattr(tally, name, value)
    return tally


def close_and_publish(store, election_id, actor):
    election = get_election(store, election_id)
    require_owner(election, actor)

    try:
        tally = store.get_tally(election.id)
        if tally is not None and tally.counts:
            counts = dict(tally.counts)
            total_votes = tally.total_votes or 0
            recounted = False
        else:
            counts, total_votes = recount_from_ballots(
                election.candidate_names, store.ballots_for(election.id)
            )
            recounted = True

        # Nothing is written until the counts above are complete.
        election.is_closed = True
        election.results_published = True
        _merge_tally(
            store,
            election,
            tally,
            counts=counts,
            total_votes=total_votes,
            is_closed=True,
            is_published=True,
            published_at=utcnow(),
        )
        store.commit()
    except SQLAlchemyError as exc:
        store.rollback()
        current_app.logger.exception("Failed to publish results for election %s", election_id)
        raise StoreUnavailable("Failed to publish results.") from exc

    current_app.logger.info(
        "Results published for election %s (%d votes, recounted=%s)",
        election_id,
        total_votes,
        recounted,
    )
    return tally if tally is not None else store.get_tally(election_id)


def reopen_voting(store, election_id, actor):
    election = get_election(store, election_id)
    require_owner(election, actor)

    try:
        tally = store.get_tally(election.id)
        fields = {"is_closed": False}
        if tally is None:
            counts, total_votes = recount_from_ballots(
                election.candidate_names, store.ballots_for(election.id)
            )
            fields.update(
                counts=counts,
                total_votes=total_votes,
                is_published=bool(election.results_published),
            )

        election.is_closed = False
        _merge_tally(store, election, tally, **fields)
        store.commit()
    except SQLAlchemyError as exc:
        store.rollback()
        current_app.logger.exception("Failed to reopen voting for election %s", election_id)
        raise StoreUnavailable("Failed to reopen voting.") from exc

    current_app.logger.info("Voting reopened for election %s", election_id)
    return election
