from sqlalchemy import select

from fairvote.extensions import db
from fairvote.models import Ballot, Election, EligibleVoter, Tally


class ElectionStore:
    """Repository over one SQLAlchemy session.

    Services take a store instead of touching ``db.session`` so a test can
    run two stores against the same database and interleave their work.
    """

    def __init__(self, session):
        self.session = session

    def get_election(self, election_id, fresh=False):
        # fresh=True reloads the row even when it is already in the identity map.
        return self.session.get(Election, election_id, populate_existing=fresh)

    def get_tally(self, election_id):
        return self.session.get(Tally, election_id)

    def get_ballot(self, election_id, voter_id):
        return self.session.get(Ballot, (election_id, voter_id))

    def ballots_for(self, election_id):
        stmt = (
            select(Ballot)
            .where(Ballot.election_id == election_id)
            .order_by(Ballot.created_at, Ballot.voter_id)
        )
        return self.session.execute(stmt).scalars().all()

    def elections_created_by(self, user_id):
        stmt = (
            select(Election)
            .where(Election.created_by_id == user_id)
            .order_by(Election.created_at.desc(), Election.id.desc())
        )
        return self.session.execute(stmt).scalars().all()

    def elections_eligible_for(self, email):
        stmt = (
            select(Election)
            .join(EligibleVoter, EligibleVoter.election_id == Election.id)
            .where(EligibleVoter.email == email)
            .order_by(Election.created_at.desc(), Election.id.desc())
        )
        return self.session.execute(stmt).scalars().unique().all()

    def voted_election_ids(self, voter_id, election_ids):
        if not election_ids:
            return set()
        stmt = select(Ballot.election_id).where(
            Ballot.voter_id == voter_id,
            Ballot.election_id.in_(list(election_ids)),
        )
        return set(self.session.execute(stmt).scalars().all())

    def add(self, obj):
        self.session.add(obj)

    def flush(self):
        self.session.flush()

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()


def get_store():
    return ElectionStore(db.session)
