from fairvote.extensions import db
from fairvote.models.timestamps import utcnow


class Election(db.Model):
    __tablename__ = "elections"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_by_email = db.Column(db.String(255), nullable=False, default="")
    max_selections = db.Column(db.Integer, nullable=False, default=1)
    is_closed = db.Column(db.Boolean, nullable=False, default=False)
    results_published = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    candidates = db.relationship(
        "Candidate",
        backref="election",
        lazy=True,
        order_by="Candidate.position",
    )
    eligible_voters = db.relationship("EligibleVoter", backref="election", lazy=True)

    @property
    def candidate_names(self):
        return [candidate.name for candidate in self.candidates]

    @property
    def eligible_emails(self):
        return sorted(voter.email for voter in self.eligible_voters)


class Candidate(db.Model):
    __tablename__ = "candidates"
    __table_args__ = (
        db.UniqueConstraint("election_id", "name", name="uq_candidate_election_name"),
    )

    id = db.Column(db.Integer, primary_key=True)
    election_id = db.Column(db.Integer, db.ForeignKey("elections.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)


class EligibleVoter(db.Model):
    __tablename__ = "eligible_voters"
    __table_args__ = (
        db.UniqueConstraint("election_id", "email", name="uq_eligible_election_email"),
    )

    id = db.Column(db.Integer, primary_key=True)
    election_id = db.Column(db.Integer, db.ForeignKey("elections.id"), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
