from fairvote.extensions import db
from fairvote.models.timestamps import utcnow


class Tally(db.Model):
    """Running aggregate for one election, readable without the election row.

    ``version_id`` is bumped on every flush; a writer holding a stale copy
    gets ``StaleDataError`` instead of overwriting someone else's increment.
    ``counts`` is a JSON object and must be reassigned, never mutated in place.
    """

    __tablename__ = "tallies"

    election_id = db.Column(db.Integer, db.ForeignKey("elections.id"), primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    candidates = db.Column(db.JSON, nullable=False, default=list)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    counts = db.Column(db.JSON, nullable=False, default=dict)
    total_votes = db.Column(db.Integer, nullable=False, default=0)
    is_closed = db.Column(db.Boolean, nullable=False, default=False)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    version_id = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}
