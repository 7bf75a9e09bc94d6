from fairvote.extensions import db
from fairvote.models.timestamps import utcnow


class Ballot(db.Model):
    __tablename__ = "ballots"

    # The composite key is what makes a second ballot per voter impossible.
    election_id = db.Column(db.Integer, db.ForeignKey("elections.id"), primary_key=True)
    voter_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    voter_email = db.Column(db.String(255), nullable=False, default="")
    selections = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
