from flask_login import UserMixin

from fairvote.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    display_name = db.Column(db.String(200), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)

    elections = db.relationship("Election", backref="created_by", lazy=True)
