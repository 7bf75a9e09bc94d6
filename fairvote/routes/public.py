from flask import abort, flash, render_template
from flask_login import current_user

from fairvote.services.elections import (
    list_created_elections,
    list_eligible_elections,
    voted_election_ids,
)
from fairvote.services.errors import FairVoteError, NotFound
from fairvote.services.voting import public_results
from fairvote.store import get_store


def register_public_routes(app):
    @app.route("/")
    def index():
        if not current_user.is_authenticated:
            return render_template("index.html", my_elections=[], eligible_elections=[])

        store = get_store()
        my_elections = []
        eligible_elections = []
        voted_ids = set()
        try:
            my_elections = list_created_elections(store, current_user)
            eligible_elections = list_eligible_elections(store, current_user.email)
            voted_ids = voted_election_ids(
                store, current_user.id, [election.id for election in eligible_elections]
            )
        except FairVoteError as exc:
            flash(exc.message, "error")

        return render_template(
            "index.html",
            my_elections=my_elections,
            eligible_elections=eligible_elections,
            voted_ids=voted_ids,
        )

    @app.route("/elections/<int:election_id>/results")
    def election_public_results(election_id):
        try:
            results = public_results(get_store(), election_id)
        except NotFound:
            abort(404)
        except FairVoteError as exc:
            flash(exc.message, "error")
            results = None

        return render_template("elections/results.html", results=results, election_id=election_id)
