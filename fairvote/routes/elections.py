from flask import abort, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from fairvote.services.elections import (
    create_election,
    get_election,
    has_voted,
    is_eligible,
    is_owner,
)
from fairvote.services.errors import (
    FairVoteError,
    NotFound,
    PermissionDenied,
    StoreUnavailable,
    ValidationError,
)
from fairvote.services.voting import (
    cast_vote,
    close_and_publish,
    owner_results,
    reopen_voting,
)
from fairvote.store import get_store


def _wants_json():
    return request.headers.get("X-Requested-With") == "XMLHttpRequest"


def _error_status(exc):
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, PermissionDenied):
        return 403
    if isinstance(exc, StoreUnavailable):
        return 503
    if isinstance(exc, ValidationError):
        return 400
    return 409


def _load_election_or_404(store, election_id):
    try:
        return get_election(store, election_id)
    except NotFound:
        abort(404)


def _render_detail(store, election, results=None):
    voted = has_voted(store, election.id, current_user.id)
    return render_template(
        "elections/detail.html",
        election=election,
        share_url=url_for("election_detail", election_id=election.id, _external=True),
        is_owner=is_owner(election, current_user),
        is_eligible=is_eligible(election, current_user.email),
        has_voted=voted,
        results=results,
    )


def register_election_routes(app):
    @app.route("/elections/new", methods=["POST"])
    @login_required
    def create_election_view():
        store = get_store()
        try:
            election = create_election(
                store,
                current_user,
                title=request.form.get("title"),
                candidates=request.form.get("candidates") or "",
                max_selections=(request.form.get("max_selections") or "1").strip(),
                eligible_emails=request.form.get("eligible_emails") or "",
            )
        except FairVoteError as exc:
            if _wants_json():
                return {"ok": False, "error": exc.message}, _error_status(exc)
            flash(exc.message, "error")
            return redirect(url_for("index"))

        if _wants_json():
            return {
                "ok": True,
                "election": {
                    "id": election.id,
                    "title": election.title,
                    "candidates": election.candidate_names,
                    "max_selections": election.max_selections,
                    "eligible_emails": election.eligible_emails,
                },
            }

        flash("Election created.", "success")
        return redirect(url_for("election_detail", election_id=election.id))

    @app.route("/elections/<int:election_id>")
    @login_required
    def election_detail(election_id):
        store = get_store()
        election = _load_election_or_404(store, election_id)
        return _render_detail(store, election)

    @app.route("/elections/<int:election_id>/vote", methods=["POST"])
    @login_required
    def vote_election(election_id):
        store = get_store()
        selections = request.form.getlist("selections")
        try:
            cast_vote(store, election_id, current_user, selections)
        except FairVoteError as exc:
            if _wants_json():
                return {"ok": False, "error": exc.message}, _error_status(exc)
            if isinstance(exc, NotFound):
                abort(404)
            flash(exc.message, "error")
            return redirect(url_for("election_detail", election_id=election_id))

        if _wants_json():
            return {"ok": True}

        flash("Your vote is submitted. Thank you!", "success")
        return redirect(url_for("election_detail", election_id=election_id))

    @app.route("/elections/<int:election_id>/dashboard")
    @login_required
    def election_dashboard(election_id):
        store = get_store()
        election = _load_election_or_404(store, election_id)
        try:
            results = owner_results(store, election_id, current_user)
        except PermissionDenied:
            abort(403)
        except FairVoteError as exc:
            flash(exc.message, "error")
            return redirect(url_for("election_detail", election_id=election_id))

        return _render_detail(store, election, results=results)

    @app.route("/elections/<int:election_id>/publish", methods=["POST"])
    @login_required
    def publish_election(election_id):
        store = get_store()
        _load_election_or_404(store, election_id)
        try:
            close_and_publish(store, election_id, current_user)
        except PermissionDenied:
            abort(403)
        except FairVoteError as exc:
            flash(exc.message, "error")
        else:
            flash("Voting closed and results published.", "success")
        return redirect(url_for("election_detail", election_id=election_id))

    @app.route("/elections/<int:election_id>/reopen", methods=["POST"])
    @login_required
    def reopen_election(election_id):
        store = get_store()
        _load_election_or_404(store, election_id)
        try:
            reopen_voting(store, election_id, current_user)
        except PermissionDenied:
            abort(403)
        except FairVoteError as exc:
            flash(exc.message, "error")
        else:
            flash("Voting re-opened.", "success")
        return redirect(url_for("election_detail", election_id=election_id))
