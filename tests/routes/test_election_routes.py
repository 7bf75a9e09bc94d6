from fairvote.models import Election, User
from fairvote.services.voting import cast_vote

XHR = {"X-Requested-With": "XMLHttpRequest"}
PASSWORD = "correct-horse"


def test_signup_then_login_with_normalized_email(client, db_session):
    response = client.post(
        "/signup",
        data={"email": "  New@Example.com ", "display_name": "New", "password": PASSWORD},
    )
    assert response.status_code == 302
    assert db_session.query(User).filter_by(email="new@example.com").count() == 1

    response = client.post("/login", data={"email": "NEW@example.com", "password": PASSWORD})
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/")


def test_login_rejects_wrong_password(client, voter_a):
    response = client.post("/login", data={"email": "a@x.com", "password": "nope-nope"})
    assert response.status_code == 200
    assert b"Invalid email or password." in response.data


def test_election_pages_require_sign_in(client, election):
    response = client.get(f"/elections/{election.id}")
    assert response.status_code == 302
    assert "/login" in response.headers["Location"]


def test_create_election_redirects_to_detail(login, db_session, organizer):
    client = login(organizer)
    response = client.post(
        "/elections/new",
        data={
            "title": "Team lead",
            "candidates": "Ava\nNoah",
            "max_selections": "1",
            "eligible_emails": "A@x.com\n",
        },
    )

    election = db_session.query(Election).one()
    assert response.status_code == 302
    assert response.headers["Location"].endswith(f"/elections/{election.id}")
    assert election.eligible_emails == ["a@x.com"]


def test_create_election_reports_validation_errors_as_json(login, db_session, organizer):
    client = login(organizer)
    response = client.post(
        "/elections/new",
        data={"title": "Team lead", "candidates": "Ava", "eligible_emails": "a@x.com"},
        headers=XHR,
    )

    assert response.status_code == 400
    assert response.get_json() == {"ok": False, "error": "Please add at least two candidates."}
    assert db_session.query(Election).count() == 0


def test_vote_then_second_vote_is_refused(login, store, election, voter_a):
    client = login(voter_a)

    response = client.post(
        f"/elections/{election.id}/vote", data={"selections": ["Ava", "Noah"]}
    )
    assert response.status_code == 302

    store.session.expire_all()
    assert store.get_tally(election.id).total_votes == 2

    response = client.post(
        f"/elections/{election.id}/vote", data={"selections": ["Liam"]}, headers=XHR
    )
    assert response.status_code == 409
    assert response.get_json()["error"] == "You have already voted in this election."

    page = client.get(f"/elections/{election.id}")
    assert b"Vote submitted" in page.data


def test_too_many_selections_flash_an_error(login, store, election, voter_a):
    client = login(voter_a)
    response = client.post(
        f"/elections/{election.id}/vote",
        data={"selections": ["Ava", "Noah", "Liam"]},
        follow_redirects=True,
    )

    assert b"Select between 1 and 2 candidates before voting." in response.data
    store.session.expire_all()
    assert store.get_tally(election.id).total_votes == 0


def test_public_results_page_before_and_after_publish(
    client, login, store, election, organizer, voter_a
):
    cast_vote(store, election.id, voter_a, ["Ava", "Noah"])

    page = client.get(f"/elections/{election.id}/results")
    assert page.status_code == 200
    assert b"Results are not published yet." in page.data

    login(organizer).post(f"/elections/{election.id}/publish")

    page = client.get(f"/elections/{election.id}/results")
    assert b"Total votes cast: 2" in page.data
    assert b"a@x.com" not in page.data


def test_dashboard_shows_attendance_to_owner_only(login, store, election, organizer, voter_a):
    cast_vote(store, election.id, voter_a, ["Ava"])

    page = login(voter_a).get(f"/elections/{election.id}/dashboard")
    assert page.status_code == 403

    page = login(organizer).get(f"/elections/{election.id}/dashboard")
    assert page.status_code == 200
    assert b"a@x.com" in page.data
    assert b"Total votes cast: 1" in page.data


def test_non_owner_cannot_publish(login, election, voter_a):
    response = login(voter_a).post(f"/elections/{election.id}/publish")
    assert response.status_code == 403


def test_unknown_election_is_404(login, voter_a):
    client = login(voter_a)
    assert client.get("/elections/999").status_code == 404
    assert client.get("/elections/999/results").status_code == 404


def test_index_lists_created_and_eligible_elections(login, store, election, organizer, voter_a):
    cast_vote(store, election.id, voter_a, ["Ava"])

    page = login(voter_a).get("/")
    assert b"Class Representative" in page.data
    assert b"Vote submitted" in page.data

    page = login(organizer).get("/")
    assert b"Class Representative" in page.data
