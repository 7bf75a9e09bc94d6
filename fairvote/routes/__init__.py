from fairvote.routes.auth import register_auth_routes
from fairvote.routes.elections import register_election_routes
from fairvote.routes.public import register_public_routes


def register_routes(app):
    register_auth_routes(app)
    register_public_routes(app)
    register_election_routes(app)
