from fairvote.models.ballot import Ballot
from fairvote.models.election import Candidate, Election, EligibleVoter
from fairvote.models.tally import Tally
from fairvote.models.user import User

__all__ = [
    "User",
    "Election",
    "Candidate",
    "EligibleVoter",
    "Tally",
    "Ballot",
]
