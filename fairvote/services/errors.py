class FairVoteError(Exception):
    """Base class for failures that are shown to the user as one message."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FairVoteError):
    default_message = "The submitted data is not valid."


class ElectionClosed(ValidationError):
    default_message = "Voting is closed for this election."


class NotEligible(ValidationError):
    default_message = "Your email isn't on the eligible voter list for this election."


class AlreadyVoted(FairVoteError):
    default_message = "You have already voted in this election."


class TallyMissing(FairVoteError):
    default_message = "Results setup is missing. Ask the creator to reopen and publish."


class StoreUnavailable(FairVoteError):
    default_message = "The service is temporarily unavailable. Please try again."


class NotFound(FairVoteError):
    default_message = "Election not found."


class PermissionDenied(FairVoteError):
    default_message = "Only the election creator can do that."
