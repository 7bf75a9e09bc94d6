from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from fairvote.services.errors import FairVoteError, StoreUnavailable

# A stale tally version or a duplicate ballot key both mean another writer
# committed first; re-running the unit re-reads what they wrote.
CONFLICT_ERRORS = (StaleDataError, IntegrityError)


def run_in_transaction(store, unit, max_attempts=None):
    """Run ``unit(store)`` and commit it, retrying the whole unit on conflict.

    Application errors raised by the unit roll back and propagate on the
    first attempt. Any other database error becomes ``StoreUnavailable``.
    """
    if max_attempts is None:
        max_attempts = current_app.config.get("VOTE_TRANSACTION_MAX_ATTEMPTS", 5)
    max_attempts = max(1, int(max_attempts))

    for attempt in range(1, max_attempts + 1):
        try:
            result = unit(store)
            store.commit()
            return result
        except CONFLICT_ERRORS as exc:
            store.rollback()
            current_app.logger.info(
                "Transaction conflict on attempt %d/%d: %s",
                attempt,
                max_attempts,
                exc.__class__.__name__,
            )
        except FairVoteError:
            store.rollback()
            raise
        except SQLAlchemyError as exc:
            store.rollback()
            current_app.logger.exception("Transaction failed on attempt %d", attempt)
            raise StoreUnavailable() from exc

    current_app.logger.warning("Transaction gave up after %d conflicting attempts", max_attempts)
    raise StoreUnavailable("Failed to submit vote. Please try again.")
