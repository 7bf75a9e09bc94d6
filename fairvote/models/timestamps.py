from datetime import datetime, timezone


def utcnow():
    # Stored naive; every timestamp column in this schema is UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)
