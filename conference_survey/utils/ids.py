import uuid


def parse_uuid(value) -> uuid.UUID | None:
    """Return ``value`` as a UUID, or ``None`` when it is not one.

    URL kwargs captured by ``[^/.]+`` may hold anything; lookups with ``None``
    match no rows and fall through to the caller's 404.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None
