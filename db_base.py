import uuid

from sqlalchemy.orm import DeclarativeBase


def new_uuid() -> str:
    """Primary keys are UUID strings so they travel unchanged through JSON."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """
    Base class for all fleet ORM models.

    No engine/session imports here so that Alembic and the reset script can
    import Base without pulling in async drivers.
    """
    pass
