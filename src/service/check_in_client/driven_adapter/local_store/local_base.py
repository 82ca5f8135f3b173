from sqlalchemy.orm import DeclarativeBase


class LocalBase(DeclarativeBase):
    """Declarative base for device-local tables; kept apart from the server ledger's Base."""

    pass
