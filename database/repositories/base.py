from sqlalchemy.orm import Session


class BaseRepository:
    """Repository bound to a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()


class StoreRepository:
    """Repository that reads through a RecordStore instead of a session."""

    def __init__(self, store):
        self.store = store
