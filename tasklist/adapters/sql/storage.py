from __future__ import annotations
from typing import Optional
import sqlalchemy as db
from sqlalchemy.exc import SQLAlchemyError
from pathlib import Path
from tasklist.domain.errors import PersistenceError


class SqlStorage:
    def __init__(self, url: str | Path) -> None:
        """
        url: e.g. 'sqlite:///data/tasklist.db' or a Path to a file (turned into a sqlite URL)
        """
        if isinstance(url, Path):
            url.parent.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{url}"
        else:
            db_url = url

        try:
            self.engine = db.create_engine(db_url, future=True)
            self.meta = db.MetaData()

            self.items = db.Table(
                "storage",
                self.meta,
                db.Column("key", db.String, primary_key=True),
                db.Column("value", db.Text, nullable=False),  # JSON payload as stored
            )

            # create the table if it does not exist
            self.meta.create_all(self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e))

    def get_item(self, key: str) -> Optional[str]:
        stmt = db.select(self.items.c.value).where(self.items.c.key == key)
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(str(e))

    def set_item(self, key: str, value: str) -> None:
        update = db.update(self.items).where(self.items.c.key == key).values(value=value)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(update)
                if result.rowcount == 0:
                    conn.execute(db.insert(self.items).values(key=key, value=value))
        except SQLAlchemyError as e:
            raise PersistenceError(str(e))

    def remove_item(self, key: str) -> None:
        stmt = db.delete(self.items).where(self.items.c.key == key)
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e))

    def dispose(self) -> None:
        """Closes pooled connections (handy in tests on Windows)."""
        self.engine.dispose()
