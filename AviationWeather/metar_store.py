"""Local METAR cache backed by SQLite through SQLAlchemy."""
import logging
import typing
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint, create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from metar_errors import StoreReadError, StoreWriteError
from metar_report import WeatherReport

Base: typing.Any = declarative_base()

# Dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class MetarRecord(Base):  # type: ignore
    __tablename__ = "metar_reports"
    __table_args__ = (
        UniqueConstraint("station_id", "observation_time", name="uq_metar_identity"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    station_id = Column(String(16), nullable=False)
    # Empty string when the report had no observation time
    observation_time = Column(String(64), nullable=False, default="")
    wind = Column(String(64), nullable=True)
    visibility = Column(String(64), nullable=True)
    raw_text = Column(Text, nullable=True)

    def to_report(self) -> WeatherReport:
        return WeatherReport(
            station_id=self.station_id,
            observation_time=self.observation_time or None,
            wind=self.wind,
            visibility=self.visibility,
            raw_text=self.raw_text,
        )


def _is_memory_url(db_url: str) -> bool:
    return db_url in ("sqlite://", "sqlite:///:memory:")


class MetarStore:
    """
    Durable record store keyed by (station_id, observation_time).

    Each operation runs in its own session and commits before returning, so
    the store may be called from any thread.
    """

    def __init__(self, db_url: str = "sqlite://"):
        self.db_url = db_url
        self.engine: Optional[Engine] = None
        self.Session: Optional[sessionmaker] = None

    def connect(self) -> None:
        """
        Create the engine and tables.

        Raises:
            SQLAlchemyError: If the database cannot be opened or initialized
        """
        kwargs: typing.Dict[str, typing.Any] = {}
        if self.db_url.startswith("sqlite"):
            # Writers wait on the file lock instead of failing with "database is locked"
            kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if _is_memory_url(self.db_url):
                # One shared connection, otherwise every session sees an empty db
                kwargs["poolclass"] = StaticPool

        logging.info(f"Opening METAR store: {self.db_url}")
        engine = create_engine(self.db_url, **kwargs)
        Base.metadata.create_all(engine)

        self.engine = engine
        self.Session = sessionmaker(bind=engine)
        logging.info("METAR store initialized")

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.Session = None

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self.Session is None:
            raise SQLAlchemyError("METAR store is not connected")
        session = self.Session()
        try:
            yield session
        finally:
            session.close()

    def upsert(self, report: WeatherReport) -> None:
        """
        Insert the report, or overwrite the record with the same identity.

        A single INSERT ... ON CONFLICT DO UPDATE, so concurrent writers of
        the same identity never trip the unique constraint.

        Raises:
            StoreWriteError: If the write cannot be committed
        """
        station_id, observation_time = report.identity
        fields = {
            "wind": report.wind,
            "visibility": report.visibility,
            "raw_text": report.raw_text,
        }
        try:
            with self._session() as session:
                try:
                    dialect = session.get_bind().dialect.name
                    insert = UPSERT_INSERTS.get(dialect)
                    if insert is None:
                        raise SQLAlchemyError(f"upsert not supported on {dialect}")
                    statement = (
                        insert(MetarRecord)
                        .values(station_id=station_id, observation_time=observation_time, **fields)
                        .on_conflict_do_update(
                            index_elements=["station_id", "observation_time"],
                            set_=fields,
                        )
                    )
                    session.execute(statement)
                    session.commit()
                    logging.debug(f"Saved METAR {station_id} @ {observation_time or '-'}")
                except SQLAlchemyError:
                    session.rollback()
                    raise
        except SQLAlchemyError as e:
            logging.error(f"Failed to save METAR {station_id}: {e}")
            raise StoreWriteError(e, station_id=station_id) from e

    def get(self, station_id: str, observation_time: Optional[str] = None) -> Optional[WeatherReport]:
        """Point lookup by identity key; None when no record matches."""
        try:
            with self._session() as session:
                record = (
                    session.query(MetarRecord)
                    .filter_by(station_id=station_id, observation_time=observation_time or "")
                    .first()
                )
                return record.to_report() if record is not None else None
        except SQLAlchemyError as e:
            logging.error(f"Failed to read METAR {station_id}: {e}")
            raise StoreReadError(e) from e

    def query_all(self) -> List[WeatherReport]:
        """
        Return every stored report, most recent observation first.

        Reports without an observation time sort last.

        Raises:
            StoreReadError: If the store cannot be read
        """
        try:
            with self._session() as session:
                records = (
                    session.query(MetarRecord)
                    .order_by(MetarRecord.observation_time.desc(), MetarRecord.station_id.asc())
                    .all()
                )
                return [record.to_report() for record in records]
        except SQLAlchemyError as e:
            logging.error(f"Failed to load saved METARs: {e}")
            raise StoreReadError(e) from e

    def count(self) -> int:
        try:
            with self._session() as session:
                return session.query(MetarRecord).count()
        except SQLAlchemyError as e:
            raise StoreReadError(e) from e
