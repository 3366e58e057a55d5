"""
Database connector — SQLAlchemy engine factory, connection resilience and schema reflection.
Supports SQLite and PostgreSQL. Extracts tables, columns, types and single-column FK constraints.
"""
import logging
import re
import time
from typing import Callable, Optional
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import CompileError
from sqlalchemy.types import ARRAY, Enum, TypeEngine
from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, stop_after_attempt, wait_incrementing

from config import settings
from core.exceptions import CompositeForeignKeyError, ConnectionUnavailableError
from models.connection import ConnectionRequest
from models.schema import Column, Schema, Table

logger = logging.getLogger(__name__)


def create_engine_from_request(req: ConnectionRequest) -> Engine:
    """Build a SQLAlchemy engine from a ConnectionRequest."""
    return create_engine(req.get_sqlalchemy_url(), pool_pre_ping=True)


# ── Connection resilience ─────────────────────────────────────────────────────

def connection_state(connection: Optional[Connection]) -> str:
    if connection is None:
        return "absent"
    if connection.invalidated:
        return "broken"
    if connection.closed:
        return "closed"
    return "open"


def is_faulty(connection: Optional[Connection]) -> bool:
    return connection_state(connection) != "open"


class ConnectionManager:
    """Holds one live connection and reopens it lazily when it goes stale.

    Callers must call `acquire()` right before every use; a connection that
    was closed or invalidated since the last call is only replaced then.
    Opening is retried `max_retries` times, waiting `backoff_seconds * n`
    before retry n.
    """

    def __init__(
        self,
        req: ConnectionRequest,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.req = req
        self.max_retries = settings.CONNECT_MAX_RETRIES if max_retries is None else max_retries
        self.backoff_seconds = settings.CONNECT_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        self._sleep = sleep
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None

    def _open(self) -> Optional[Connection]:
        if is_faulty(self._connection):
            try:
                if self._connection is not None:
                    self._connection.close()
                    self._connection = None
                if self._engine is None:
                    self._engine = create_engine_from_request(self.req)
                self._connection = self._engine.connect()
            except Exception as e:
                # The result check in acquire() decides whether to retry
                logger.warning("Connection attempt failed: %s", e)
        return self._connection

    def _log_retry(self, retry_state: RetryCallState) -> None:
        result = retry_state.outcome.result() if retry_state.outcome else None
        logger.info(
            "Retrying %d/%d. Database connection state is `%s`.",
            retry_state.attempt_number, self.max_retries, connection_state(result),
        )

    def acquire(self) -> Connection:
        """Return a usable connection, reopening it if needed.

        Raises:
            ConnectionUnavailableError: when every attempt left the connection faulty.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            retry=retry_if_result(is_faulty),
            before_sleep=self._log_retry,
            sleep=self._sleep,
        )
        try:
            return retrying(self._open)
        except RetryError as e:
            state = connection_state(e.last_attempt.result())
            raise ConnectionUnavailableError(
                "Failed to create a connection to the database.",
                attempts=e.last_attempt.attempt_number,
                state=state,
            ) from e

    def close(self) -> None:
        if self._connection is not None and not self._connection.closed:
            self._connection.close()
        self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# ── Schema reflection ─────────────────────────────────────────────────────────

def normalise_type_name(sa_type: TypeEngine, dialect=None) -> str:
    """Upper-case type name without length/precision, e.g. VARCHAR(20) -> VARCHAR."""
    if isinstance(sa_type, Enum):
        return "ENUM"
    if isinstance(sa_type, ARRAY):
        return "ARRAY"
    try:
        data_type = sa_type.compile(dialect=dialect).upper()
    except CompileError:
        data_type = type(sa_type).__name__.upper()
    # Simplify long type strings
    data_type = re.sub(r"\s*\([^)]*\)", "", data_type)
    return " ".join(data_type.split())


def reflect_schema(conn: Connection, schema_name: str, full_name: Callable[[str, str], str]) -> Schema:
    """
    Reflect all tables of one schema through the SQLAlchemy inspector.
    `full_name(schema, table)` renders a table's fully-qualified display name;
    FK targets are rendered with it too so they match `Table.full_name`.
    """
    insp = inspect(conn)
    table_names = insp.get_table_names(schema=schema_name)
    logger.info("Discovered %d tables in schema %s", len(table_names), schema_name)

    tables: list[Table] = []
    for table_name in table_names:
        fk_map = _reflect_foreign_keys(insp, table_name, schema_name, full_name)
        columns = []
        for col in insp.get_columns(table_name, schema=schema_name):
            target = fk_map.get(col["name"])
            columns.append(Column(
                name=col["name"],
                table_name=table_name,
                data_type=normalise_type_name(col["type"], conn.dialect),
                is_nullable=col.get("nullable", True),
                is_foreign_reference=target is not None,
                foreign_table_name=target[0] if target else None,
                foreign_column_name=target[1] if target else None,
            ))
        tables.append(Table(
            name=table_name,
            full_name=full_name(schema_name, table_name),
            columns=tuple(columns),
        ))
    return Schema(name=schema_name, tables=tuple(tables))


def _reflect_foreign_keys(insp, table_name: str, schema_name: str, full_name) -> dict[str, tuple[str, str]]:
    """column name → (referenced table full name, referenced column)."""
    fk_map: dict[str, tuple[str, str]] = {}
    for fk in insp.get_foreign_keys(table_name, schema=schema_name):
        constrained = fk["constrained_columns"]
        if len(constrained) != 1:
            raise CompositeForeignKeyError(table_name, constrained, fk["referred_table"])
        column = constrained[0]
        target = (full_name(fk.get("referred_schema") or schema_name, fk["referred_table"]), fk["referred_columns"][0])
        if column in fk_map and fk_map[column] != target:
            logger.warning(
                "Column %s.%s has several foreign keys; following %s.%s only",
                table_name, column, *fk_map[column],
            )
            continue
        fk_map[column] = target
    return fk_map
