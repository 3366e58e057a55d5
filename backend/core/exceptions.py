"""
Exception types raised by the extraction engines.

Lookup failures (missing root table, missing foreign-key target) are not
exceptions: the row extractor reports them as a failed run. The errors
below stop a run entirely and are surfaced by the caller.
"""
from typing import Optional


class ExtractionError(Exception):
    """Base class for all extraction errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ConnectionUnavailableError(ExtractionError):
    """No usable database connection after the retry budget was spent."""

    def __init__(self, message: str, attempts: int, state: Optional[str] = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.state = state


class CircularDependencyError(ExtractionError):
    """Tables reference each other in a foreign-key cycle.

    Attributes:
        chain: Full names along the cycle, first and last entries equal.
    """

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(f"Circular dependency detected: {' -> '.join(chain)}")


class CompositeForeignKeyError(ExtractionError):
    """A foreign key spans more than one column; only single-column keys are supported."""

    def __init__(self, table_name: str, columns: list[str], referred_table: str) -> None:
        self.table_name = table_name
        self.columns = columns
        self.referred_table = referred_table
        super().__init__(
            f"Composite foreign key ({', '.join(columns)}) on {table_name} "
            f"referencing {referred_table} is not supported"
        )
