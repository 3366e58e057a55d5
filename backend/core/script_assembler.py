"""
Script assembler: numbered SQL fragments joined into one replayable script.

A fragment is `{prefix}{index}.sql`. Indexes with nothing to write simply
have no file; assembly skips them.
"""
import logging
from pathlib import Path
from typing import Iterable, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def fragment_path(directory: PathLike, prefix: str, index: int) -> Path:
    return Path(directory) / f"{prefix}{index}.sql"


def write_fragment(directory: PathLike, prefix: str, index: int, statements: Iterable[str]) -> bool:
    """Write statements to fragment `index`. Returns False (and writes nothing) when empty."""
    statements = [s for s in statements if s]
    if not statements:
        return False
    path = fragment_path(directory, prefix, index)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        for statement in statements:
            fh.write(statement + "\n")
    return True


def clear_fragments(directory: PathLike, prefix: str) -> int:
    """Delete every `{prefix}{n}.sql` in `directory`. Returns how many were removed."""
    directory = Path(directory)
    if not directory.is_dir():
        return 0
    removed = 0
    for path in directory.glob(f"{prefix}*.sql"):
        if path.stem[len(prefix):].isdigit():
            path.unlink(missing_ok=True)
            removed += 1
    if removed:
        logger.info("Removed %d %s* fragments from %s", removed, prefix, directory)
    return removed


def assemble(
    fragment_count: int,
    prefix: str,
    destination_name: str,
    reversed: bool = True,
    directory: PathLike = ".",
) -> Path:
    """
    Concatenate fragments 0..fragment_count-1 (or the reverse) into
    `{destination_name}.sql`, deleting each fragment once copied.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / f"{destination_name}.sql"
    indexes = range(fragment_count - 1, -1, -1) if reversed else range(fragment_count)

    joined = 0
    with destination.open("w", encoding="utf-8") as out:
        for i in indexes:
            fragment = fragment_path(directory, prefix, i)
            if not fragment.exists():
                continue
            out.write(fragment.read_text(encoding="utf-8") + "\n")
            fragment.unlink()
            joined += 1
    logger.info("Assembled %d fragments into %s", joined, destination)
    return destination
