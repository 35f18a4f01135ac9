"""
Flat-file persistence for reservations and the ID counter.

Records are stored one per line as ``ID|name|phone|partySize|date|time|tableIndex``
with 0-based table indices; the counter lives in its own file as a single
integer. Every save rewrites the destination through a temporary file in the
same directory followed by an atomic rename.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple, Union

from pydantic import ValidationError as ModelValidationError

from domain.errors import PersistenceError
from domain.models import Reservation
from services.reservation_validation import reservation_id_number


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def atomic_write_text(path: PathLike, text: str) -> None:
    """
    Replace ``path`` with ``text`` so readers never see a partial file.

    Raises:
        OSError: If the temporary file cannot be written or renamed
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class ReservationRepository:
    """Reads and writes the reservation records file and the counter file."""

    def __init__(self, records_path: PathLike, counter_path: PathLike, table_count: int = 10):
        """
        Initialize the repository.

        Args:
            records_path: File holding one reservation per line
            counter_path: File holding the next reservation number
            table_count: Size of the table pool, used to drop impossible records
        """
        self.records_path = Path(records_path)
        self.counter_path = Path(counter_path)
        self.table_count = table_count

    def save(self, reservations: Iterable[Reservation], counter: int) -> None:
        """
        Persist every active reservation, then the counter.

        Raises:
            PersistenceError: If either file cannot be written
        """
        lines = "".join(f"{reservation.to_line()}\n" for reservation in reservations)
        try:
            atomic_write_text(self.records_path, lines)
        except OSError as e:
            logger.error(f"Error saving reservations to {self.records_path}: {e}")
            raise PersistenceError("Unable to open reservations file for writing.") from e

        try:
            atomic_write_text(self.counter_path, f"{counter}\n")
        except OSError as e:
            logger.error(f"Error saving reservation counter to {self.counter_path}: {e}")
            raise PersistenceError("Unable to open next_id file for writing.") from e

    def load(self) -> Tuple[List[Reservation], int]:
        """
        Read back the persisted reservations and counter.

        Missing files mean an empty store. Malformed lines, and lines whose
        table or ID is already claimed by an earlier line, are skipped.

        Returns:
            Tuple of (reservations, next counter value). The counter is at
            least the persisted value and greater than every loaded ID number.

        Raises:
            PersistenceError: If an existing file cannot be read
        """
        reservations: List[Reservation] = []
        taken_tables: Set[int] = set()
        taken_ids: Set[str] = set()
        counter = 1

        for line_number, raw in enumerate(self._read_lines(self.records_path), start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning(f"Skipping undecodable reservation line {line_number}: {e}")
                continue
            if not line.strip():
                continue
            try:
                reservation = Reservation.from_line(line)
            except (ValueError, ModelValidationError) as e:
                logger.warning(f"Skipping malformed reservation line {line_number}: {e}")
                continue

            if reservation.table_index >= self.table_count:
                logger.warning(f"Skipping line {line_number}: table {reservation.table_index} out of range")
                continue
            if reservation.table_index in taken_tables:
                logger.warning(f"Skipping line {line_number}: table {reservation.table_index} already booked")
                continue
            if reservation.id in taken_ids:
                logger.warning(f"Skipping line {line_number}: duplicate ID {reservation.id}")
                continue

            taken_tables.add(reservation.table_index)
            taken_ids.add(reservation.id)
            reservations.append(reservation)

            number = reservation_id_number(reservation.id)
            if number is not None:
                counter = max(counter, number + 1)

        persisted = self._read_counter()
        if persisted is not None:
            counter = max(counter, persisted)

        logger.info(f"Loaded {len(reservations)} reservations, next ID number {counter}")
        return reservations, counter

    def _read_lines(self, path: Path) -> List[bytes]:
        """Raw lines of ``path``; callers decode each one strictly."""
        if not path.exists():
            return []
        try:
            with open(path, "rb") as f:
                return f.read().splitlines()
        except OSError as e:
            raise PersistenceError(f"Unable to open {path.name} for reading.") from e

    def _read_counter(self) -> Optional[int]:
        lines = self._read_lines(self.counter_path)
        if not lines:
            return None
        try:
            return int(lines[0].decode("utf-8").strip())
        except ValueError:
            logger.warning(f"Ignoring malformed counter file {self.counter_path}")
            return None
