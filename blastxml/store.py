import logging
import sqlite3
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .report import Iteration

logger = logging.getLogger(__name__)

TABLE_NAME = "blast"

TABLE_SPEC: Tuple[Tuple[str, str, str], ...] = (
    ("accession", "TEXT", "PRIMARY KEY"),
    ("src", "BLOB", "NOT NULL"),
)


def freeze(iteration: Iteration) -> bytes:
    return ET.tostring(iteration.node, encoding="utf-8")


def thaw(src: bytes) -> Iteration:
    return Iteration(ET.fromstring(src))


def prep_iterations(iterations: Iterable[Iteration]) -> Iterator[Dict[str, object]]:
    """Yields one {"accession", "src"} row per iteration, keyed on the query accession."""
    for it in iterations:
        yield {"accession": it.accession, "src": freeze(it)}


class IterationStore:
    """
    sqlite3 table of serialized iterations keyed on query accession, so a
    single query's results can be looked up without re-reading a report.
    """

    def __init__(self, path: str, table: str = TABLE_NAME) -> None:
        self._table = table
        self._conn = sqlite3.connect(str(path))
        columns = ", ".join(" ".join(col) for col in TABLE_SPEC)
        self._conn.execute(f"CREATE TABLE IF NOT EXISTS {self._table} ({columns})")
        self._conn.commit()

    def add(self, iterations: Iterable[Iteration]) -> int:
        rows = [(row["accession"], row["src"]) for row in prep_iterations(iterations)]
        with self._conn:
            self._conn.executemany(
                f"INSERT OR REPLACE INTO {self._table} (accession, src) VALUES (?, ?)", rows
            )
        logger.debug("Stored %d iterations in %s", len(rows), self._table)
        return len(rows)

    def get(self, accession: str) -> Optional[Iteration]:
        cur = self._conn.execute(f"SELECT src FROM {self._table} WHERE accession = ?", (accession,))
        row = cur.fetchone()
        if row is None:
            return None
        return thaw(row[0])

    def accessions(self):
        cur = self._conn.execute(f"SELECT accession FROM {self._table} ORDER BY accession")
        return [row[0] for row in cur.fetchall()]

    def __iter__(self) -> Iterator[Iteration]:
        cur = self._conn.execute(f"SELECT src FROM {self._table} ORDER BY accession")
        for (src,) in cur:
            yield thaw(src)

    def __len__(self) -> int:
        return self._conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()[0]

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "IterationStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
