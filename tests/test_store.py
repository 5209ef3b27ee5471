import io
import os
import tempfile
import unittest

from blastxml.report import iteration_seq
from blastxml.store import TABLE_SPEC, IterationStore, freeze, prep_iterations, thaw

from test_report import REPORT


def _iterations():
    return list(iteration_seq(io.BytesIO(REPORT.encode("utf-8"))))


class TestFreezeThaw(unittest.TestCase):

    def test_thawed_iteration_is_navigable(self):
        it = _iterations()[0]
        restored = thaw(freeze(it))
        self.assertEqual(restored.accession, "Q1")
        self.assertEqual(restored.query_length, 40)
        self.assertEqual(restored.hits(), it.hits())

    def test_prep_iterations(self):
        rows = list(prep_iterations(_iterations()))
        self.assertEqual([r["accession"] for r in rows], ["Q1", "Q2"])
        self.assertIsInstance(rows[0]["src"], bytes)

    def test_table_spec(self):
        self.assertEqual([c[0] for c in TABLE_SPEC], ["accession", "src"])
        self.assertEqual(TABLE_SPEC[0][2], "PRIMARY KEY")


class TestIterationStore(unittest.TestCase):

    def test_add_and_get(self):
        with IterationStore(":memory:") as store:
            self.assertEqual(store.add(_iterations()), 2)
            self.assertEqual(len(store), 2)
            self.assertEqual(store.accessions(), ["Q1", "Q2"])
            hits = store.get("Q1").hits(evalue=1)
            self.assertEqual([h.accession for h in hits], ["S1"])
            self.assertIsNone(store.get("Q3"))

    def test_readding_replaces(self):
        with IterationStore(":memory:") as store:
            store.add(_iterations())
            store.add(_iterations())
            self.assertEqual(len(store), 2)

    def test_persists_to_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "blast.sqlite")
            with IterationStore(path) as store:
                store.add(_iterations())
            with IterationStore(path) as store:
                self.assertEqual([it.accession for it in store], ["Q1", "Q2"])


if __name__ == "__main__":
    unittest.main()
