import unittest

from blastxml.records import Hit, Hsp
from blastxml.significance import InvalidArgumentError, filter_hits, is_significant


def _hit(accession, *hsps):
    return Hit(accession=accession, hsps=tuple(hsps))


class TestIsSignificant(unittest.TestCase):

    def setUp(self):
        self.hit = _hit("S1", Hsp(evalue=50.0, bit_score=12.0), Hsp(evalue=0.001, bit_score=40.0))

    def test_evalue_any_hsp_qualifies(self):
        self.assertTrue(is_significant(self.hit, evalue=1))
        self.assertFalse(is_significant(self.hit, evalue=0.0001))

    def test_evalue_threshold_is_inclusive(self):
        self.assertTrue(is_significant(self.hit, evalue=0.001))

    def test_bit_score(self):
        self.assertTrue(is_significant(self.hit, bit_score=40))
        self.assertFalse(is_significant(self.hit, bit_score=40.5))

    def test_no_criterion(self):
        self.assertTrue(is_significant(self.hit))
        self.assertTrue(is_significant(_hit("S2")))

    def test_hsps_missing_values_never_qualify(self):
        hit = _hit("S3", Hsp())
        self.assertFalse(is_significant(hit, evalue=100))
        self.assertFalse(is_significant(hit, bit_score=0))

    def test_both_criteria_raise(self):
        with self.assertRaises(InvalidArgumentError):
            is_significant(self.hit, evalue=1, bit_score=10)


class TestFilterHits(unittest.TestCase):

    def setUp(self):
        self.hits = [
            _hit("S1", Hsp(evalue=50.0, bit_score=12.0), Hsp(evalue=0.001, bit_score=40.0)),
            _hit("S2", Hsp(evalue=3.0, bit_score=20.0)),
            _hit("S3", Hsp(evalue=1e-30, bit_score=120.0)),
        ]

    def test_filter_by_evalue_keeps_order(self):
        self.assertEqual([h.accession for h in filter_hits(self.hits, evalue=1)], ["S1", "S3"])

    def test_filter_by_bit_score(self):
        self.assertEqual([h.accession for h in filter_hits(self.hits, bit_score=20)], ["S1", "S2", "S3"])
        self.assertEqual([h.accession for h in filter_hits(self.hits, bit_score=100)], ["S3"])

    def test_no_criterion_returns_all(self):
        self.assertEqual(filter_hits(self.hits), self.hits)

    def test_both_criteria_raise_before_filtering(self):
        consumed = []

        def gen():
            for h in self.hits:
                consumed.append(h)
                yield h

        with self.assertRaises(InvalidArgumentError):
            filter_hits(gen(), evalue=1, bit_score=10)
        self.assertEqual(consumed, [])

    def test_invalid_argument_is_value_error(self):
        self.assertTrue(issubclass(InvalidArgumentError, ValueError))


if __name__ == "__main__":
    unittest.main()
