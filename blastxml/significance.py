from typing import Iterable, List, Optional

from .records import Hit


class InvalidArgumentError(ValueError):
    pass


def check_criteria(evalue: Optional[float], bit_score: Optional[float]) -> None:
    if evalue is not None and bit_score is not None:
        raise InvalidArgumentError("Supply one of bit_score or evalue only.")


def is_significant(hit: Hit, evalue: Optional[float] = None, bit_score: Optional[float] = None) -> bool:
    """
    True when any HSP of the hit has an e-value at or below evalue, or a
    bit score at or above bit_score. With no threshold every hit qualifies.
    """
    check_criteria(evalue, bit_score)
    if evalue is not None:
        return any(hsp.evalue is not None and hsp.evalue <= evalue for hsp in hit.hsps)
    if bit_score is not None:
        return any(hsp.bit_score is not None and hsp.bit_score >= bit_score for hsp in hit.hsps)
    return True


def filter_hits(hits: Iterable[Hit], evalue: Optional[float] = None, bit_score: Optional[float] = None) -> List[Hit]:
    check_criteria(evalue, bit_score)
    return [hit for hit in hits if is_significant(hit, evalue=evalue, bit_score=bit_score)]
