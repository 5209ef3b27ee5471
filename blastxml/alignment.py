from typing import List, Optional, Tuple

ALIGNMENT_WIDTH = 52
GAP = "-"

Line = Tuple[str, str, str]  # start coordinate, residues, end coordinate


class ResidueCounter:
    """
    Running residue coordinate of one track of an alignment. Counts down
    when end < start (reverse strand), up otherwise.
    """

    def __init__(self, start: int, end: int) -> None:
        self.value = start
        self.step = -1 if end < start else 1

    def advance(self, chunk: str) -> Tuple[int, int]:
        """
        Consumes one chunk of aligned residues; returns the first and last
        residue coordinates covered by the chunk. Gaps do not count.
        """
        first = self.value
        self.value += self.step * (len(chunk) - chunk.count(GAP))
        return first, self.value - self.step


def _chunks(seq: str, width: int = ALIGNMENT_WIDTH) -> List[str]:
    return [seq[i : i + width] for i in range(0, len(seq), width)]


def _track_lines(seq: str, counter: ResidueCounter) -> List[Line]:
    lines = []
    for chunk in _chunks(seq):
        first, last = counter.advance(chunk)
        lines.append((str(first), chunk, str(last)))
    return lines


def render(hsp) -> Optional[str]:
    """
    Reconstructs BLAST's plain-text pairwise alignment for an HSP: blocks of
    query, midline and hit lines, 52 residues wide, with start and end
    coordinates around each line and a blank line between blocks.

    The query track always counts forward from query_from. The hit track
    counts backwards from hit_from when hit_to < hit_from.

    Returns None when the HSP lacks the sequences or coordinates needed.
    """
    qseq, hseq, midline = hsp.qseq, hsp.hseq, hsp.midline
    if not qseq or not hseq or midline is None:
        return None
    if hsp.query_from is None or hsp.hit_from is None or hsp.hit_to is None:
        return None

    # query direction is never checked against query_to
    query = _track_lines(qseq, ResidueCounter(hsp.query_from, hsp.query_from))
    hit = _track_lines(hseq, ResidueCounter(hsp.hit_from, hsp.hit_to))
    middle = [("", chunk, "") for chunk in _chunks(midline)]

    width = max(len(coord) for line in query + hit for coord in (line[0], line[2]))

    def fmt(line: Line) -> str:
        start, residues, end = line
        return f"{start.ljust(width)}  {residues}  {end}\n"

    blocks = ["".join(fmt(line) for line in lines) for lines in zip(query, middle, hit)]
    return "\n".join(blocks)
