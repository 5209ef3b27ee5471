import logging
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, IO, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

ITERATIONS_TAG = "BlastOutput_iterations"
ITERATION_TAG = "Iteration"
MIDLINE_TAG = "Hsp_midline"

# Record attribute -> direct child tag, per node shape
ITERATION_FIELDS: Dict[str, str] = {
    "number": "Iteration_iter-num",
    "query_id": "Iteration_query-ID",
    "query_def": "Iteration_query-def",
    "query_length": "Iteration_query-len",
    "message": "Iteration_message",
}

HIT_FIELDS: Dict[str, str] = {
    "id": "Hit_id",
    "definition": "Hit_def",
    "accession": "Hit_accession",
    "length": "Hit_len",
    "number": "Hit_num",
}

HSP_FIELDS: Dict[str, str] = {
    "num": "Hsp_num",
    "bit_score": "Hsp_bit-score",
    "score": "Hsp_score",
    "evalue": "Hsp_evalue",
    "query_from": "Hsp_query-from",
    "query_to": "Hsp_query-to",
    "hit_from": "Hsp_hit-from",
    "hit_to": "Hsp_hit-to",
    "pattern_from": "Hsp_pattern-from",
    "pattern_to": "Hsp_pattern-to",
    "query_frame": "Hsp_query-frame",
    "hit_frame": "Hsp_hit-frame",
    "identity": "Hsp_identity",
    "positive": "Hsp_positive",
    "gaps": "Hsp_gaps",
    "align_len": "Hsp_align-len",
    "density": "Hsp_density",
    "qseq": "Hsp_qseq",
    "hseq": "Hsp_hseq",
    "midline": MIDLINE_TAG,
}

Source = Union[str, IO]


class ParseError(ValueError):
    """Raised when a BLAST XML report cannot be turned into records."""


class MalformedInputError(ParseError):
    """Raised when the report is not well-formed XML or lacks its iterations container."""


class FieldCoercionError(ParseError):
    """Raised when a numeric field holds text that is not a number."""

    def __init__(self, field: str, raw: str) -> None:
        super().__init__(f"Field {field} has non-numeric value {raw!r}")
        self.field = field
        self.raw = raw


def get_field(node: Optional[ET.Element], field_name: str) -> Optional[str]:
    """
    Returns the text of the first direct child of node named field_name, or
    None when there is no such child. Text is stripped, except for the HSP
    midline whose leading and trailing spaces are mismatch columns.
    """
    if node is None:
        return None
    child = node.find(field_name)
    if child is None:
        return None
    if field_name == MIDLINE_TAG:
        return child.text if child.text is not None else ""
    return (child.text or "").strip()


def hit_nodes(iteration_node: ET.Element) -> Iterator[ET.Element]:
    return iter(iteration_node.findall("Iteration_hits/Hit"))


def hsp_nodes(hit_node: ET.Element) -> Iterator[ET.Element]:
    return iter(hit_node.findall("Hit_hsps/Hsp"))


def coerce_field(tag: str, raw: Optional[str], convert: Callable[[str], Any]) -> Any:
    """Applies convert to a field's text; None stays None, bad text raises FieldCoercionError."""
    if raw is None:
        return None
    try:
        return convert(raw)
    except ValueError as exc:
        raise FieldCoercionError(tag, raw) from exc


class Iteration:
    """One query's search results, backed by its <Iteration> element."""

    def __init__(self, node: ET.Element) -> None:
        self.node = node

    def _field(self, name: str) -> Optional[str]:
        return get_field(self.node, ITERATION_FIELDS[name])

    @property
    def query_id(self) -> Optional[str]:
        # BLAST's own label, e.g. "Query_1"
        return self._field("query_id")

    @property
    def query_def(self) -> Optional[str]:
        return self._field("query_def")

    @property
    def accession(self) -> Optional[str]:
        query_def = self.query_def
        if not query_def:
            return None
        return query_def.split()[0]

    @property
    def query_length(self) -> Optional[int]:
        return coerce_field(ITERATION_FIELDS["query_length"], self._field("query_length"), int)

    @property
    def number(self) -> Optional[int]:
        return coerce_field(ITERATION_FIELDS["number"], self._field("number"), int)

    @property
    def message(self) -> Optional[str]:
        # "No hits found" and friends
        return self._field("message")

    def hit_nodes(self) -> Iterator[ET.Element]:
        return hit_nodes(self.node)

    def hits(self, evalue: Optional[float] = None, bit_score: Optional[float] = None) -> List["Hit"]:
        # late imports, records and significance depend on this module
        from .records import build_hit
        from .significance import filter_hits, check_criteria

        check_criteria(evalue, bit_score)
        query_accession = self.accession
        built = [build_hit(node, query_accession=query_accession) for node in self.hit_nodes()]
        return filter_hits(built, evalue=evalue, bit_score=bit_score)

    def __repr__(self) -> str:
        return f"Iteration(number={self.number!r}, accession={self.accession!r})"


def iteration_seq(source: Source) -> Iterator[Iteration]:
    """
    Lazily yields an Iteration for every <Iteration> under the top-level
    <BlastOutput_iterations> container of a BLAST XML (outfmt 5) report.

    Args:
        source: path or open file object (binary or text) holding the report

    Each yielded iteration is detached from the document being built, so
    only the iteration in hand is kept in memory. The sequence can only be
    consumed once; re-read the source to start over.

    Raises:
        MalformedInputError: the XML is not well-formed, or the root has no
            BlastOutput_iterations child
    """
    stack: List[ET.Element] = []
    container: Optional[ET.Element] = None
    count = 0

    try:
        for event, elem in ET.iterparse(source, events=("start", "end")):
            if event == "start":
                stack.append(elem)
                if elem.tag == ITERATIONS_TAG and len(stack) == 2:
                    container = elem
                continue

            stack.pop()
            if container is not None and elem.tag == ITERATION_TAG and len(stack) == 2 and stack[-1] is container:
                container.remove(elem)
                count += 1
                yield Iteration(elem)
    except ET.ParseError as exc:
        raise MalformedInputError(f"Report is not well-formed XML: {exc}") from exc

    if container is None:
        raise MalformedInputError(f"Report has no {ITERATIONS_TAG} container")
    logger.debug("Read %d iterations", count)
