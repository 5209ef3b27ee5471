import dataclasses
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .alignment import render
from .report import HIT_FIELDS, HSP_FIELDS, coerce_field, get_field, hsp_nodes

HSP_FLOAT_FIELDS = ("bit_score", "score", "evalue")
HSP_INT_FIELDS = (
    "query_from",
    "query_to",
    "hit_from",
    "hit_to",
    "query_frame",
    "hit_frame",
    "identity",
    "positive",
    "gaps",
    "align_len",
    "density",
    "pattern_from",
    "pattern_to",
    "num",
)
HSP_TEXT_FIELDS = ("qseq", "hseq", "midline")

HIT_INT_FIELDS = ("length", "number")
HIT_TEXT_FIELDS = ("id", "accession", "definition")


@dataclass(frozen=True)
class Hsp:
    bit_score: Optional[float] = None
    score: Optional[float] = None
    evalue: Optional[float] = None
    query_from: Optional[int] = None
    query_to: Optional[int] = None
    hit_from: Optional[int] = None   # 1-based, hit_from > hit_to on reverse strand
    hit_to: Optional[int] = None
    query_frame: Optional[int] = None
    hit_frame: Optional[int] = None
    identity: Optional[int] = None
    positive: Optional[int] = None
    gaps: Optional[int] = None
    align_len: Optional[int] = None
    density: Optional[int] = None
    pattern_from: Optional[int] = None
    pattern_to: Optional[int] = None
    num: Optional[int] = None
    qseq: Optional[str] = None
    hseq: Optional[str] = None
    midline: Optional[str] = None
    alignment: Optional[str] = None

    @property
    def on_reverse_strand(self) -> bool:
        if self.hit_from is None or self.hit_to is None:
            return False
        return self.hit_to < self.hit_from

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Hit:
    id: Optional[str] = None
    length: Optional[int] = None
    accession: Optional[str] = None
    definition: Optional[str] = None
    number: Optional[int] = None
    query_accession: Optional[str] = None
    hsps: Tuple[Hsp, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d = {f.name: getattr(self, f.name) for f in dataclasses.fields(self) if f.name != "hsps"}
        d["hsps"] = [hsp.to_dict() for hsp in self.hsps]
        return d


def build_hsp(hsp_node: ET.Element) -> Hsp:
    """
    Builds a typed Hsp from an <Hsp> element and attaches its rendered
    alignment. Absent fields stay None; non-numeric text in a numeric field
    raises FieldCoercionError.
    """
    values: Dict[str, Any] = {}
    for name in HSP_FLOAT_FIELDS:
        tag = HSP_FIELDS[name]
        values[name] = coerce_field(tag, get_field(hsp_node, tag), float)
    for name in HSP_INT_FIELDS:
        tag = HSP_FIELDS[name]
        values[name] = coerce_field(tag, get_field(hsp_node, tag), int)
    for name in HSP_TEXT_FIELDS:
        values[name] = get_field(hsp_node, HSP_FIELDS[name])

    hsp = Hsp(**values)
    return dataclasses.replace(hsp, alignment=render(hsp))


def build_hit(hit_node: ET.Element, query_accession: Optional[str] = None) -> Hit:
    values: Dict[str, Any] = {}
    for name in HIT_TEXT_FIELDS:
        values[name] = get_field(hit_node, HIT_FIELDS[name])
    for name in HIT_INT_FIELDS:
        tag = HIT_FIELDS[name]
        values[name] = coerce_field(tag, get_field(hit_node, tag), int)

    hsps = tuple(build_hsp(node) for node in hsp_nodes(hit_node))
    return Hit(query_accession=query_accession, hsps=hsps, **values)
