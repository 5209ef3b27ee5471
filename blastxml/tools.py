"""
Thin wrappers around the NCBI BLAST+ executables.

- blastn/blastp/blastx/... searches, batched and run in parallel
- makeblastdb database creation
- blastdbcmd sequence retrieval

Searches default to XML output (-outfmt 5) so results can be read back with
blastxml.report.iteration_seq.
"""

import io
import itertools
import logging
import os
import subprocess
import tempfile
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Union

from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

from .defaults import Defaults

logger = logging.getLogger(__name__)

OID_NOT_FOUND = "OID not found"

Params = Dict[str, Union[str, int, float, bool, None]]


class ExternalToolError(RuntimeError):
    """Raised when a BLAST+ executable cannot be started or exits non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: Optional[str] = None) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    logger.info("Running: %s", " ".join(cmd))
    try:
        return subprocess.run(cmd, capture_output=True, text=True)
    except OSError as exc:
        logger.error("Could not start %s: %s", cmd[0], exc)
        raise ExternalToolError(f"Exception: {exc}") from exc


def _fail(label: str, result: subprocess.CompletedProcess) -> None:
    stderr = (result.stderr or "").strip()
    logger.error("%s exited with code %d: %s", label, result.returncode, stderr)
    if stderr:
        message = f"{label} error: {stderr}"
    else:
        message = f"{label} exited with code {result.returncode}"
    raise ExternalToolError(message, returncode=result.returncode, stderr=result.stderr)


def _flag(key: str) -> str:
    return key if key.startswith("-") else "-" + key


def blast_params(params: Optional[Params], in_file: str, out_file: str, db: str) -> List[str]:
    """
    Builds BLAST command line arguments: defaults, then query/out/db, then
    caller overrides. Keys may omit the leading dash. True gives a bare
    flag (e.g. {"ungapped": True}), False or None drops the flag.
    """
    merged: Params = dict(Defaults.blast_params())
    merged.update({"-query": in_file, "-out": out_file, "-db": db})
    for key, value in (params or {}).items():
        merged[_flag(key)] = value

    args: List[str] = []
    for flag, value in merged.items():
        if value is None or value is False:
            continue
        if value is True:
            args.append(flag)
        else:
            args.extend([flag, str(value)])
    return args


def run_blast(program: str, db: str, in_file: str, out_file: str, params: Optional[Params] = None) -> str:
    """Runs one BLAST search and returns out_file."""
    cmd = [Defaults.executable(program)] + blast_params(params, str(in_file), str(out_file), str(db))
    result = _run(cmd)
    if result.returncode != 0:
        _fail("Blast", result)
    return out_file


def _write_temp_fasta(records: Iterable[SeqRecord], prefix: str) -> str:
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=".fasta")
    with os.fdopen(fd, "w") as f:
        SeqIO.write(records, f, "fasta")
    return path


def _blast_partition(records: List[SeqRecord], program: str, db: str, out_file: str, params: Optional[Params]) -> str:
    in_file = _write_temp_fasta(records, "seq-")
    try:
        return run_blast(program, os.path.abspath(db), in_file, os.path.abspath(out_file), params)
    finally:
        os.remove(in_file)


def partition_outfile(outfile: str, n: int) -> str:
    root, ext = os.path.splitext(str(outfile))
    return f"{root}-{n}{ext}"


def _batches(records: Iterable[SeqRecord], size: int) -> Iterator[List[SeqRecord]]:
    it = iter(records)
    while True:
        batch = list(itertools.islice(it, size))
        if not batch:
            return
        yield batch


def blast(
    records: Iterable[SeqRecord],
    program: str,
    db: str,
    outfile: str,
    params: Optional[Params] = None,
    batch_size: Optional[int] = None,
    workers: Optional[int] = None,
) -> List[str]:
    """
    Searches sequence records against a BLAST database, batch_size records
    (default 10,000) per BLAST process, processes running in parallel.

    Output of batch n goes to <outfile stem>-<n><outfile extension>;
    returns the output paths in batch order.

    At most workers + 1 batches are read ahead of the finished ones. The
    first failing batch cancels every batch not yet started and its error
    is raised.
    """
    batch_size = batch_size or Defaults.batch_size()
    workers = workers or Defaults.workers()
    window = workers + 1

    outputs: List[str] = []
    pending: Deque[Future] = deque()
    with ThreadPoolExecutor(max_workers=workers) as pool:
        try:
            for n, batch in enumerate(_batches(records, batch_size), start=1):
                pending.append(pool.submit(_blast_partition, batch, program, db, partition_outfile(outfile, n), params))
                if len(pending) >= window:
                    outputs.append(pending.popleft().result())
            while pending:
                outputs.append(pending.popleft().result())
        except BaseException:
            for f in pending:
                f.cancel()
            raise

    logger.info("%s finished %d batches against %s", program, len(outputs), db)
    return outputs


def blast_file(
    path: str,
    program: str,
    db: str,
    outfile: str,
    params: Optional[Params] = None,
    batch_size: Optional[int] = None,
    workers: Optional[int] = None,
) -> List[str]:
    """Same as blast(), reading the query records from a FASTA file."""
    with open(path, "r") as handle:
        return blast(SeqIO.parse(handle, "fasta"), program, db, outfile,
                     params=params, batch_size=batch_size, workers=workers)


def create_blastdb_file(path: str, dbtype: Optional[str] = None) -> str:
    """Builds a BLAST database from a FASTA file; returns the database path."""
    cmd = [Defaults.executable("makeblastdb"), "-in", str(path), "-dbtype", dbtype or Defaults.dbtype(), "-parse_seqids"]
    result = _run(cmd)
    if result.returncode != 0:
        _fail("makeblastdb", result)
    return path


def create_blastdb(records: Iterable[SeqRecord], db_name: str, dbtype: Optional[str] = None) -> str:
    """Writes records as FASTA to db_name and builds a BLAST database on it."""
    SeqIO.write(records, str(db_name), "fasta")
    return create_blastdb_file(db_name, dbtype)


def _blastdbcmd(accessions: Iterable[str], db: str, dbtype: Optional[str], outfile: Optional[str] = None) -> subprocess.CompletedProcess:
    accessions = [acc.strip() for acc in accessions]
    batch_file = None
    if len(accessions) > Defaults.max_inline_entries():
        fd, batch_file = tempfile.mkstemp(prefix="bdbc-")
        with os.fdopen(fd, "w") as f:
            for acc in accessions:
                f.write(acc + "\n")
        entries = ["-entry_batch", batch_file]
    else:
        entries = ["-entry", ",".join(accessions)]

    cmd = [Defaults.executable("blastdbcmd"), "-db", str(db), "-dbtype", dbtype or Defaults.dbtype()] + entries
    if outfile:
        cmd += ["-out", str(outfile)]

    try:
        result = _run(cmd)
    finally:
        if batch_file:
            os.remove(batch_file)

    if result.returncode != 0:
        if OID_NOT_FOUND in (result.stderr or ""):
            logger.warning("Some accessions were not found in %s", db)
        else:
            _fail("Blast", result)
    return result


def retrieve_sequence(accessions: Iterable[str], db: str, dbtype: Optional[str] = None) -> List[SeqRecord]:
    """
    Retrieves records for the given accessions from a BLAST database built
    with -parse_seqids. Accessions missing from the database are skipped.
    """
    result = _blastdbcmd(accessions, db, dbtype)
    return list(SeqIO.parse(io.StringIO(result.stdout or ""), "fasta"))


def blastdb_to_file(accessions: Iterable[str], db: str, outfile: str, dbtype: Optional[str] = None) -> str:
    """Writes the records for the given accessions to outfile as FASTA; returns outfile."""
    _blastdbcmd(accessions, db, dbtype, outfile=outfile)
    return outfile
