#!/usr/bin/env python3
"""
Search a FASTA file against a BLAST database, in batches run in parallel.
Each batch writes its own XML report, <output stem>-<n><output extension>.

Usage: python blast-fasta.py <query_fasta> <db> <output.xml> [--program blastp]
"""

import argparse
import logging
import os
import sys

from blastxml.defaults import Defaults
from blastxml.tools import ExternalToolError, blast_file


def main():
    parser = argparse.ArgumentParser(
        description="Run a batched BLAST+ search with XML output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python blast-fasta.py proteins.faa swissprot results.xml
  python blast-fasta.py reads.fna nt results.xml --program blastn --evalue 1e-10
  python blast-fasta.py proteins.faa swissprot results.xml --batch-size 500 --workers 4
        """
    )
    parser.add_argument("query_fasta", help="Path to query FASTA file")
    parser.add_argument("db", help="BLAST database path")
    parser.add_argument("output", help="Output report path; batches are numbered from it")
    parser.add_argument("--program", default="blastp", help="BLAST+ search program (default: blastp)")
    parser.add_argument("--evalue", type=float, default=None, help="E-value threshold (default: 10)")
    parser.add_argument("--max-target-seqs", type=int, default=None, help="Hits kept per query (default: 3)")
    parser.add_argument("--ungapped", action="store_true", help="Ungapped alignments only")
    parser.add_argument("--batch-size", type=int, default=Defaults.batch_size(),
                        help=f"Query records per BLAST process (default: {Defaults.batch_size()})")
    parser.add_argument("--workers", type=int, default=None, help="Concurrent BLAST processes (default: CPU count)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s  %(levelname)-7s  %(name)s:  %(message)s")

    if not os.path.exists(args.query_fasta):
        print(f"Error: Query FASTA file '{args.query_fasta}' not found")
        sys.exit(1)

    params = {
        "evalue": args.evalue,
        "max_target_seqs": args.max_target_seqs,
        "ungapped": args.ungapped,
    }

    try:
        outputs = blast_file(args.query_fasta, args.program, args.db, args.output,
                             params=params, batch_size=args.batch_size, workers=args.workers)
    except ExternalToolError as e:
        print(f"Error running {args.program}: {e}")
        sys.exit(1)

    for path in outputs:
        print(path)


if __name__ == "__main__":
    main()
