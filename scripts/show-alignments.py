#!/usr/bin/env python3
"""
Print the hits of a BLAST XML report (-outfmt 5) with their alignments.

Usage: python show-alignments.py <report.xml> [--evalue 1e-5 | --bit-score 50]
"""

import argparse
import logging
import sys

from blastxml.report import ParseError, iteration_seq


def print_hit(hit):
    print(f">{hit.accession} {hit.definition or ''}")
    print(f"          Length={hit.length}")
    for hsp in hit.hsps:
        print()
        print(f" Score = {hsp.bit_score} bits ({hsp.score}),  Expect = {hsp.evalue}")
        print(f" Identities = {hsp.identity}/{hsp.align_len},  Positives = {hsp.positive}/{hsp.align_len},  Gaps = {hsp.gaps}/{hsp.align_len}")
        print()
        if hsp.alignment:
            print(hsp.alignment)
    print()


def main():
    parser = argparse.ArgumentParser(description="Show hits and alignments from a BLAST XML report.")
    parser.add_argument("report", help="BLAST XML report (-outfmt 5)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--evalue", type=float, default=None, help="Keep hits with an HSP at or below this e-value")
    group.add_argument("--bit-score", type=float, default=None, help="Keep hits with an HSP at or above this bit score")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s  %(levelname)-7s  %(name)s:  %(message)s")

    try:
        for it in iteration_seq(args.report):
            hits = it.hits(evalue=args.evalue, bit_score=args.bit_score)
            print(f"Query= {it.query_def}")
            print(f"Length={it.query_length}")
            print()
            if not hits:
                print("***** No hits found *****")
                print()
                continue
            for hit in hits:
                print_hit(hit)
    except ParseError as e:
        print(f"Error reading {args.report}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
