#!/usr/bin/env python3
import argparse
import logging
import sys

from Bio import SeqIO

from blastxml.tools import ExternalToolError, blastdb_to_file, retrieve_sequence


def main():
    parser = argparse.ArgumentParser(description="Fetch FASTA records from a BLAST database by accession.")
    parser.add_argument("db", help="BLAST database built with -parse_seqids")
    parser.add_argument("accessions", nargs="+", help="Accessions to fetch")
    parser.add_argument("--dbtype", choices=["prot", "nucl"], default="prot", help="Database type (default: prot)")
    parser.add_argument("--out", default=None, help="Write FASTA here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s  %(levelname)-7s  %(name)s:  %(message)s")

    try:
        if args.out:
            print(blastdb_to_file(args.accessions, args.db, args.out, args.dbtype))
        else:
            SeqIO.write(retrieve_sequence(args.accessions, args.db, args.dbtype), sys.stdout, "fasta")
    except ExternalToolError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
