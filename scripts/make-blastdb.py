#!/usr/bin/env python3
import argparse
import logging
import sys

from blastxml.tools import ExternalToolError, create_blastdb_file


def main():
    parser = argparse.ArgumentParser(description="Build a BLAST database from a FASTA file.")
    parser.add_argument("fasta", help="FASTA file; the database is created next to it")
    parser.add_argument("--dbtype", choices=["prot", "nucl"], default="prot", help="Database type (default: prot)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s  %(levelname)-7s  %(name)s:  %(message)s")

    try:
        db = create_blastdb_file(args.fasta, args.dbtype)
    except ExternalToolError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(db)


if __name__ == "__main__":
    main()
