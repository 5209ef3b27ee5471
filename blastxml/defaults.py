import os
from typing import Dict


class Defaults(object):

    @staticmethod
    def blast_params() -> Dict[str, str]:
        # XML report (outfmt 5), as read by blastxml.report
        return {
            "-evalue": "10",
            "-outfmt": "5",
            "-max_target_seqs": "3",
        }

    @staticmethod
    def batch_size() -> int:
        return 10000

    @staticmethod
    def max_inline_entries() -> int:
        # blastdbcmd -entry list length above which -entry_batch is used
        return 1000

    @staticmethod
    def dbtype() -> str:
        return "prot"

    @staticmethod
    def workers() -> int:
        v = os.getenv("BLASTXML_WORKERS")
        if v:
            return max(1, int(v))
        return os.cpu_count() or 1

    @staticmethod
    def executable(name: str) -> str:
        bin_dir = os.getenv("BLASTXML_BLAST_BIN")
        if bin_dir:
            return os.path.join(os.path.expanduser(bin_dir), name)
        return name
