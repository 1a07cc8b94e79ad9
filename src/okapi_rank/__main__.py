"""
Rank documents given on the command line.

Run with:
    python -m okapi_rank "cat" --doc d1="cat dog" --doc d2="cat cat cat" --top-n 2
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from okapi_rank.bm25 import IDF_VARIANTS, rank_documents
from okapi_rank.config import DEFAULT_TOP_N, Config
from okapi_rank.errors import RankingError
from okapi_rank.tokenizer import JiebaTokenizer, tokenize

TOKENIZERS = {
    "jieba": JiebaTokenizer,
    "regex": lambda: tokenize,
}


def _parse_doc(value: str) -> tuple[str, str]:
    """Parse an ID=TEXT argument."""
    doc_id, sep, text = value.partition("=")
    if not sep or not doc_id:
        raise argparse.ArgumentTypeError(f"Expected ID=TEXT, got {value!r}")
    return doc_id, text


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rank documents against a query with BM25.")
    parser.add_argument("query", help="Query text.")
    parser.add_argument(
        "--doc", dest="documents", action="append", type=_parse_doc, default=[], metavar="ID=TEXT",
        help="Document to rank (repeatable).",
    )
    parser.add_argument("--top-n", type=int, default=DEFAULT_TOP_N, help=f"Number of results (default: {DEFAULT_TOP_N}).")
    parser.add_argument("--k1", type=float, default=None, help=f"TF saturation (default: {Config.k1}).")
    parser.add_argument("--b", type=float, default=None, help=f"Length normalization (default: {Config.public_b}).")
    parser.add_argument("--idf", choices=sorted(IDF_VARIANTS), default=None, help=f"IDF variant (default: {Config.idf_variant}).")
    parser.add_argument("--tokenizer", choices=sorted(TOKENIZERS), default="jieba", help="Tokenizer (default: jieba).")
    parser.add_argument("--workers", type=int, default=None, help="Thread pool size.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s: %(name)s: %(message)s")

    try:
        ranked = rank_documents(
            args.query,
            args.documents,
            top_n=args.top_n,
            k1=args.k1,
            b=args.b,
            idf_variant=args.idf,
            tokenizer=TOKENIZERS[args.tokenizer](),
            num_workers=args.workers,
        )
    except RankingError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(ranked, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
