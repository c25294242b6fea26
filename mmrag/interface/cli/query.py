"""CLI query handler: ask one question against a user's documents."""

import argparse
import dataclasses
import json
import sys

from mmrag.application.dto.query_dto import QueryRequest
from mmrag.config.composition import build_query_use_case
from mmrag.config.logging_config import setup_logging
from mmrag.config.settings import AppSettings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mmrag-query", description=__doc__)
    parser.add_argument("--question", "-q", required=True)
    parser.add_argument("--user-id", "-u", required=True, help="Owner of the documents to search")
    parser.add_argument("--threshold", type=float, help="Similarity threshold (0-1)")
    parser.add_argument("--max-results", type=int, help="Maximum fragments to retrieve")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON response")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    settings = AppSettings()
    overrides: dict[str, object] = {}
    if args.threshold is not None:
        overrides["match_threshold"] = args.threshold
    if args.max_results is not None:
        overrides["match_count"] = args.max_results
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    setup_logging(settings.log_level)

    uc = build_query_use_case(settings)
    result = uc.execute(QueryRequest(question=args.question, user_id=args.user_id))

    if result.ok and result.value is not None:
        if args.json:
            print(json.dumps(result.value.to_dict(), indent=2))
            return 0
        print("\n" + "=" * 80)
        print("ANSWER:")
        print("=" * 80)
        print(result.value.answer)
        if result.value.citations:
            print("\n" + "=" * 80)
            print("CITATIONS:")
            print("=" * 80)
            for i, (c, r) in enumerate(
                zip(result.value.citations, result.value.retrieved_chunks, strict=True), 1
            ):
                print(f"[{i}] {c.source} ({c.type}, {c.reference}) score={r.score:.3f}")
        return 0

    err = result.error
    err_name = type(err).__name__
    err_msg = getattr(err, "message", "") or str(err)
    print(f"\n[ERROR] {err_name}: {err_msg}", file=sys.stderr)
    return 2 if err_name == "InvalidRequest" else 1


if __name__ == "__main__":
    sys.exit(main())
