#!/usr/bin/env python3
"""Run a PR review locally.

Usage: python scripts/run_review.py <pr-url> [requirement-file] [cli|api]
"""
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from src.services.reviewer.schemas import RequirementDocument
from src.services.reviewer.service import review_pull_request


async def main(argv: list[str]) -> int:
    if not argv:
        print(__doc__.strip().splitlines()[-1])
        return 2

    requirement = None
    if len(argv) > 1:
        path = Path(argv[1])
        requirement = RequirementDocument(name=path.name, content=path.read_bytes())

    mode = argv[2] if len(argv) > 2 else None
    result = await review_pull_request(argv[0], requirement, mode)
    print(result.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
