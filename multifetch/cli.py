import argparse
import json
import sys
from pathlib import Path
from typing import List
from loguru import logger
from .config import load_settings
from .errors import DispatcherError
from .fetch import fetch_many
from .pages import to_page


def read_urls(args) -> List[str]:
    urls = list(args.urls)
    if args.file:
        for line in Path(args.file).read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                urls.append(line)
    return urls


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="multifetch", description="Fetch many URLs with bounded concurrency.")
    p.add_argument("urls", nargs="*", help="URLs to fetch")
    p.add_argument("-f", "--file", help="file with one URL per line")
    p.add_argument("-c", "--concurrency", type=int, default=None, help="max requests in flight (default 5)")
    p.add_argument("--timeout", type=float, default=None, help="per-request timeout in seconds")
    p.add_argument("--debug", action="store_true", help="log Active/Left progress")
    p.add_argument("--pages", action="store_true", help="print extracted title/text instead of raw bodies")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.debug else "INFO")

    urls = read_urls(args)
    if not urls:
        logger.error("No URLs given")
        return 2

    settings = load_settings(max_concurrent=args.concurrency, timeout=args.timeout, debug=args.debug or None)
    try:
        results = fetch_many(urls, settings=settings)
    except DispatcherError as e:
        logger.error("Fetch aborted: {}", e)
        return 1

    for r in results:
        if args.pages:
            row = to_page(r)
        else:
            row = r.model_dump(exclude={"content"})
            row["text"] = r.text
        sys.stdout.write(json.dumps(row, ensure_ascii=False) + "\n")
    failed = sum(1 for r in results if not r.ok)
    logger.info("Fetched {} URLs, {} failed", len(results), failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
