"""
main.py — Single entry point.

Analyses one or more garment photos from disk and prints one JSON record per
photo to stdout:

  python main.py shirt.jpg sneaker.png
  python main.py --vufs shirt.jpg

Collaborators are built from config (.env), see collaborators/manager.py.
A photo whose label detection fails is reported on stderr and the exit
status is non-zero; the remaining photos are still analysed.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=logging.INFO,
    handlers=[logging.StreamHandler(sys.stderr)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

import inference
from collaborators.manager import get_collaborators

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Infer garment attributes from photos.")
    parser.add_argument("images", nargs="+", type=Path, help="image files to analyse")
    parser.add_argument("--vufs", action="store_true", help="print catalog (VUFS) properties instead")
    parser.add_argument("--timeout", type=float, default=None,
                        help="per-collaborator timeout in seconds (default: COLLABORATOR_TIMEOUT_S)")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    try:
        collaborators = get_collaborators()
    except (RuntimeError, ValueError) as exc:
        logger.critical("FATAL: %s", exc)
        return 2

    failures = 0
    for path in args.images:
        try:
            image_bytes = path.read_bytes()
        except OSError as exc:
            logger.error("Cannot read %s: %s", path, exc)
            failures += 1
            continue

        try:
            if args.vufs:
                record = await inference.extract_vufs_properties(
                    image_bytes, path.name, collaborators, timeout_s=args.timeout,
                )
            else:
                record = await inference.infer_attributes(
                    image_bytes, path.name, collaborators, timeout_s=args.timeout,
                )
        except Exception as exc:
            logger.error("Analysis of %s failed: %s", path, exc)
            failures += 1
            continue

        print(json.dumps({"file": str(path), **record.to_dict()}, ensure_ascii=False))

    return 1 if failures else 0


def main() -> None:
    args = _parse_args(sys.argv[1:])
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
