"""
ATHENA CLI Application

Command-line interface for building and querying the embedding model.
"""

import argparse
import sys
from typing import List, Optional

from athena import __version__
from athena.core.config import get_config
from athena.core.exceptions import AthenaError
from athena.core.logger import get_logger
from athena.model import EmbeddingModel

logger = get_logger(__name__)

COLUMN_WIDTH = 40


def build_model(learn_vocab: bool) -> int:
    """Build the model and save it."""
    model = EmbeddingModel()

    print(f"🔨 Building model (learn vocabulary: {learn_vocab})")
    report = model.build(learn_vocab=learn_vocab)

    for warning in report.warnings:
        print(f"⚠️  {warning}")

    if not len(model):
        print("❌ Nothing to save: vocabulary is empty")
        return 1

    path = model.save()
    print(f"✅ Saved {report.vocabulary_size} entries to {path}")
    return 0


def show_nearest(phrase: str, count: Optional[int]) -> int:
    """Print location and context neighbours side by side."""
    model = EmbeddingModel()
    model.build(learn_vocab=False)

    if not len(model):
        print("❌ No model loaded")
        return 1

    neighbours = model.nearest(phrase, count, use_context=False)
    context = model.nearest(phrase, count, use_context=True)

    print("Neighbours".ljust(COLUMN_WIDTH) + "Context")
    print("-" * 19 + " " * (COLUMN_WIDTH - 19) + "-" * 19)
    for near, ctx in zip(neighbours, context):
        left = f"{near.score:0.2f}  {near.word}"
        print(left.ljust(COLUMN_WIDTH) + f"{ctx.score:0.2f}  {ctx.word}")
    print()
    return 0


def find_text(phrase: str) -> int:
    """Print corpus lines containing phrase."""
    model = EmbeddingModel()
    matches = 0
    for line in model.find_text(phrase):
        print(line)
        matches += 1
    print()
    logger.info(f"Found {matches} corpus lines containing {phrase!r}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="ATHENA - word embedding explorer")
    parser.add_argument("--version", action="version", version=f"ATHENA {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Build command
    build_parser = subparsers.add_parser("build", help="Build the model and save it")
    build_parser.add_argument("--no-learn", action="store_true",
                              help="Reuse the saved vocabulary instead of rescanning the corpus")

    # Nearest command
    nearest_parser = subparsers.add_parser("nearest", help="Show nearest neighbours of a phrase")
    nearest_parser.add_argument("phrase", help="Query phrase; suffix a word with ':' to subtract it")
    nearest_parser.add_argument("-k", "--count", type=int, default=get_config().NEAREST_COUNT,
                                help="Number of neighbours")

    # Find command
    find_parser = subparsers.add_parser("find", help="Search the corpus for a phrase")
    find_parser.add_argument("phrase", help="Text to look for")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "build":
            return build_model(learn_vocab=not args.no_learn)
        elif args.command == "nearest":
            return show_nearest(args.phrase, args.count)
        elif args.command == "find":
            return find_text(args.phrase)
    except KeyboardInterrupt:
        print("\n❌ Interrupted by user")
        return 130
    except (AthenaError, OSError, ValueError) as e:
        logger.error(f"Command failed: {e}")
        print(f"❌ Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
