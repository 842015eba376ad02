import argparse
import logging
import sys

from config import STRATEGIES, get_settings
from errors import SequenceDistanceError
from kendall_tau import KendallTauDistance, KendallTauSequenceDistance

logger = logging.getLogger("ktsd.cli")


def tokenize(text, chars=False, sep=None):
    if chars:
        return text
    return text.split(sep)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="ktsd", description="Kendall tau sequence distance: the minimum number of adjacent swaps turning sequence A into sequence B")
    parser.add_argument("a", type=str, help="the first sequence, as whitespace separated tokens")
    parser.add_argument("b", type=str, help="the second sequence, as whitespace separated tokens")
    parser.add_argument("-s", "--strategy", choices=STRATEGIES, default=None, help="how elements are relabeled (default: $KTSD_STRATEGY or hash)")
    split = parser.add_mutually_exclusive_group()
    split.add_argument("-c", "--chars", action="store_true", help="compare the sequences character by character")
    split.add_argument("--split", type=str, default=None, metavar="SEP", help="separator between tokens (default: whitespace)")
    parser.add_argument("-n", "--normalized", action="store_true", help="divide the distance by n(n-1)/2, the largest distance between permutations of length n; with repeated tokens the result stays below 1")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debugging output to stderr")

    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if args.verbose else settings.log_level)

    a = tokenize(args.a, args.chars, args.split)
    b = tokenize(args.b, args.chars, args.split)
    logger.debug(f"Comparing {len(a)} and {len(b)} elements.")

    measurer = KendallTauSequenceDistance(args.strategy or settings.strategy)
    try:
        d = measurer.distance(a, b)
    except SequenceDistanceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.normalized:
        bound = KendallTauDistance().max(len(a))
        print(d / bound if bound else 0.0)
    else:
        print(d)
    return 0


if __name__ == "__main__":
    sys.exit(main())
