import argparse
import sys
from functools import reduce

from tlox.lox import Lox
from tlox.utilities.configuration import Debug


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="tlox",
        description="A tree-walking interpreter for the Lox scripting language",
        allow_abbrev=False
    )
    parser.add_argument(
        "-c",
        metavar="STRING",
        type=str,
        required=False,
        help="source string to execute"
    )
    parser.add_argument(
        "source",
        metavar="FILE",
        nargs="?",
        type=str,
        default=None,
        help="the .lox file to interpret"
    )
    parser.add_argument(
        "--dbg",
        choices=tuple(option.name for option in Debug),
        default=list(),
        action="append",
        help="tlox debugging options, multiple --dbg arguments can be passed"
    )
    args = parser.parse_args()

    lox = Lox(reduce(lambda a, b: a | Debug[b], args.dbg, Debug.BACKTRACE))  # Collapse all flags passed.
    if args.c:
        sys.exit(lox.run(args.c).exit_code)
    elif args.source:
        sys.exit(lox.run_file(args.source).exit_code)
    else:
        lox.run_interactive()


if __name__ == "__main__":
    main()
