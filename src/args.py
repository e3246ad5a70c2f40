"""Argument parsing functionality for dnaplan."""

import argparse
from constants import Constants


def _add_common(parser):
    """Options shared by every subcommand."""
    parser.add_argument("-c", "--catalog",
                        dest="CATALOG",
                        help="Path to module catalog file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="dnaplan",
        description=(
            "dnaplan - DNA module compatibility checker and installation planner"
        ),
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", required=True)

    plan_parser = subparsers.add_parser("plan", help="Check a module selection and print its install order")
    _add_common(plan_parser)
    plan_parser.add_argument("-m", "--module",
                             dest="MODULES",
                             help="Module id to install (repeatable). Defaults to the catalog request.",
                             action="append", type=str,
                             default=[])
    plan_parser.add_argument("-F", "--framework",
                             dest="FRAMEWORK",
                             help="Target framework, i.e: nextjs, flutter, react-native",
                             action="store", type=str.lower,
                             choices=Constants.SUPPORTED_FRAMEWORKS)
    plan_parser.add_argument("--exclude",
                             dest="EXCLUDE",
                             help="Module id to leave out of the request (repeatable)",
                             action="append", type=str,
                             default=[])
    plan_parser.add_argument("-o", "--output",
                             dest="OUTPUT",
                             help="Path to output file (JSON or CSV)",
                             action="store",
                             type=str)
    plan_parser.add_argument("-f", "--format",
                             dest="OUTPUT_FORMAT",
                             help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                             action="store",
                             type=str.lower,
                             choices=['json', 'csv'])
    plan_parser.add_argument("--error-on-warnings",
                             dest="ERROR_ON_WARNINGS",
                             help="Exit with a non-zero status code if warnings are present.",
                             action="store_true")
    plan_parser.add_argument("--warnings-as-errors",
                             dest="WARNINGS_AS_ERRORS",
                             help="Reject the plan when any warning is found.",
                             action="store_true")

    list_parser = subparsers.add_parser("list", help="List catalog modules")
    _add_common(list_parser)
    list_parser.add_argument("-F", "--framework",
                             dest="FRAMEWORK",
                             help="Only modules supporting this framework",
                             action="store", type=str.lower,
                             choices=Constants.SUPPORTED_FRAMEWORKS)
    list_parser.add_argument("--category",
                             dest="CATEGORY",
                             help="Only modules in this category",
                             action="store", type=str)
    list_parser.add_argument("-s", "--search",
                             dest="SEARCH",
                             help="Case-insensitive text search over id, name, description and keywords",
                             action="store", type=str)

    tree_parser = subparsers.add_parser("tree", help="Show the dependency tree of a module")
    _add_common(tree_parser)
    tree_parser.add_argument("MODULE_ID", help="Module id", type=str)

    alt_parser = subparsers.add_parser("alternatives", help="Suggest non-conflicting modules of the same category")
    _add_common(alt_parser)
    alt_parser.add_argument("MODULE_ID", help="Module id to replace", type=str)
    alt_parser.add_argument("-m", "--module",
                            dest="MODULES",
                            help="Other selected module ids (repeatable)",
                            action="append", type=str,
                            default=[])
    alt_parser.add_argument("-F", "--framework",
                            dest="FRAMEWORK",
                            help="Only alternatives supporting this framework",
                            action="store", type=str.lower,
                            choices=Constants.SUPPORTED_FRAMEWORKS)

    return parser.parse_args(argv)
