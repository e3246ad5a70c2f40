"""dnaplan - DNA module compatibility checker and installation planner

    Returns:
        int: Exit code
"""
import csv
import json
import logging
import os
import sys

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import resolve_catalog_path, resolve_run_settings
from errors import CatalogError, DuplicateModuleError
from registry.catalog import load_catalog, register_catalog
from registry.module_registry import ModuleRegistry
from resolution.compatibility import suggest_alternatives
from resolution.models import Plan, PlanOptions
from resolution.planner import plan

logger = logging.getLogger(__name__)


def _setup_logging(args):
    """Configure logging based on CLI arguments."""
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    level_name = str(getattr(args, "LOG_LEVEL", "INFO")).upper()
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def load_registry(args):
    """Load the catalog named by the CLI/environment into a fresh registry.

    Returns:
        tuple: (ModuleRegistry, Catalog)
    """
    path = resolve_catalog_path(args)
    if not path:
        logging.error("No catalog file given and none of %s found, aborting",
                      ", ".join(Constants.CATALOG_FILES))
        sys.exit(ExitCodes.FILE_ERROR.value)
    try:
        catalog = load_catalog(path)
        registry = ModuleRegistry()
        register_catalog(registry, catalog)
    except (CatalogError, DuplicateModuleError) as e:
        logging.error("%s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return registry, catalog


def export_json(result, path):
    """Exports a plan or rejection to a JSON file.

    Args:
        result (Plan | Rejection): Planning outcome.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(result.to_dict(), file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_csv(result, registry, path):
    """Exports a plan (one row per module) or rejection (one row per problem) to CSV.

    Args:
        result (Plan | Rejection): Planning outcome.
        registry (ModuleRegistry): Registry used for version/category columns.
        path (str): File path to export the CSV.
    """
    if isinstance(result, Plan):
        requested = set(result.requested_ids)
        warned = {}
        for warning in result.warnings:
            for module_id in warning.involved_module_ids:
                warned.setdefault(module_id, []).append(warning.code.value)
        rows = [["Order", "Module ID", "Version", "Category", "Requested", "Warnings"]]
        for index, module_id in enumerate(result.module_ids, start=1):
            descriptor = registry.get(module_id)
            rows.append([
                index,
                module_id,
                descriptor.version if descriptor else "",
                descriptor.category if descriptor else "",
                module_id in requested,
                ";".join(warned.get(module_id, [])),
            ])
    else:
        rows = [["Code", "Severity", "Message", "Involved Modules"]]
        for problem in list(result.problems) + list(result.warnings):
            rows.append([
                problem.code.value,
                problem.severity.value,
                problem.message,
                ";".join(problem.involved_module_ids),
            ])
    try:
        with open(path, "w", newline="", encoding="utf-8") as file:
            writer = csv.writer(file, dialect="excel")
            writer.writerows(rows)
        logging.info("CSV file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _print(args, text=""):
    if not getattr(args, "QUIET", False):
        print(text)


def print_result(args, result, registry):
    """Human readable summary on stdout."""
    if isinstance(result, Plan):
        _print(args, f"Installation plan for {result.framework} ({len(result.module_ids)} modules):")
        implicit = set(result.implicit_ids)
        for index, module_id in enumerate(result.module_ids, start=1):
            descriptor = registry.get(module_id)
            marker = " (dependency)" if module_id in implicit else ""
            _print(args, f"  {index:>2}. {module_id}@{descriptor.version}{marker}")
        for warning in result.warnings:
            _print(args, f"  warning [{warning.code.value}] {warning.message}")
        _print(args, f"  complexity: {result.complexity}")
    else:
        _print(args, f"Request rejected ({len(result.problems)} problems):")
        for problem in result.problems:
            _print(args, f"  [{problem.code.value}] {problem.message}")
        for warning in result.warnings:
            _print(args, f"  warning [{warning.code.value}] {warning.message}")


def _output_format(args):
    """Output format from --format, else inferred from --output, else json."""
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT.lower()
    if args.OUTPUT.lower().endswith(".csv"):
        return "csv"
    return "json"


def run_plan(args):
    """Run the ``plan`` subcommand; returns the exit code."""
    registry, catalog = load_registry(args)
    settings = resolve_run_settings(args, catalog)
    if not settings.framework:
        logging.error("No target framework given (use --framework or the catalog request), aborting")
        return ExitCodes.FILE_ERROR.value
    if not settings.modules:
        logging.warning("No modules requested.")

    options = PlanOptions(exclude=frozenset(settings.exclude), warnings_as_errors=settings.warnings_as_errors)
    result = plan(settings.modules, settings.framework, registry, options)
    print_result(args, result, registry)

    if getattr(args, "OUTPUT", None):
        if _output_format(args) == "csv":
            export_csv(result, registry, args.OUTPUT)
        else:
            export_json(result, args.OUTPUT)

    if not result.ok:
        logging.error("Installation plan rejected.")
        return ExitCodes.PLAN_REJECTED.value
    if result.warnings:
        logging.warning("Plan has %d warning(s).", len(result.warnings))
        if settings.error_on_warnings:
            logging.error("Warnings present, exiting with non-zero status code.")
            return ExitCodes.EXIT_WARNINGS.value
    return ExitCodes.SUCCESS.value


def run_list(args):
    """Run the ``list`` subcommand."""
    registry, _ = load_registry(args)
    descriptors = registry.search(args.SEARCH) if getattr(args, "SEARCH", None) else registry.all_descriptors()
    if getattr(args, "FRAMEWORK", None):
        supported = {d.id for d in registry.modules_for_framework(args.FRAMEWORK)}
        descriptors = [d for d in descriptors if d.id in supported]
    if getattr(args, "CATEGORY", None):
        descriptors = [d for d in descriptors if d.category.lower() == args.CATEGORY.lower()]
    for d in descriptors:
        flags = []
        if d.deprecated:
            flags.append("deprecated")
        if d.experimental:
            flags.append("experimental")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        _print(args, f"{d.id}@{d.version}  {d.category or '-'}  {d.display_name}{suffix}")
    return ExitCodes.SUCCESS.value


def run_tree(args):
    """Run the ``tree`` subcommand."""
    registry, _ = load_registry(args)
    if not registry.has(args.MODULE_ID):
        logging.error("Module %s not found in catalog.", args.MODULE_ID)
        return ExitCodes.FILE_ERROR.value
    tree = registry.dependency_tree(args.MODULE_ID)

    def _walk(module_id, depth, trail):
        known = "" if registry.has(module_id) else " (missing)"
        loop = " (cycle)" if module_id in trail else ""
        _print(args, f"{'  ' * depth}{module_id}{known}{loop}")
        if loop:
            return
        for dep in tree.get(module_id, []):
            _walk(dep, depth + 1, trail | {module_id})

    _walk(args.MODULE_ID, 0, frozenset())
    return ExitCodes.SUCCESS.value


def run_alternatives(args):
    """Run the ``alternatives`` subcommand."""
    registry, _ = load_registry(args)
    if not registry.has(args.MODULE_ID):
        logging.error("Module %s not found in catalog.", args.MODULE_ID)
        return ExitCodes.FILE_ERROR.value
    alternatives = suggest_alternatives(args.MODULE_ID, list(args.MODULES), registry, args.FRAMEWORK)
    if not alternatives:
        logging.warning("No alternative modules found for %s.", args.MODULE_ID)
    for module_id in alternatives:
        _print(args, module_id)
    return ExitCodes.SUCCESS.value


ACTIONS = {
    "plan": run_plan,
    "list": run_list,
    "tree": run_tree,
    "alternatives": run_alternatives,
}


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    code = ACTIONS[args.action](args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action=args.action, outcome=str(code))
        )
    sys.exit(code)


if __name__ == "__main__":
    main()
