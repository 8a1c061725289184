import argparse
import logging
import sys

from scrud_generator.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_success,
    log_progress,
    log_section
)
from scrud_generator.config_validation import load_config
from scrud_generator.exceptions import ConfigurationError
from scrud_generator.orchestrator import Orchestrator
from scrud_generator.reporting import save_report

# Note: Colored logging will be configured after parsing args
logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scrud-generator",
        description="Generate DTOs, mappers, repositories, services and controllers from model metadata.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "-m",
        "--models",
        nargs="+",
        help="Model metadata files or directories. Overrides config file setting.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Root directory of the generated packages. Overrides config file setting.",
    )
    parser.add_argument(
        "-r",
        "--report",
        dest="report_path",
        help="Save the run report to this path (.yaml/.yml, otherwise Markdown).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)

    global logger
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    try:
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        logger.debug(f"Effective configuration loaded: {config}")

        report = Orchestrator(config).run()

        if config.report_path:
            save_report(report, config.report_path)

    except ConfigurationError as e:
        logger.error(f"Configuration Error: {e}", exc_info=args.verbose)
        return 1
    except Exception as e:
        # Catch any other unexpected exceptions
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        return 1

    if report.has_failures:
        logger.error(f"{len(report.failed_models)} model(s) failed, see the messages above")
        return 1

    log_section(logger, "Completion")
    log_success(logger, f"Generated code is under {config.output_dir}")
    return 0


# --- Script Entry Point ---
if __name__ == "__main__":
    sys.exit(main())
