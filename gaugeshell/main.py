"""Main entry point for the interactive gauge shell."""
import argparse
import logging
import sys
import signal
from typing import Iterable, Optional, Sequence

from gaugeshell.config import DEFAULT_ADDRESS, load_config
from gaugeshell.exporter import PrometheusExporter, SelfMetrics
from gaugeshell.interpreter import Interpreter
from gaugeshell.registry import DynamicRegistry
from gaugeshell.shell import Shell

logger = logging.getLogger(__name__)

JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"logger": "%(name)s", "message": "%(message)s"}'
)
TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(log_level: str, log_format: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=JSON_FORMAT if log_format == "json" else TEXT_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def run_loop(lines: Iterable[str], interpreter: Interpreter):
    """Read-eval loop; returns on end of input or an exit command."""
    for line in lines:
        outcome = interpreter.run_line(line)
        if outcome.error:
            logger.warning(outcome.error)
        if outcome.output is not None:
            print(outcome.output)
        if outcome.exit:
            return


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive shell for Prometheus gauges"
    )
    parser.add_argument(
        "--address",
        "-a",
        metavar="host:port",
        help=f"Prometheus exporter bind address (default {DEFAULT_ADDRESS})"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to optional configuration YAML file"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None):
    """Main function."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
        if args.address is not None:
            config = config.with_address(args.address)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(config.global_.log_level, config.global_.log_format)

    registry = DynamicRegistry()
    self_metrics = None
    if config.exporter.self_metrics:
        self_metrics = SelfMetrics(registry=registry.surface)

    exporter = PrometheusExporter(registry, config.exporter, self_metrics)
    try:
        exporter.start()
    except Exception as e:
        logger.error(f"Failed to start exporter on {config.exporter.address}: {e}")
        sys.exit(1)

    # Setup signal handlers
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)

    shell = Shell(
        prompt=config.shell.prompt,
        history_file=config.shell.history_file,
        history_length=config.shell.history_length
    )
    interpreter = Interpreter(registry, self_metrics)

    try:
        with shell:
            run_loop(shell, interpreter)
    finally:
        exporter.stop()

    sys.exit(0)


if __name__ == "__main__":
    main()
