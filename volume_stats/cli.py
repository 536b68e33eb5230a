"""
Command line entry point: print the volume usage of every broker in a namespace
"""

import argparse
import json
import logging
import sys

from rich.console import Console

from volume_stats.config import load_config, setup_logging, init_kubernetes_client, DEFAULT_CONFIG_PATH
from volume_stats.errors import ConfigError, QueryError
from volume_stats.reader import VolumeStatsReader
from volume_stats.ui import VolumeStatsUI


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="Report broker persistent volume usage from kubelet stats")
    parser.add_argument("--namespace", "-n", help="Namespace of the broker pods (default: from config)")
    parser.add_argument("--selector", "-l", help="Label selector of the broker pods (default: from config)")
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH,
                        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--format", "-f", choices=["table", "json"], default="table",
                        help="Output format (default: table)")
    parser.add_argument("--output", "-o", help="Also write results to this file (JSON format)")
    parser.add_argument("--workers", "-w", type=int, help="Concurrent node stats requests")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def main(argv=None, console: Console = None) -> int:
    """Main function"""
    args = parse_arguments(argv)
    console = console or Console()
    ui = VolumeStatsUI(console)

    try:
        return _report_volume_stats(args, console, ui)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130


def _report_volume_stats(args, console: Console, ui: VolumeStatsUI) -> int:
    try:
        config_data = load_config(args.config)
    except ConfigError as e:
        ui.display_error_panel(str(e))
        return 1

    setup_logging(config_data, verbose=args.verbose)

    stats_config = config_data['volume_stats']
    namespace = args.namespace or stats_config['namespace']
    label_selector = args.selector if args.selector is not None else (stats_config['label_selector'] or '')
    if args.workers is not None:
        stats_config['max_workers'] = args.workers

    try:
        core_api = init_kubernetes_client(config_data)
        reader = VolumeStatsReader.from_config(core_api, config_data)
        report = reader.collect(namespace, label_selector)
    except (ConfigError, QueryError) as e:
        logging.debug("Query failed", exc_info=True)
        ui.display_error_panel(str(e))
        return 1

    if args.format == "json":
        console.print_json(json.dumps(report.to_dict()))
    else:
        ui.display_results(report, namespace, label_selector)

    if args.output:
        try:
            with open(args.output, 'w') as f:
                json.dump(report.to_dict(), f, indent=2)
            logging.info(f"Results saved to {args.output}")
        except OSError as e:
            ui.display_error_panel(f"Failed to save results to {args.output}: {e}")
            return 1

    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
