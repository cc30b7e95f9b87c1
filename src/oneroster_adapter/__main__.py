"""
Run one full OneRoster pull and print the dataset as JSON

python -m oneroster_adapter [--config configs/oneroster.toml]
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config_loader import ConfigLoader, ConfigurationError, EnvironmentError
from .dataset_orchestrator import DatasetOrchestrator

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger("oneroster_extract")


def configure_logging(logging_config: Dict[str, Any]) -> None:
    """
    Configure root logging; stdout is reserved for the dataset so logs go to stderr

    Args:
        logging_config: [logging] section, keys 'level' and 'log_file_name'
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = logging_config.get('log_file_name')
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=str(logging_config.get('level', 'INFO')).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Pull a full OneRoster snapshot and print it as JSON"
    )
    parser.add_argument(
        '--config',
        type=Path,
        help="Optional TOML settings file (defaults to $ONEROSTER_CONFIG)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = ConfigLoader.load_config(args.config)
    except (ConfigurationError, EnvironmentError, FileNotFoundError) as e:
        configure_logging({})
        logger.error(f"Configuration error: {e}")
        return 2

    configure_logging(config.logging)
    logger.info(f"Extracting {len(config.endpoints)} endpoints from {config.credentials.base_url}")

    orchestrator = DatasetOrchestrator.from_config(config)
    dataset = orchestrator.pull_all()

    json.dump(dataset, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write('\n')
    return 0


if __name__ == '__main__':
    sys.exit(main())
