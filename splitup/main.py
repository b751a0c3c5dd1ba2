from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from pathlib import Path
from typing import Sequence

from PySide6.QtWidgets import QApplication

from splitup.core import AppConfig, JsonFileStorage, ProjectStore, load_config
from splitup.core.controller import ProjectController
from splitup.core.imaging import make_thumbnail
from splitup.ui import MainWindow

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str]) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(description="SplitUp goal tracker")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a JSON config file overriding the defaults",
    )
    parser.add_argument(
        "--storage",
        type=str,
        help="Path of the JSON file holding saved projects (default: config storage.path)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the cell reveal random source",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity (default: INFO)",
    )
    return parser.parse_known_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_config(args: argparse.Namespace) -> AppConfig:
    config = load_config(Path(args.config).expanduser() if args.config else None)
    if args.storage:
        config.storage.path = args.storage
    if args.seed is not None:
        config.seed = args.seed
    return config


def build_store(config: AppConfig) -> ProjectStore:
    storage = JsonFileStorage(Path(config.storage.path).expanduser())
    return ProjectStore(
        storage,
        slot=config.storage.slot,
        thumbnail_factory=partial(make_thumbnail, size=config.image.thumbnail_size),
    )


def main(argv: Sequence[str] | None = None) -> int:
    argv = list(argv if argv is not None else sys.argv)
    args, qt_args = parse_args(argv[1:])
    configure_logging(args.log_level)

    config = build_config(args)
    app = QApplication([argv[0], *qt_args])
    app.setApplicationName("SplitUp")
    controller = ProjectController(build_store(config), config)
    window = MainWindow(controller)
    window.show()
    logger.info("Started SplitUp with storage %s", config.storage.path)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
