# SPDX-License-Identifier: MIT
"""
Core services, domain models, and persistence for the SplitUp application.
"""

from .config import AppConfig, GridConfig, ImageConfig, StorageConfig, load_config  # noqa: F401
from .grid import GridDimensions, cell_coordinate, grid_dimensions  # noqa: F401
from .models import Cell, Goal, ProjectSnapshot, ProjectSummary, parse_quantity  # noqa: F401
from .reveal import cells_to_reveal, initialize_cells, reveal_random  # noqa: F401
from .session import ProgressResult, ProjectSession  # noqa: F401
from .storage import InMemoryStorage, JsonFileStorage, KeyValueStorage, StorageError  # noqa: F401
from .store import ProjectDecodeError, ProjectStore  # noqa: F401
