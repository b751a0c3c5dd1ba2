# SPDX-License-Identifier: MIT
"""
Qt user interface components for the SplitUp application.
"""

from .main_window import MainWindow  # noqa: F401
from .projects_window import ProjectsWindow  # noqa: F401
