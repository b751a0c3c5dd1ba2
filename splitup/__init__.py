# SPDX-License-Identifier: MIT
"""
Goal-driven image reveal application.

The package is organised so that `splitup.core` hosts domain logic and services,
while `splitup.ui` contains Qt widgets and windows. The `splitup.main` module is
the Qt entry point and `splitup.gradio_app` serves the same flow in a browser.
"""

__all__ = ["main"]
