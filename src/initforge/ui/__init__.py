"""
Terminal UI for initforge.

- ConsoleLogger: Rich-backed structured progress logger
- RichUI / NonInteractiveUI: interactive prompt primitives
"""

from initforge.ui.console import ConsoleLogger, Logger
from initforge.ui.prompts import NonInteractiveUI, Option, RichUI, UIComponents

__all__ = [
    "ConsoleLogger",
    "Logger",
    "NonInteractiveUI",
    "Option",
    "RichUI",
    "UIComponents",
]
