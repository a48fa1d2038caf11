"""Modal dialogs for the ArxivLens TUI.

Import modals from this package: ``from arxivlens.modals import HelpScreen``
"""

from arxivlens.modals.common import ConfigScreen, HelpScreen

__all__ = [
    "ConfigScreen",
    "HelpScreen",
]
