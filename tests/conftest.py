"""Shared fixtures."""

import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    """Signals of QObject-based controllers need a core application."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
