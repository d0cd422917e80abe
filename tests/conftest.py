import os

# Must be set before the Qt platform plugin loads
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtGui import QColor, QImage
from PySide6.QtWidgets import QApplication

from captioner.editor.session import EditorSession


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def base_image():
    image = QImage(800, 600, QImage.Format.Format_ARGB32)
    image.fill(QColor(40, 80, 120))
    return image


@pytest.fixture
def session():
    return EditorSession()


@pytest.fixture
def loaded_session(session, base_image):
    session.load_image(base_image)
    return session
