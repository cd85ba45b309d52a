"""
pytest configuration and fixtures.
"""

import pytest

# Add src (and this directory, for helpers.py) to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from webdispatch.http import Response
from helpers import RecordingSink


@pytest.fixture
def sink() -> RecordingSink:
    """Recording output stream."""
    return RecordingSink()


@pytest.fixture
def response(sink: RecordingSink) -> Response:
    """Response sink writing to the recording stream."""
    return Response(sink)


@pytest.fixture
def web_root(tmp_path: Path) -> Path:
    """
    A small web root:

        web/
          index.html
          404.html
          style.css
          data.json
          notes.xyz
          docs/guide.txt
    """
    root = tmp_path / "web"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>Hello</h1>")
    (root / "404.html").write_bytes(b"<h1>Missing</h1>")
    (root / "style.css").write_bytes(b"body { margin: 0; }")
    (root / "data.json").write_bytes(b'{"ok": true}')
    (root / "notes.xyz").write_bytes(b"unknown type")
    (root / "docs").mkdir()
    (root / "docs" / "guide.txt").write_bytes(b"read me")
    return root
