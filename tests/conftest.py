import os
import sys
import tempfile
import shutil
import atexit
from pathlib import Path

# Ensure repo root is on sys.path so tests can import the package directly
root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

_petz_test_data_dir = None


def pytest_configure(config):
    """Create a session-scoped temporary data directory for tests and
    set the PETZ_DATA_DIR environment variable so the app and any
    subprocesses will write into an isolated location.

    This avoids tests mutating the repository-local `data/` folder.
    """
    global _petz_test_data_dir
    td = tempfile.mkdtemp(prefix="petz_test_data_")
    _petz_test_data_dir = td
    os.environ.setdefault("PETZ_DATA_DIR", td)


def pytest_unconfigure(config):
    """Remove the temporary data directory created for the test session."""
    global _petz_test_data_dir
    td = _petz_test_data_dir
    _petz_test_data_dir = None
    if td and os.path.exists(td):
        shutil.rmtree(td, ignore_errors=True)


# also register an atexit fallback in case pytest_unconfigure isn't called
def _atexit_cleanup():
    td = _petz_test_data_dir
    if td and os.path.exists(td):
        shutil.rmtree(td, ignore_errors=True)


atexit.register(_atexit_cleanup)
