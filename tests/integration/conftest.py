import os
import sys
import socket
import time
import subprocess
from pathlib import Path
import urllib.request

import pytest

from petz_py.loader import load_dump
from petz_py.storage import Storage


SEED = {
    "members": [{"id": 1, "name": "Ann"}, {"id": 2, "name": "Ben"}],
    "breeds": [{"id": 1, "name": "Dalmatian"}],
    "affixes": [{"id": 1, "name": "Spotty", "owner_id": 1}],
    "pets": [
        {"id": 10, "show_name": "Old Spot", "pedigree_number": "PBC-10", "sex": "Male"},
        {"id": 11, "show_name": "Pepper", "pedigree_number": "PBC-11", "sex": "Female"},
        {"id": 12, "show_name": "Salt", "sex": "Female"},
        {
            "id": 1,
            "show_name": "Spotty Junior",
            "pedigree_number": "PBC-1",
            "sex": "Male",
            "registration_date": "2024-02-03",
            "sire_id": 10,
            "dam_id": 11,
            "affix_id": 1,
            "breed_id": 1,
            "owner_id": 1,
            "breeder_id": 2,
        },
        {"id": 2, "show_name": "Full Sister", "sex": "Female", "sire_id": 10, "dam_id": 11},
        {"id": 3, "show_name": "Half Brother", "sex": "Male", "sire_id": 10, "dam_id": 12},
        {"id": 4, "show_name": "Waiting", "status": "PendingRegistration", "sire_id": 1},
    ],
}


def _find_free_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    addr, port = s.getsockname()
    s.close()
    return port


@pytest.fixture(scope="module")
def live_server(tmp_path_factory):
    """Start a uvicorn server over a seeded data dir and yield its base url.

    The fixture loads SEED into a fresh storage, starts uvicorn as a subprocess
    with PETZ_DATA_DIR pointing at it, waits for readiness by polling
    /openapi.json, and then yields the base URL (http://127.0.0.1:PORT). After
    tests complete the server is terminated.
    """
    tmp = tmp_path_factory.mktemp("petz_live")
    data_dir = tmp / "data"
    st = Storage(data_dir)
    load_dump(SEED, st)
    st.close()

    repo_root = Path(__file__).resolve().parents[2]
    port = _find_free_port()
    cmd = [sys.executable, "-m", "uvicorn", "petz_py.web.app:app", "--host", "127.0.0.1", "--port", str(port)]
    env = os.environ.copy()
    env.pop("PETZ_CONFIG", None)
    env["PETZ_DATA_DIR"] = str(data_dir)
    env_pythonpath = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(repo_root) + (os.pathsep + env_pythonpath if env_pythonpath else "")
    # Do not capture stdout/stderr so server startup errors are visible in test output
    proc = subprocess.Popen(cmd, cwd=str(tmp), env=env, stdout=None, stderr=None)

    base = f"http://127.0.0.1:{port}"
    deadline = time.time() + 30
    last_exc = None
    while time.time() < deadline:
        try:
            with urllib.request.urlopen(base + "/openapi.json", timeout=1) as r:
                if r.status == 200:
                    break
        except Exception as e:
            last_exc = e
            time.sleep(0.2)
            continue
    else:
        proc.kill()
        proc.wait(timeout=5)
        pytest.fail(f"Server did not become ready in time; last error: {last_exc}")

    try:
        yield base
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
