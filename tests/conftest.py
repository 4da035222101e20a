import logging
import sys
import textwrap
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

FAKE_MODULE_SOURCE = textwrap.dedent(
    '''
    calls = []
    connect_settings = []


    def connect(settings):
        connect_settings.append(dict(settings))
        if settings.get("fail"):
            raise RuntimeError("admin consent missing")
        return {"tenant": settings.get("tenant_id", "contoso")}


    def create_android_store_app(session, payload):
        calls.append(payload)
        if payload["displayName"] == "Broken":
            raise RuntimeError("service unavailable")
        return {"id": "app-%d" % len(calls)}
    '''
)

CSV_HEADER = "Name;URL;Publisher;Description;MininumAndroidVersion;Icon"


@pytest.fixture(autouse=True)
def _reset_storeapps_logger():
    yield
    logger = logging.getLogger("storeapps")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def fake_module_path(tmp_path):
    path = tmp_path / "fake_intune.py"
    path.write_text(FAKE_MODULE_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def icon_factory(tmp_path):
    icons = tmp_path / "icons"
    icons.mkdir()

    def make(name: str, data: bytes = b"\x89PNG\r\n") -> Path:
        path = icons / name
        path.write_bytes(data)
        return path

    return make


@pytest.fixture
def csv_factory(tmp_path):
    def make(rows, *, delimiter: str = ";", header: str = CSV_HEADER) -> Path:
        path = tmp_path / "apps.csv"
        lines = [header.replace(";", delimiter)]
        lines.extend(delimiter.join(str(v) for v in row) for row in rows)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return make
