"""Shared pytest configuration, marker assignment and fake converter fixtures."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from profile8_fixer.application.results import ToolDescriptor

LSF_MAGIC = b"LSOF"

SAMPLE_LSX = """<?xml version="1.0" encoding="utf-8"?>
<save>
    <version major="4" minor="0" revision="9" build="331" />
    <region id="PlayerProfile">
        <node id="PlayerProfile">
            <attribute id="PlayerProfileName" type="LSString" value="Public" />
            <children>
                <node id="DisabledSingleSaveSessions">
                    <attribute id="Value" type="FixedString" value="a1b2c3" />
                </node>
                <node id="Settings">
                    <attribute id="Difficulty" type="FixedString" value="Tactician" />
                    <children>
                        <node id="Group">
                            <children>
                                <node id="DisabledSingleSaveSessions" />
                                <node id="Keep" note="text &amp; more" />
                            </children>
                        </node>
                    </children>
                </node>
            </children>
        </node>
    </region>
</save>
"""

CLEAN_LSX = """<?xml version="1.0" encoding="utf-8"?>
<save>
    <version major="4" minor="0" revision="9" build="331" />
    <region id="PlayerProfile">
        <node id="PlayerProfile">
            <attribute id="PlayerProfileName" type="LSString" value="Public" />
        </node>
    </region>
</save>
"""

# Stand-in for LSLib's Divine: "LSF" is the LSX bytes behind a magic header.
FAKE_DIVINE = '''
import argparse
import os
import sys

MAGIC = b"LSOF"

parser = argparse.ArgumentParser()
parser.add_argument("-a", dest="action", required=True)
parser.add_argument("-g", dest="game", required=True)
parser.add_argument("-s", dest="source", required=True)
parser.add_argument("-d", dest="destination", required=True)
args = parser.parse_args()

fail_on = os.environ.get("FAKE_DIVINE_FAIL_ON", "")
dest_ext = os.path.splitext(args.destination)[1].lower()
if args.action != "convert-resource" or args.game != "bg3":
    sys.stderr.write("unsupported action or game\\n")
    sys.exit(1)
if fail_on and fail_on == dest_ext:
    with open(args.destination, "wb") as handle:
        handle.write(b"partial")
    sys.stderr.write("Failed to convert resource: simulated failure\\n")
    sys.exit(2)

with open(args.source, "rb") as handle:
    data = handle.read()
if dest_ext == ".lsx":
    if not data.startswith(MAGIC):
        sys.stderr.write("Failed to convert resource: not an LSF file\\n")
        sys.exit(2)
    payload = data[len(MAGIC):]
elif dest_ext == ".lsf":
    payload = MAGIC + data
else:
    sys.stderr.write("unknown destination extension\\n")
    sys.exit(2)
with open(args.destination, "wb") as handle:
    handle.write(payload)
print("Wrote resource to: " + args.destination)
'''


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Drop console handlers the CLI installs so streams do not leak between tests."""
    yield
    logger = logging.getLogger("profile8_fixer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class FakeLsfCodec:
    """Encode/decode the fake LSF format understood by the fake converter."""

    magic = LSF_MAGIC

    def encode(self, xml: str) -> bytes:
        return self.magic + xml.encode("utf-8")

    def decode(self, data: bytes) -> str:
        assert data.startswith(self.magic)
        return data[len(self.magic):].decode("utf-8")

    def write_profile(self, path: Path, xml: str = SAMPLE_LSX) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.encode(xml))
        return path


@pytest.fixture
def codec() -> FakeLsfCodec:
    """Fake LSF codec."""
    return FakeLsfCodec()


@pytest.fixture
def sample_lsx() -> str:
    """LSX document with two DisabledSingleSaveSessions nodes at different depths."""
    return SAMPLE_LSX


@pytest.fixture
def clean_lsx() -> str:
    """LSX document without DisabledSingleSaveSessions nodes."""
    return CLEAN_LSX


@pytest.fixture
def fake_divine(tmp_path_factory: pytest.TempPathFactory) -> ToolDescriptor:
    """Descriptor running the fake converter script through the Python launcher."""
    script = tmp_path_factory.mktemp("tool") / "fake_divine.py"
    script.write_text(FAKE_DIVINE, encoding="utf-8")
    return ToolDescriptor(executable=script, launcher=sys.executable)
