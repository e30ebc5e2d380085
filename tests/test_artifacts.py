import json
from pathlib import Path

import pytest

from conftest import FOUR_ARTIFACTS
from isoforge.artifacts import (
    blueprint_json,
    export_filename,
    save_blueprint,
    save_json_error,
    unpack_artifacts,
)
from isoforge.models import BLUEPRINT_ADAPTER, Distribution, GeneratedArtifact


@pytest.fixture
def artifacts():
    return BLUEPRINT_ADAPTER.validate_python(FOUR_ARTIFACTS)


@pytest.mark.parametrize(
    "distribution,filename",
    [
        (Distribution.UBUNTU, "isoforge-ubuntu-config.json"),
        (Distribution.DEBIAN, "isoforge-debian-config.json"),
        (Distribution.ARCH, "isoforge-arch-linux-config.json"),
    ],
)
def test_export_filename(distribution, filename):
    assert export_filename(distribution) == filename


def test_blueprint_json_is_indented_array(artifacts):
    text = blueprint_json(artifacts)
    assert text.startswith("[\n  {")
    assert json.loads(text) == FOUR_ARTIFACTS


def test_blueprint_json_keeps_non_ascii():
    text = blueprint_json([GeneratedArtifact(name="LÉAME.md", content="café", language="markdown")])
    assert "LÉAME.md" in text
    assert "café" in text


def test_save_blueprint_round_trip(artifacts, tmp_path):
    path = save_blueprint(artifacts, Distribution.UBUNTU, tmp_path / "out")
    assert path == tmp_path / "out" / "isoforge-ubuntu-config.json"
    assert BLUEPRINT_ADAPTER.validate_json(path.read_text(encoding="utf-8")) == artifacts


def test_unpack_artifacts_writes_one_file_each(artifacts, tmp_path):
    paths = unpack_artifacts(artifacts, tmp_path)
    assert [p.name for p in paths] == ["README.md", "user-data", "build.sh", "grub.cfg"]
    assert (tmp_path / "build.sh").read_text(encoding="utf-8") == "#!/bin/bash\nset -euo pipefail"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("../../etc/passwd", "passwd"),
        ("/boot/grub/grub.cfg", "grub.cfg"),
        ("isolinux\\isolinux.cfg", "isolinux.cfg"),
        ("..", "artifact.txt"),
    ],
)
def test_unpack_artifacts_stays_inside_out_dir(tmp_path, name, expected):
    out_dir = tmp_path / "bundle"
    [path] = unpack_artifacts([GeneratedArtifact(name=name, content="x", language="text")], out_dir)
    assert path == out_dir / expected
    assert path.read_text(encoding="utf-8") == "x"


def test_save_json_error(tmp_path):
    path = save_json_error("not json", "Expecting value", "json_decode", runs_dir=str(tmp_path / "runs"))
    contents = Path(path).read_text(encoding="utf-8")
    assert contents.startswith("MODEL_OUTPUT_FAILURE\nkind: json_decode\n")
    assert contents.endswith("---- RAW OUTPUT ----\nnot json")
