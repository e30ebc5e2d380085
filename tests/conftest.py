import json
from types import SimpleNamespace

import pytest

from isoforge.config import Settings


class FakeMessages:
    def __init__(self, text: str | None = None, exc: Exception | None = None, on_create=None):
        self.text = text
        self.exc = exc
        self.on_create = on_create
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.on_create is not None:
            self.on_create()
        if self.exc is not None:
            raise self.exc
        blocks = [] if self.text is None else [SimpleNamespace(type="text", text=self.text)]
        return SimpleNamespace(content=blocks)


class FakeClient:
    def __init__(self, text: str | None = None, exc: Exception | None = None, on_create=None):
        self.messages = FakeMessages(text=text, exc=exc, on_create=on_create)


FOUR_ARTIFACTS = [
    {"name": "README.md", "content": "# Build\nxorriso -as mkisofs ...", "language": "markdown"},
    {"name": "user-data", "content": "#cloud-config\nautoinstall:\n  version: 1", "language": "yaml"},
    {"name": "build.sh", "content": "#!/bin/bash\nset -euo pipefail", "language": "bash"},
    {"name": "grub.cfg", "content": "menuentry 'Install' {}", "language": "plaintext"},
]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(api_key="test-key", model="test-model", max_tokens=1000, runs_dir=str(tmp_path / "runs"))


@pytest.fixture
def four_artifacts_json() -> str:
    return json.dumps(FOUR_ARTIFACTS)


@pytest.fixture
def make_client():
    return FakeClient
