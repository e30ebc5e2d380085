import json
import os
import secrets
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath, PureWindowsPath
from tempfile import NamedTemporaryFile

from .models import Blueprint, Distribution


def make_timestamp() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    return f"{timestamp}_{os.getpid()}_{secrets.token_hex(3)}"


def ensure_dir(path: str | Path) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _atomic_write(path: Path, content: str) -> None:
    with NamedTemporaryFile("w", encoding="utf-8", dir=path.parent, delete=False) as tmp_file:
        tmp_file.write(content)
        tmp_path = Path(tmp_file.name)
    os.replace(tmp_path, path)


def export_filename(distribution: Distribution) -> str:
    return f"isoforge-{distribution.slug}-config.json"


def blueprint_json(artifacts: Blueprint) -> str:
    return json.dumps(
        [artifact.model_dump() for artifact in artifacts],
        indent=2,
        ensure_ascii=False,
    )


def save_blueprint(artifacts: Blueprint, distribution: Distribution, out_dir: str | Path = ".") -> Path:
    bundle_path = ensure_dir(out_dir) / export_filename(distribution)
    _atomic_write(bundle_path, blueprint_json(artifacts))
    return bundle_path


def _safe_basename(name: str) -> str:
    # Artifact names come from the model; never let them escape out_dir.
    base = PureWindowsPath(PurePosixPath(name).name).name
    if base in {"", ".", ".."}:
        return "artifact.txt"
    return base


def unpack_artifacts(artifacts: Blueprint, out_dir: str | Path) -> list[Path]:
    """Write each artifact to its own file; later duplicates overwrite earlier ones."""
    directory = ensure_dir(out_dir)
    written: list[Path] = []
    for artifact in artifacts:
        path = directory / _safe_basename(artifact.name)
        _atomic_write(path, artifact.content)
        written.append(path)
    return written


def save_json_error(raw: str, error: str, kind: str, runs_dir: str = "runs") -> str:
    ensure_dir(runs_dir)
    ts = make_timestamp()
    err_path = Path(runs_dir) / f"json_error_{ts}.txt"

    contents = (
        f"MODEL_OUTPUT_FAILURE\n"
        f"kind: {kind}\n"
        f"error: {error}\n\n"
        f"---- RAW OUTPUT ----\n{raw}"
    )
    _atomic_write(err_path, contents)
    return str(err_path)
