from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from carnet.config import MANIFEST_FILENAME
from carnet.errors import InvalidManifestError
from carnet.schemas.manifest import Manifest

log = structlog.get_logger()


def validate_manifest(data: Manifest | Mapping[str, Any]) -> Manifest:
    """Validate a raw mapping (or re-validate a model) into a frozen Manifest."""
    if isinstance(data, Manifest):
        return data
    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise InvalidManifestError(
            f"Invalid manifest: {exc}", {"errors": exc.error_count()}
        ) from exc


def load_manifest(path: str | Path) -> Manifest:
    """Read and validate a built manifest file.

    A directory resolves to the ``carnet.manifest.json`` inside it.
    """
    manifest_path = Path(path)
    if manifest_path.is_dir():
        manifest_path = manifest_path / MANIFEST_FILENAME

    if not manifest_path.is_file():
        raise InvalidManifestError(
            f"Manifest file not found: {manifest_path}", {"path": str(manifest_path)}
        )

    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidManifestError(
            f"Failed to read manifest: {exc}", {"path": str(manifest_path)}
        ) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidManifestError(
            f"Failed to parse manifest: {exc.msg}",
            {"path": str(manifest_path), "line": exc.lineno},
        ) from exc

    manifest = validate_manifest(data)
    log.info(
        "manifest.loaded",
        path=str(manifest_path),
        agents=len(manifest.agents),
        skills=len(manifest.skills),
        toolsets=len(manifest.toolsets),
        tools=len(manifest.tools),
    )
    return manifest
