"""Turn converted artifacts into the single file sent back to the client."""
import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Optional, Sequence

from app.conversion.errors import PackagingError
from app.conversion.models import ConvertedArtifact, PackagedOutput
from app.conversion.service import remove_file

logger = logging.getLogger("converter.packaging")

ARCHIVE_FILENAME = "converted.zip"


def _unique_arcname(name: str, used: set[str]) -> str:
    """Flat entry name; repeated names become 'name (1).ext', 'name (2).ext', ..."""
    name = Path(name.replace("\\", "/")).name or "file"
    candidate = name
    stem, suffix = Path(name).stem, Path(name).suffix
    n = 1
    while candidate in used:
        candidate = f"{stem} ({n}){suffix}"
        n += 1
    used.add(candidate)
    return candidate


def discard_artifacts(artifacts: Sequence[ConvertedArtifact]) -> None:
    for artifact in artifacts:
        remove_file(artifact.path, "output")


def create_zip(artifacts: Sequence[ConvertedArtifact], zip_dir: Optional[Path] = None) -> Path:
    """Write every artifact into a new zip, deleting each one once archived. Returns the zip path."""
    zip_path: Optional[Path] = None
    used: set[str] = set()
    done = 0
    try:
        fd, name = tempfile.mkstemp(prefix="converted_", suffix=".zip", dir=zip_dir)
        os.close(fd)
        zip_path = Path(name)
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            for artifact in artifacts:
                zf.write(artifact.path, _unique_arcname(artifact.download_name, used))
                artifact.path.unlink()
                done += 1
    except OSError as e:
        logger.exception("Could not build zip: %s", e)
        remove_file(zip_path, "zip")
        discard_artifacts(artifacts[done:])
        raise PackagingError(f"Could not create archive: {e}") from e
    logger.info("Created zip %s with %s files", zip_path.name, len(artifacts))
    return zip_path


def package_artifacts(
    artifacts: Sequence[ConvertedArtifact], zip_dir: Optional[Path] = None
) -> PackagedOutput:
    """One artifact is returned as-is; several are bundled into a zip."""
    if not artifacts:
        raise PackagingError("Nothing to package.")
    if len(artifacts) == 1:
        artifact = artifacts[0]
        logger.info("Returning single file %s", artifact.download_name)
        return PackagedOutput(
            path=artifact.path,
            filename=artifact.download_name,
            media_type="application/octet-stream",
        )
    logger.info("Creating zip for %s files", len(artifacts))
    zip_path = create_zip(artifacts, zip_dir=zip_dir)
    return PackagedOutput(
        path=zip_path,
        filename=ARCHIVE_FILENAME,
        media_type="application/zip",
        archived=True,
    )
