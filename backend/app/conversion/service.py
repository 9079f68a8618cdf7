"""Batch conversion: per-file worker with temp-file lifecycle, and the orchestrator around it."""
import logging
import os
import shutil
import subprocess
import tempfile
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from app.config import (
    CONVERTER_BINARY,
    CONVERTER_TIMEOUT,
    MAX_FILE_SIZE_BYTES,
    MAX_FILES_PER_BATCH,
    MAX_WORKERS,
    TEMP_DIR,
)
from app.conversion.converter import ExternalConverter, FfmpegConverter
from app.conversion.errors import NoSuccessfulConversionsError
from app.conversion.formats import DEFAULT_REGISTRY, FormatRegistry, normalize_format
from app.conversion.models import (
    BatchResult,
    ConversionFailure,
    ConvertedArtifact,
    InputFile,
)
from app.conversion.validation import InputValidator

logger = logging.getLogger("converter.service")

FALLBACK_BASE_NAME = "file"
FALLBACK_EXTENSION = ".tmp"


def _sanitize_name(name: str) -> str:
    """Safe file name part (no path separators, may be empty)."""
    s = "".join(c for c in name if c.isalnum() or c in "._- ").strip()
    return s[:64]


def split_filename(filename: Optional[str]) -> tuple[str, str]:
    """Return (base_name, input_extension) for an uploaded filename.

    Only directory components are dropped from the base; the extension
    keeps its dot: "clip.MOV" -> ("clip", ".MOV"). Missing pieces fall back
    to "file" and ".tmp".
    """
    if not filename:
        return FALLBACK_BASE_NAME, FALLBACK_EXTENSION
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    base, dot, ext = name.rpartition(".")
    if not dot:
        base, ext = name, ""
    base = base or FALLBACK_BASE_NAME
    ext = "".join(c for c in ext if c.isalnum())
    return base, f".{ext}" if ext else FALLBACK_EXTENSION


def remove_file(path: Optional[Path], what: str = "file") -> None:
    """Delete a temp file; failures are logged, never raised."""
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s %s: %s", what, path, e)


def _discard_outcomes(outcomes: Iterable[Union[ConvertedArtifact, ConversionFailure]]) -> None:
    for outcome in outcomes:
        if isinstance(outcome, ConvertedArtifact):
            remove_file(outcome.path, "output")


class ConversionWorker:
    """Converts one uploaded file. Owns the temp input and output it creates."""

    def __init__(self, converter: ExternalConverter, temp_dir: Optional[Path] = None):
        self.converter = converter
        self.temp_dir = temp_dir

    def _create_temp(self, prefix: str, suffix: str) -> Path:
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=self.temp_dir)
        os.close(fd)
        return Path(name)

    def convert(self, input_file: InputFile, target_format: str) -> Union[ConvertedArtifact, ConversionFailure]:
        """Run the converter for a single file.

        On success the returned artifact's path belongs to the caller. Every
        failure (non-zero exit, timeout, launch or I/O error) is returned as a
        ConversionFailure. The temp input is always deleted before returning.
        """
        base_name, input_ext = split_filename(input_file.filename)
        download_name = f"{base_name}.{target_format}"
        label = input_file.filename or base_name
        input_path: Optional[Path] = None
        output_path: Optional[Path] = None
        try:
            input_path = self._create_temp("converter_input_", input_ext)
            # ffmpeg picks the output format from this suffix
            output_path = self._create_temp("converter_output_", f"_{_sanitize_name(base_name)}.{target_format}")
            with open(input_path, "wb") as f:
                shutil.copyfileobj(input_file.stream, f)

            logger.info("Converting %s -> %s", label, download_name)
            exit_code = self.converter.convert(input_path, output_path)
            if exit_code != 0:
                logger.error("Conversion failed for %s (exit code %s)", label, exit_code)
                return ConversionFailure(input_file.filename, f"converter exited with code {exit_code}")

            artifact = ConvertedArtifact(path=output_path, download_name=download_name)
            output_path = None
            logger.info("Converted %s -> %s", label, artifact.path.name)
            return artifact
        except subprocess.TimeoutExpired as e:
            logger.error("Conversion timed out for %s after %ss", label, e.timeout)
            return ConversionFailure(input_file.filename, "converter timed out")
        except FileNotFoundError as e:
            logger.error("Could not launch converter for %s: %s. Install ffmpeg or set CONVERTER_BINARY.", label, e)
            return ConversionFailure(input_file.filename, str(e))
        except Exception as e:
            logger.exception("Conversion failed for %s: %s", label, e)
            return ConversionFailure(input_file.filename, str(e))
        finally:
            remove_file(input_path, "input")
            remove_file(output_path, "output")


class ConversionService:
    """Validates a batch, converts each file and applies the at-least-one-success policy."""

    def __init__(
        self,
        converter: ExternalConverter,
        registry: FormatRegistry = DEFAULT_REGISTRY,
        validator: Optional[InputValidator] = None,
        temp_dir: Optional[Path] = None,
        max_workers: int = 1,
    ):
        self.registry = registry
        self.validator = validator or InputValidator(registry, MAX_FILES_PER_BATCH, MAX_FILE_SIZE_BYTES)
        self.worker = ConversionWorker(converter, temp_dir=temp_dir)
        self.temp_dir = temp_dir
        self.max_workers = max(1, max_workers)
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers) if self.max_workers > 1 else None
        logger.info("ConversionService initialized with max_workers=%s", self.max_workers)

    def _convert_all(
        self, files: Sequence[InputFile], target_format: str
    ) -> list[Union[ConvertedArtifact, ConversionFailure]]:
        if self._executor is None or len(files) == 1:
            outcomes: list[Union[ConvertedArtifact, ConversionFailure]] = []
            try:
                for f in files:
                    outcomes.append(self.worker.convert(f, target_format))
            except BaseException:
                _discard_outcomes(outcomes)
                raise
            return outcomes
        # Submit in input order and collect in the same order, whatever finishes first
        futures = [self._executor.submit(self.worker.convert, f, target_format) for f in files]
        try:
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            wait(futures)
            _discard_outcomes(
                future.result()
                for future in futures
                if not future.cancelled() and future.exception() is None
            )
            raise

    def run(self, target_format: str, files: Sequence[InputFile]) -> BatchResult:
        """Convert a batch. Raises ValidationError before any work, or
        NoSuccessfulConversionsError when no file converted."""
        self.validator.validate(target_format, files)
        fmt = normalize_format(target_format)

        result = BatchResult()
        for outcome in self._convert_all(files, fmt):
            if isinstance(outcome, ConvertedArtifact):
                result.artifacts.append(outcome)
            else:
                logger.warning("Skipping %s: %s", outcome.filename, outcome.reason)
                result.failures.append(outcome)

        if not result.artifacts:
            raise NoSuccessfulConversionsError("None of the files could be converted.")
        logger.info(
            "Batch to %s finished: %s converted, %s skipped",
            fmt, len(result.artifacts), len(result.failures),
        )
        return result

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService(
            FfmpegConverter(CONVERTER_BINARY, timeout=CONVERTER_TIMEOUT),
            temp_dir=TEMP_DIR,
            max_workers=MAX_WORKERS,
        )
    return _conversion_service


def shutdown_conversion_service() -> None:
    global _conversion_service
    if _conversion_service is not None:
        _conversion_service.shutdown()
        _conversion_service = None
