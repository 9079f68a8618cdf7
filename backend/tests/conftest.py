"""Shared fixtures: an in-process stand-in for ffmpeg and upload builders."""
import io
import threading
import time
from pathlib import Path
from typing import Callable, Optional

import pytest

from app.conversion.models import InputFile
from app.conversion.service import ConversionService


class FakeConverter:
    """Records calls and writes a marker into the output unless the rule says fail."""

    def __init__(self, fail_on: Optional[Callable[[bytes], bool]] = None, delay: Optional[Callable[[bytes], float]] = None):
        self.fail_on = fail_on or (lambda data: False)
        self.delay = delay
        self.calls: list[tuple[Path, Path]] = []
        self._lock = threading.Lock()

    def convert(self, input_path: Path, output_path: Path) -> int:
        data = input_path.read_bytes()
        with self._lock:
            self.calls.append((input_path, output_path))
        if self.delay:
            time.sleep(self.delay(data))
        if self.fail_on(data):
            return 1
        output_path.write_bytes(b"converted:" + data)
        return 0


def make_file(
    filename: Optional[str] = "photo.png",
    content_type: Optional[str] = "image/png",
    data: bytes = b"png-bytes",
    size: Optional[int] = None,
) -> InputFile:
    return InputFile(
        filename=filename,
        content_type=content_type,
        size=len(data) if size is None else size,
        stream=io.BytesIO(data),
    )


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def service(converter: FakeConverter, temp_dir: Path) -> ConversionService:
    svc = ConversionService(converter, temp_dir=temp_dir)
    yield svc
    svc.shutdown()
