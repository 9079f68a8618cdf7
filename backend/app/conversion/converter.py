"""External converter process."""
import logging
import subprocess
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger("converter.ffmpeg")


class ExternalConverter(Protocol):
    """Turns `input_path` into `output_path`; the output format follows the output extension."""

    def convert(self, input_path: Path, output_path: Path) -> int:
        """Return the process exit status. 0 means `output_path` holds valid content."""
        ...


class FfmpegConverter:
    """Runs `<binary> -y -i <input> <output>` with inherited stdio.

    Raises OSError when the binary cannot be launched and
    subprocess.TimeoutExpired when the run exceeds `timeout` seconds
    (the child is killed first).
    """

    def __init__(self, binary: str = "ffmpeg", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout or None

    def command(self, input_path: Path, output_path: Path) -> list[str]:
        return [self.binary, "-y", "-i", str(input_path), str(output_path)]

    def convert(self, input_path: Path, output_path: Path) -> int:
        cmd = self.command(input_path, output_path)
        logger.debug("Running %s", " ".join(cmd))
        result = subprocess.run(cmd, timeout=self.timeout, check=False)
        return result.returncode
