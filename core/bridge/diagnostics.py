# core/bridge/diagnostics.py
"""
Best-effort persistence of problematic response bodies.

Each failure kind has a fixed file name, so the directory only ever holds the
most recent body of each kind. Write errors are logged and swallowed: the
failure being reported matters more than its diagnostic copy.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DIAGNOSTICS_SUBDIR = 'diagnostics'
FALLBACK_DIAGNOSTICS_DIR = Path('tmp') / DIAGNOSTICS_SUBDIR


def resolve_diagnostics_dir() -> Path:
    """Директория диагностики рядом с запущенной программой"""
    try:
        if getattr(sys, 'frozen', False):
            program_path = Path(sys.executable)
        else:
            program_path = Path(sys.argv[0])

        if not program_path.name:
            raise ValueError("program location is unknown")

        return program_path.resolve().parent / DIAGNOSTICS_SUBDIR

    except (IndexError, OSError, ValueError, RuntimeError) as e:
        logger.warning(
            f"⚠️ Cannot resolve program location ({e}), "
            f"using {FALLBACK_DIAGNOSTICS_DIR}"
        )
        return FALLBACK_DIAGNOSTICS_DIR


class FileDiagnosticsSink:
    """Writes response bodies into fixed-name files of one directory"""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory is not None else resolve_diagnostics_dir()

    def write(self, name: str, body: bytes) -> Optional[Path]:
        """
        Overwrite ``name`` with the body

        Args:
            name: Fixed diagnostic file name
            body: Exact response bytes

        Returns:
            Path or None: Written file, None if the write failed
        """
        path = self.directory / name

        try:
            # Создаем директорию непосредственно перед записью
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(body)
        except OSError as e:
            logger.error(f"❌ Failed to save diagnostic file {path}: {e}")
            return None

        logger.info(f"📝 Response body saved for diagnostics: {path} ({len(body)} bytes)")
        return path
