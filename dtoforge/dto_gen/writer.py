"""File writer for DTO generation."""
import logging
from pathlib import Path
from typing import List

from dtoforge.dto_gen.types import GeneratedFile

log = logging.getLogger(__name__)


def write_files(files: List[GeneratedFile], out_dir: Path) -> List[Path]:
    """
    Write generated files below the output directory.

    Args:
        files: GeneratedFile objects with paths relative to out_dir
        out_dir: Base output directory path

    Returns:
        Absolute paths of the written files, in input order
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for file in files:
        file_path = out_dir / file.path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(file.content, encoding="utf-8")
        log.debug("Wrote %s", file_path)
        written.append(file_path.resolve())
    return written
