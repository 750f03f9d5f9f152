"""File writer for domain-model generation."""
import logging
from pathlib import Path
from typing import List, Optional
from scaffolder.core.errors import FileWriteError
from scaffolder.generators.domain_gen.types import GeneratedFile, WriteResult, WriteStatus

log = logging.getLogger(__name__)


def write_files(
    files: List[GeneratedFile],
    out_dir: Path,
    webapp_dir: Optional[Path] = None,
) -> List[WriteResult]:
    """
    Write generated files to the output directory.

    Args:
        files: List of GeneratedFile objects to write
        out_dir: Java source root
        webapp_dir: Root for view files; defaults to ``out_dir``

    Returns:
        One WriteResult per file, in input order

    Raises:
        FileWriteError: a directory or file could not be written; the
            results of the files handled before it travel on the error
    """
    results = []
    for file in files:
        base = webapp_dir if (file.is_view and webapp_dir is not None) else out_dir
        file_path = base / file.path
        try:
            if file_path.exists():
                current = file_path.read_text(encoding="utf-8")
                if current == file.content:
                    results.append(WriteResult(str(file_path), WriteStatus.UNCHANGED))
                    continue
                if file.preserve_existing:
                    log.info("Keeping hand-edited %s", file_path)
                    results.append(WriteResult(str(file_path), WriteStatus.PRESERVED))
                    continue
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(file.content, encoding="utf-8")
        except OSError as e:
            raise FileWriteError(file_path, e, results) from e
        results.append(WriteResult(str(file_path), WriteStatus.WRITTEN))
    return results
