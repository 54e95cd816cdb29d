"""
File collaborators for loading and saving PubTator files
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)


def read_pubtator_file(file_path: Union[str, Path]) -> Tuple[str, str]:
    """
    Read a PubTator file

    Returns:
        (content, filename) where filename is the default export name
    """
    path = Path(file_path)
    content = path.read_text(encoding='utf-8')
    logger.info(f"Read {len(content)} characters from {path}")
    return content, path.name


def _unique_path(directory: Path, filename: str) -> Path:
    candidate = directory / filename
    counter = 1
    while candidate.exists():
        candidate = directory / f"{Path(filename).stem} ({counter}){Path(filename).suffix}"
        counter += 1
    return candidate


def save_export(content: str,
                target: Optional[Union[str, Path]] = None,
                filename: str = "pubtator_annotations.txt",
                fallback_dir: Union[str, Path] = "./downloads") -> Path:
    """
    Write exported content, falling back to the download directory

    The content is never dropped: when no target is given, or writing the
    target fails, it is written to ``fallback_dir`` under ``filename``
    (suffixed to avoid clobbering an earlier download).

    Returns:
        Path the content was actually written to
    """
    if target is not None:
        target_path = Path(target)
        try:
            target_path.write_text(content, encoding='utf-8')
            logger.info(f"Saved export to {target_path}")
            return target_path
        except OSError as e:
            logger.warning(f"Error saving file to {target_path}: {e}; falling back to download")

    download_dir = Path(fallback_dir)
    download_dir.mkdir(parents=True, exist_ok=True)
    download_path = _unique_path(download_dir, filename)
    download_path.write_text(content, encoding='utf-8')
    logger.info(f"Export downloaded to {download_path}")
    return download_path
