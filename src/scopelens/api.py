from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .config import ScopeLensConfig, load_config
from .history import HistoryStore
from .models import ProjectRecord
from .pipeline import extract_project


@dataclass
class ExtractOptions:
    mime_type: Optional[str] = None
    disable_ai: bool = False
    save_to_history: bool = False
    config: Optional[ScopeLensConfig] = None


def extract_file(path: Path, options: Optional[ExtractOptions] = None) -> ProjectRecord:
    """Programmatic interface: extract a project from a file on disk.

    When ``save_to_history`` is set the result is also appended to the
    configured history store.
    """
    options = options or ExtractOptions()
    config = options.config or load_config(os.environ, None)
    if options.disable_ai:
        config = replace(config, ai=replace(config.ai, enabled=False))

    path = Path(path)
    mime_type = options.mime_type or mimetypes.guess_type(path.name)[0]
    project = extract_project(path.read_bytes(), path.name, mime_type, config=config)
    if options.save_to_history:
        HistoryStore(config.history.path, config.history.max_entries).save(project)
    return project


__all__ = ["ExtractOptions", "extract_file"]
