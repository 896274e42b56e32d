"""Directory Service - loads the directory data file"""

import json
import logging
from pathlib import Path
from typing import Union

from fastapi import Request

from .schemas import Directory

logger = logging.getLogger(__name__)


class DirectoryService:
    """Loads and validates the directory configuration file"""

    @staticmethod
    def load(path: Union[str, Path]) -> Directory:
        """
        Read the directory JSON file.

        Raises:
            OSError: If the file cannot be read
            pydantic.ValidationError: If the content does not match Directory
        """
        path = Path(path)
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        directory = Directory.model_validate(data)
        logger.info(
            "Loaded directory from %s: %d branches, %d departments, %d contacts",
            path,
            len(directory.branches),
            len(directory.departments),
            len(directory.contacts),
        )
        return directory


def get_directory(request: Request) -> Directory:
    """Dependency returning the directory loaded at startup."""
    return request.app.state.directory
