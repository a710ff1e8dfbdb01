# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""JSON file persistence for record collections.

Each collection is one JSON array stored as ``<data_dir>/<name>.json``.
Files are read whole and overwritten whole; there is no locking, so two
processes writing the same collection can lose updates.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONTACTS_COLLECTION = "contacts"
TASKS_COLLECTION = "tasks"


class JsonStorage:
    """Load and save named collections as JSON documents."""

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        """Return the file path backing a collection."""
        return self.data_dir / f"{name}.json"

    def load(self, name: str) -> list[dict[str, Any]] | None:
        """Read a collection.

        Returns:
            The stored document, or None when the file does not exist yet.

        Raises:
            OSError: On I/O errors other than a missing file.
            json.JSONDecodeError: If the file is not valid JSON.
        """
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return json.loads(raw)

    def save(self, name: str, document: list[dict[str, Any]]) -> None:
        """Overwrite a collection with the full document."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug(f"Saved {len(document)} records to {path}")

    async def aload(self, name: str) -> list[dict[str, Any]] | None:
        """Async variant of :meth:`load` running the read in a worker thread."""
        return await asyncio.to_thread(self.load, name)

    async def asave(self, name: str, document: list[dict[str, Any]]) -> None:
        """Async variant of :meth:`save` running the write in a worker thread."""
        await asyncio.to_thread(self.save, name, document)
