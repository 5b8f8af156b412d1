#!/usr/bin/env python3
"""
Storage collaborators for film documents

The importer never touches the filesystem directly. It talks to a vault:
paths are '/'-separated and relative to the vault root, the same way notes
apps address files.

FileSystemVault writes real files under a root directory.
InMemoryVault keeps documents in a dict.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

logger = logging.getLogger(__name__)


def join_path(folder: str, name: str) -> str:
    """Join a vault folder and a file name ('' folder means the vault root)"""
    folder = folder.strip('/')
    return f"{folder}/{name}" if folder else name


class FileSystemVault:
    """Vault backed by a directory on disk"""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / path.strip('/')

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def read(self, path: str) -> str:
        return self._resolve(path).read_text(encoding='utf-8')

    def write(self, path: str, text: str):
        """Overwrite an existing document"""
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(f"Cannot modify missing document: {path}")
        target.write_text(text, encoding='utf-8')

    def create(self, path: str, text: str):
        """Create a new document; refuses to overwrite"""
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(f"Document already exists: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding='utf-8')
        logger.debug(f"Created {target}")

    def create_folder(self, folder: str):
        self._resolve(folder).mkdir(parents=True, exist_ok=True)

    def list_children(self, folder: str) -> List[str]:
        """Names of the entries directly inside a folder (sorted)"""
        directory = self._resolve(folder)
        if not directory.is_dir():
            return []
        return sorted(child.name for child in directory.iterdir())


class InMemoryVault:
    """Vault that keeps documents in memory"""

    def __init__(self, documents: Optional[Dict[str, str]] = None):
        self.documents: Dict[str, str] = dict(documents or {})
        self.folders: Set[str] = set()
        self.writes = 0

    def exists(self, path: str) -> bool:
        path = path.strip('/')
        return path in self.documents or path in self.folders

    def read(self, path: str) -> str:
        try:
            return self.documents[path.strip('/')]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write(self, path: str, text: str):
        path = path.strip('/')
        if path not in self.documents:
            raise FileNotFoundError(f"Cannot modify missing document: {path}")
        self.documents[path] = text
        self.writes += 1

    def create(self, path: str, text: str):
        path = path.strip('/')
        if path in self.documents:
            raise FileExistsError(f"Document already exists: {path}")
        self.documents[path] = text
        self.writes += 1

    def create_folder(self, folder: str):
        folder = folder.strip('/')
        if folder:
            self.folders.add(folder)

    def list_children(self, folder: str) -> List[str]:
        prefix = folder.strip('/')
        prefix = f"{prefix}/" if prefix else ''
        names = set()
        for path in list(self.documents) + list(self.folders):
            if path.startswith(prefix) and path != prefix.rstrip('/'):
                names.add(path[len(prefix):].split('/', 1)[0])
        return sorted(names)
