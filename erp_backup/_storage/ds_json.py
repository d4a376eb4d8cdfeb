"""JSON file document store: one file per collection under the working directory."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from ..base import BaseDocumentStore, Document
from ..exceptions import StoreUnavailable
from .._utils import logger


@dataclass
class JsonDocumentStore(BaseDocumentStore):
    """Document store persisted as ``<working_dir>/<namespace>/<collection>.json``.

    Every commit rewrites the collection file through a temporary file and
    ``os.replace``, so a chunk is either fully on disk or not at all.
    """

    def __post_init__(self):
        working_dir = self.global_config.get("working_dir", "./erp_backup_data")
        self._root = Path(working_dir) / self.namespace
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def identity(self) -> str:
        return f"json:{self._root.resolve()}"

    def _file(self, collection: str) -> Path:
        return self._root / f"{collection}.json"

    def _load(self, collection: str) -> Dict[str, Document]:
        path = self._file(collection)
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailable("json", f"cannot read {path.name}: {e}") from e

    def _save(self, collection: str, data: Dict[str, Document]) -> None:
        path = self._file(collection)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, default=str)
        os.replace(tmp_path, path)

    async def read_all(self, collection: str) -> Dict[str, Document]:
        if not self._root.is_dir():
            raise StoreUnavailable("json", f"working directory {self._root} is missing")
        return self._load(collection)

    async def write_chunk(self, collection: str, documents: Dict[str, Document], merge: bool) -> None:
        self._check_chunk_size(len(documents))
        data = self._load(collection)
        for doc_id, fields in documents.items():
            if merge and doc_id in data:
                data[doc_id] = {**data[doc_id], **fields}
            else:
                data[doc_id] = dict(fields)
        self._save(collection, data)
        logger.debug(f"Committed {len(documents)} documents to {collection}")

    async def delete_chunk(self, collection: str, doc_ids: List[str]) -> None:
        self._check_chunk_size(len(doc_ids))
        data = self._load(collection)
        for doc_id in doc_ids:
            data.pop(doc_id, None)
        self._save(collection, data)

    async def check_health(self) -> bool:
        return self._root.is_dir() and os.access(self._root, os.W_OK)
