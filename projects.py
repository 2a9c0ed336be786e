"""
Project store.

A project document holds the declared models of its template plus a
`data` mapping of model name -> ordered list of open-schema records.
Records are addressed by their current position in that list.

Every mutation loads the document, edits the list in memory and writes
the whole document back; concurrent writers are not coordinated and the
last save wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pymongo.database import Database

from database import create_document, to_object_id
from errors import BadRequest, NotFound
from schemas import Project, ProjectOut, ProjectTemplate, Record

logger = logging.getLogger(__name__)


def _parse_index(index: Union[int, str]) -> Optional[int]:
    if isinstance(index, int):
        return index if index >= 0 else None
    # Plain ASCII digits only: int() would also take "1_0", " +1" or "\u0661"
    if isinstance(index, str) and index.isascii() and index.isdigit():
        return int(index)
    return None


def _check_model_name(model: str) -> None:
    # Mongo cannot store these as document keys
    if not model or "." in model or model.startswith("$") or "\x00" in model:
        raise BadRequest("Invalid model name")


def serialize_project(doc: Dict[str, Any]) -> ProjectOut:
    return ProjectOut(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        description=doc.get("description", ""),
        models=doc.get("models", []),
        data=doc.get("data") or {},
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


class ProjectStore:
    collection_name = "project"

    def __init__(self, db: Database):
        self.db = db
        self.collection = db[self.collection_name]

    def create(self, template: ProjectTemplate) -> ProjectOut:
        project = Project(
            name=template.name,
            description=template.description,
            models=template.models,
            data={},
        )
        doc = create_document(self.db, self.collection_name, project.model_dump())
        logger.info("Created project %s (%s)", doc["_id"], project.name)
        return serialize_project(doc)

    def get_by_id(self, project_id: str) -> ProjectOut:
        doc = self._find(project_id)
        if doc is None:
            raise NotFound("Not found")
        return serialize_project(doc)

    def append_record(self, project_id: str, model: str, record: Record) -> List[Record]:
        _check_model_name(model)
        doc = self._load(project_id)
        data = doc["data"] = doc.get("data") or {}
        records = data.get(model) or []
        data[model] = records
        records.append(record)
        self._save(doc)
        logger.debug("Appended record to %s/%s (%d total)", project_id, model, len(records))
        return records

    def list_records(self, project_id: str, model: str) -> List[Record]:
        doc = self._load(project_id)
        return (doc.get("data") or {}).get(model) or []

    def update_record(
        self, project_id: str, model: str, index: Union[int, str], patch: Record
    ) -> List[Record]:
        doc = self._load(project_id)
        records = (doc.get("data") or {}).get(model) or []
        position = _parse_index(index)
        if position is None or position >= len(records):
            raise NotFound("Record not found")

        records[position] = {**records[position], **patch}
        self._save(doc)
        logger.debug("Updated record %d of %s/%s", position, project_id, model)
        return records

    def delete_record(self, project_id: str, model: str, index: Union[int, str]) -> List[Record]:
        doc = self._load(project_id)
        records = (doc.get("data") or {}).get(model) or []
        position = _parse_index(index)
        if position is None or position >= len(records):
            raise NotFound("Record not found")

        del records[position]
        self._save(doc)
        logger.debug("Deleted record %d of %s/%s", position, project_id, model)
        return records

    def _find(self, project_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(project_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def _load(self, project_id: str) -> Dict[str, Any]:
        doc = self._find(project_id)
        if doc is None:
            raise NotFound("Project not found")
        return doc

    def _save(self, doc: Dict[str, Any]) -> None:
        doc["updated_at"] = datetime.now(timezone.utc)
        self.collection.replace_one({"_id": doc["_id"]}, doc)
