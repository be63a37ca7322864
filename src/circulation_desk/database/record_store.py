"""
Generic record store over a tabular document.

This is the data access layer every entity service builds on. A store is
parameterised by an :class:`EntitySchema` (the ordered column list) and a
pydantic record model, and turns a positional table into typed CRUD:

1. **Row mapping**: row cells are zipped with the schema columns; absent
   values are written as empty strings
2. **Lookup**: a linear scan matching column 0 against the id, first match
   wins
3. **Writes**: single-row append, read-modify-write of a whole row, and
   positional delete
4. **Header repair**: ``ensure_headers`` puts the expected header in row 0

No locking is attempted. Two callers updating the same row concurrently can
lose an update (last writer wins); usage is human-paced and the backing
documents offer no lock to take.

Every method returns an :class:`OperationResult`. A document that cannot be
resolved or opened yields ``RESOURCE_UNAVAILABLE`` with a message telling
the caller to run discovery.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar
from uuid import uuid4

from pydantic import ValidationError

from ..models.columns import EntitySchema
from ..models.record import Record
from ..models.result import ErrorCode, OperationResult, ResourceUnavailableError
from .documents import TabularDocument
from .locator import ResourceLocator

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


def generate_id() -> str:
    """Collision-resistant random id for new records."""
    return str(uuid4())


class RecordStore(Generic[RecordT]):
    """
    CRUD over the document holding one entity kind.

    Args:
        locator: Resolves and opens the backing document
        schema: Column order of the document
        model: Record model the rows are mapped onto
        id_factory: Produces ids for new records
    """

    def __init__(
        self,
        locator: ResourceLocator,
        schema: EntitySchema,
        model: type[RecordT],
        id_factory: Callable[[], str] = generate_id,
    ):
        self.locator = locator
        self.schema = schema
        self.model = model
        self.id_factory = id_factory

        # Field names keyed by both the snake_case name and the column alias
        self._field_names: dict[str, str] = {}
        for name, field in model.model_fields.items():
            self._field_names[name] = name
            if field.alias:
                self._field_names[field.alias] = name

    # === Row mapping ===

    def row_to_record(self, row: list[Any]) -> RecordT | None:
        """Map a row onto a record; rows shorter than the schema yield None."""
        if len(row) < self.schema.width:
            return None

        try:
            return self.model.model_validate(dict(zip(self.schema.columns, row, strict=False)))
        except ValidationError:
            return None

    def record_to_row(self, record: RecordT) -> list[str]:
        """Map a record onto a row in schema column order."""
        values = record.to_columns()
        return [values.get(column, "") for column in self.schema.columns]

    # === Reads ===

    def get_all(self) -> OperationResult[list[RecordT]]:
        """Read every data row, skipping the header and malformed rows."""
        try:
            rows = self._open().read_rows()
        except ResourceUnavailableError as e:
            return OperationResult.from_exception(e)

        records: list[RecordT] = []
        for index, row in enumerate(rows[1:], start=1):
            record = self.row_to_record(row)
            if record is None:
                logger.debug(
                    "Skipping malformed %s row %d (%d of %d columns)",
                    self.schema.label,
                    index,
                    len(row),
                    self.schema.width,
                )
                continue
            records.append(record)

        logger.debug("Read %d %s records", len(records), self.schema.label)
        return OperationResult.ok(records)

    def find_all(self, predicate: Callable[[RecordT], bool]) -> OperationResult[list[RecordT]]:
        """Return the records for which ``predicate`` holds, in row order."""
        result = self.get_all()
        if not result.success:
            return result
        return OperationResult.ok([record for record in result.data if predicate(record)])

    def get_by_id(self, id: str) -> OperationResult[RecordT]:
        """Find the first row whose column 0 equals ``id``."""
        try:
            rows = self._open().read_rows()
        except ResourceUnavailableError as e:
            return OperationResult.from_exception(e)

        for _, record in self._matches(rows, id):
            return OperationResult.ok(record)

        return self._not_found(id)

    # === Writes ===

    def create(self, fields: Mapping[str, Any]) -> OperationResult[RecordT]:
        """
        Append a new record with a generated id.

        Fields not supplied are written as empty strings; an ``id`` in
        ``fields`` is ignored.
        """
        try:
            values = self._normalize(fields)
        except KeyError as e:
            return OperationResult.fail(ErrorCode.VALIDATION_FAILED, f"Unknown field: {e.args[0]}")

        values.pop("id", None)
        data = {name: "" for name in self.model.model_fields}
        data.update(values)
        data["id"] = self.id_factory()
        record = self.model.model_validate(data)

        try:
            self._open().append_row(self.record_to_row(record))
        except ResourceUnavailableError as e:
            return OperationResult.from_exception(e)

        logger.info("Created %s %s", self.schema.label, record.id)
        return OperationResult.ok(record)

    def update(self, id: str, changes: Mapping[str, Any]) -> OperationResult[RecordT]:
        """
        Merge ``changes`` onto the stored record and write the full row back.

        This is a read-modify-write with no lock; a concurrent external edit
        of the same row between the read and the write is overwritten.
        """
        try:
            values = self._normalize(changes)
        except KeyError as e:
            return OperationResult.fail(ErrorCode.VALIDATION_FAILED, f"Unknown field: {e.args[0]}")

        values.pop("id", None)

        try:
            document = self._open()
            rows = document.read_rows()
            for index, existing in self._matches(rows, id):
                updated = self.model.model_validate({**existing.model_dump(), **values, "id": id})
                document.write_row(index, self.record_to_row(updated))
                logger.info("Updated %s %s", self.schema.label, id)
                return OperationResult.ok(updated)
        except ResourceUnavailableError as e:
            return OperationResult.from_exception(e)

        return self._not_found(id)

    def delete(self, id: str) -> OperationResult[None]:
        """Remove the matching row; later rows shift up."""
        try:
            document = self._open()
            rows = document.read_rows()
            for index, _ in self._matches(rows, id):
                document.delete_row(index)
                logger.info("Deleted %s %s", self.schema.label, id)
                return OperationResult.ok()
        except ResourceUnavailableError as e:
            return OperationResult.from_exception(e)

        return self._not_found(id)

    def ensure_headers(self) -> OperationResult[None]:
        """
        Make sure row 0 is the expected header.

        An empty document gets the header appended. A document whose first
        row differs gets a header inserted above it; existing rows are never
        overwritten.
        """
        expected = self.schema.header

        try:
            document = self._open()
            rows = document.read_rows()

            if not rows:
                document.append_row(expected)
                logger.info("Wrote header row to empty %s document", self.schema.label)
                return OperationResult.ok()

            current = [str(cell) for cell in rows[0]]
            if current[: len(expected)] != expected:
                document.insert_row_at_top(expected)
                logger.warning(
                    "Inserted header row above mismatched first row in %s document",
                    self.schema.label,
                )
        except ResourceUnavailableError as e:
            return OperationResult.from_exception(e)

        return OperationResult.ok()

    # === Helpers ===

    def _open(self) -> TabularDocument:
        return self.locator.open(self.schema.kind)

    def _matches(self, rows: list[list[Any]], id: str):
        """Yield ``(row index, record)`` for data rows whose id matches."""
        for index, row in enumerate(rows[1:], start=1):
            if not row or str(row[0]) != id:
                continue
            record = self.row_to_record(row)
            if record is not None:
                yield index, record

    def _normalize(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Key fields by model field name; raises KeyError for unknown keys."""
        values: dict[str, Any] = {}
        for key, value in fields.items():
            if key not in self._field_names:
                raise KeyError(key)
            values[self._field_names[key]] = value
        return values

    def _not_found(self, id: str) -> OperationResult:
        return OperationResult.fail(
            ErrorCode.NOT_FOUND, f"{self.schema.label} with ID {id} not found"
        )
