"""Import an export document, replacing everything in the store.

The sequence is strictly linear:

    read -> parse -> validate marker -> clear store -> exercises -> profiles
    -> checkpoint -> workouts -> personal records -> 1RM history
    -> final checkpoint -> done

Everything up to and including marker validation is strict and happens before
the store is touched: a bad file never wipes good data. From the wipe onwards
the restore is best effort: records with broken references are skipped one by
one. A storage failure after the wipe propagates and can leave the store
partially repopulated; whatever was committed at the first checkpoint stays.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from fitledger.errors import MalformedDocument, NotARecognizedExport
from fitledger.services.cleanup import wipe_all
from fitledger.services.export import FORMAT_MARKER
from fitledger.services.records import (
    ExerciseRecord,
    OneRepMaxRecord,
    PersonalRecordRecord,
    UserProfileRecord,
    WorkoutRecord,
    parse_items,
)
from fitledger.services.restore import (
    Lookups,
    RestoreCounts,
    restore_exercises,
    restore_history,
    restore_personal_records,
    restore_profiles,
    restore_workouts,
)

logger = logging.getLogger(__name__)


class ImportStage(str, Enum):
    READ_BYTES = "read_bytes"
    PARSE_DOCUMENT = "parse_document"
    VALIDATE_FORMAT_MARKER = "validate_format_marker"
    CLEAR_STORE = "clear_store"
    RESTORE_EXERCISES = "restore_exercises"
    RESTORE_PROFILES = "restore_profiles"
    CHECKPOINT = "checkpoint"
    RESTORE_WORKOUTS = "restore_workouts"
    RESTORE_PERSONAL_RECORDS = "restore_personal_records"
    RESTORE_ONE_REP_MAX_HISTORY = "restore_one_rep_max_history"
    FINAL_CHECKPOINT = "final_checkpoint"
    DONE = "done"


@dataclass
class ImportSummary:
    stage: ImportStage = ImportStage.READ_BYTES
    counts: dict[str, RestoreCounts] = field(default_factory=dict)

    def advance(self, stage: ImportStage) -> None:
        logger.debug("Import stage: %s", stage.value)
        self.stage = stage


@dataclass
class _ParsedDocument:
    exercises: list[ExerciseRecord]
    profiles: list[UserProfileRecord]
    workouts: list[WorkoutRecord]
    personal_records: list[PersonalRecordRecord]
    history: list[OneRepMaxRecord]


def parse_document(data: bytes) -> dict[str, Any]:
    try:
        document = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("File is not valid JSON format")
        raise MalformedDocument() from exc
    if not isinstance(document, dict):
        logger.error("File is not a JSON object")
        raise MalformedDocument()
    return document


def validate_format_marker(document: dict[str, Any]) -> None:
    if FORMAT_MARKER not in document:
        logger.error("File doesn't appear to be a valid export")
        raise NotARecognizedExport()


def _parse_records(document: dict[str, Any]) -> _ParsedDocument:
    return _ParsedDocument(
        exercises=parse_items(ExerciseRecord, document.get("exercises"), "exercise"),
        profiles=parse_items(UserProfileRecord, document.get("userProfiles"), "user profile"),
        workouts=parse_items(WorkoutRecord, document.get("workouts"), "workout"),
        personal_records=parse_items(
            PersonalRecordRecord, document.get("personalRecords"), "personal record"
        ),
        history=parse_items(OneRepMaxRecord, document.get("oneRepMaxHistory"), "1RM history"),
    )


def import_document(data: bytes, session: Session) -> ImportSummary:
    """Replace the store's contents with the document in ``data``."""
    summary = ImportSummary()

    summary.advance(ImportStage.PARSE_DOCUMENT)
    document = parse_document(data)
    summary.advance(ImportStage.VALIDATE_FORMAT_MARKER)
    validate_format_marker(document)
    parsed = _parse_records(document)

    try:
        summary.advance(ImportStage.CLEAR_STORE)
        wipe_all(session)

        lookups = Lookups()
        summary.advance(ImportStage.RESTORE_EXERCISES)
        summary.counts["exercises"] = restore_exercises(parsed.exercises, lookups, session)
        summary.advance(ImportStage.RESTORE_PROFILES)
        summary.counts["userProfiles"] = restore_profiles(parsed.profiles, lookups, session)
        summary.advance(ImportStage.CHECKPOINT)
        session.commit()

        summary.advance(ImportStage.RESTORE_WORKOUTS)
        summary.counts["workouts"] = restore_workouts(parsed.workouts, lookups, session)
        summary.advance(ImportStage.RESTORE_PERSONAL_RECORDS)
        summary.counts["personalRecords"] = restore_personal_records(
            parsed.personal_records, lookups, session
        )
        summary.advance(ImportStage.RESTORE_ONE_REP_MAX_HISTORY)
        summary.counts["oneRepMaxHistory"] = restore_history(parsed.history, lookups, session)
        summary.advance(ImportStage.FINAL_CHECKPOINT)
        session.commit()
    except SQLAlchemyError:
        logger.exception("Import failed during %s", summary.stage.value)
        session.rollback()
        raise

    summary.advance(ImportStage.DONE)
    logger.info(
        "Data import completed: %s",
        ", ".join(f"{kind}={c.restored} (skipped {c.skipped})" for kind, c in summary.counts.items()),
    )
    return summary


def import_file(path: Path, session: Session) -> ImportSummary:
    logger.info("Starting data import from file: %s", path.name)
    return import_document(path.read_bytes(), session)
