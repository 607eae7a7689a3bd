"""Constants shared across the import pipeline."""

from __future__ import annotations

from django.db import models

DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_ROWS = 5000
LIST_SEPARATOR = "|"

# Row number of the first record: the header is row 1.
FIRST_DATA_ROW = 2


class ImportType(models.TextChoices):
    ITEMS = "items", "Items"
    FORMS = "forms", "Forms"
    BANKS = "banks", "Content Banks"
    SPEC_VERSION = "specVersion", "Spec Version Sections"
    SCORING = "scoring", "Scoring Model"


class ImportIssueCode:
    MALFORMED_INPUT = "MALFORMED_INPUT"
    EMPTY_INPUT = "EMPTY_INPUT"
    ROW_LIMIT_EXCEEDED = "ROW_LIMIT_EXCEEDED"
    UNKNOWN_IMPORT_TYPE = "UNKNOWN_IMPORT_TYPE"
    MISSING_REQUIRED_COLUMN = "MISSING_REQUIRED_COLUMN"
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"
    DUPLICATE_MATCHING_KEY = "DUPLICATE_MATCHING_KEY"
    LINEAGE_MISMATCH = "LINEAGE_MISMATCH"
    IGNORED_VALUE = "IGNORED_VALUE"
    DUPLICATE_STIMULUS = "DUPLICATE_STIMULUS"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    CONTEXT_MISMATCH = "CONTEXT_MISMATCH"
    REFERENCE_LOOKUP_FAILED = "REFERENCE_LOOKUP_FAILED"
    RECORDS_WILL_UPDATE = "RECORDS_WILL_UPDATE"
    UNMATCHED_CORRECT_ANSWER = "UNMATCHED_CORRECT_ANSWER"
    BATCH_WRITE_FAILURE = "BATCH_WRITE_FAILURE"
    GROUP_WRITE_FAILURE = "GROUP_WRITE_FAILURE"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"
    GATE_VIOLATION = "GATE_VIOLATION"


IMPORT_ISSUE_CODES = tuple(
    value for name, value in vars(ImportIssueCode).items() if name.isupper()
)


class ImportIssueSeverity(models.TextChoices):
    ERROR = "ERROR", "Error"
    WARNING = "WARNING", "Warning"


class ImportIssueStage(models.TextChoices):
    PARSE = "PARSE", "Parse"
    VALIDATE = "VALIDATE", "Validate"
    REFERENCE = "REFERENCE", "Reference"
    PROCESS = "PROCESS", "Process"


VALID_ITEM_TYPES = (
    "letter",
    "word",
    "sentence",
    "passage",
    "question",
    "prompt",
    "phoneme",
    "printed_word",
    "printed_affixed_word_with_base_context",
    "mcq",
    "spoken_onset_rime_pair",
    "word_pair",
    "syllable_word",
    "recall_sentence_unit",
    "mcq_item",
    "letter-name",
    "letter-sound",
    "cloze_blank",
)

VALID_SKILL_TAGS = (
    "main_idea",
    "key_detail",
    "inference",
    "vocabulary",
    "sequence",
    "cause_effect",
)

VALID_GENRES = ("narrative", "informational", "procedural")

VALID_GRADE_TAGS = (
    "K",
    "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12",
    "K-1", "1-2", "2-3", "3-4", "4-5", "5-6", "6-7", "6-8", "7-8", "9-12",
    "G1", "G2", "G3", "G4", "G5", "G6", "G7", "G8", "G2_3",
    "all",
)
