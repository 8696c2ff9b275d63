#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import json
import logging
from pathlib import Path
from typing import Any

import nestedtext as nt

from auditsched.constants import RULES_FILE_EXTENSIONS
from auditsched.exceptions import ScheduleFileError
from auditsched.schedule import RecurringAuditRule, ScheduledAudit

logger = logging.getLogger(__name__)


def load_json(path: str | Path):
    with open(path, "r") as f:
        data = json.load(f)
    return data


def load_nestedtext(opath: Path | str) -> Any:
    """Read the context of a NestedText file."""
    with open(opath, "r") as f:
        data = nt.load(f, top="any")
    return data


_LOADER_MAP = {"json": load_json, "nt": load_nestedtext}


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """Read the records stored in a JSON or NestedText file.

    A file holding a single record is read as a list with one element.

    Raises
    ------
    ScheduleFileError
        If the file does not exist or its extension is not supported.
    """
    path = Path(path)
    extension = path.suffix.lstrip(".")
    try:
        loader = _LOADER_MAP[extension]
    except KeyError:
        raise ScheduleFileError(
            f"Undefined loader for extension {extension!r}, "
            f"expected one of {RULES_FILE_EXTENSIONS}"
        )
    if not path.exists():
        raise ScheduleFileError(f"No such file: {path}")
    data = loader(path)
    if data is None or data == "":
        logger.info(f"No records found in {path}")
        return []
    if isinstance(data, list):
        return data
    return [data]


def load_rules(path: str | Path) -> list[RecurringAuditRule]:
    """Load recurring audit rules.

    Raises
    ------
    InvalidRuleError
        If any of the stored records is not a valid rule.
    """
    return [RecurringAuditRule.from_record(r) for r in load_records(path)]


def load_schedule(path: str | Path) -> list[ScheduledAudit]:
    return [ScheduledAudit.model_validate(r) for r in load_records(path)]
