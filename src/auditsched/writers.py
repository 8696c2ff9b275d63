#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import nestedtext as nt
from inform import fatal, os_error
from pydantic import BaseModel

from auditsched.exceptions import ScheduleFileError


def save_json(data: Any, path: str | Path, indent: int = 4):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)


def save_nestedtext(data: Any, opath: Path | str):
    """Save data in NestedText format."""

    try:
        with open(opath, "w") as f:
            nt.dump(data, f, default=str)
    except nt.NestedTextError as e:
        e.terminate()
    except OSError as e:
        fatal(os_error(e))


_SAVER_MAP = {"json": save_json, "nt": save_nestedtext}


def save_models(models: Iterable[BaseModel], path: str | Path):
    """Save rules or scheduled audits to a JSON or NestedText file, chosen by the
    extension of `path`. Missing values are left out of NestedText files."""
    path = Path(path)
    extension = path.suffix.lstrip(".")
    try:
        saver = _SAVER_MAP[extension]
    except KeyError:
        raise ScheduleFileError(f"Undefined writer for extension {extension!r}")
    records = [
        m.model_dump(mode="json", exclude_none=extension == "nt") for m in models
    ]
    saver(records, path)
