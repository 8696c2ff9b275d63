#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from importlib.metadata import PackageNotFoundError, version  # pragma: no cover

from omegaconf import OmegaConf

try:
    # Change here if project is renamed and does not equal the package name
    dist_name = "audit-scheduler"
    __version__ = version(dist_name)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"
finally:
    del version, PackageNotFoundError


def _today() -> str:
    return datetime.date.today().isoformat()


# default reference date of the schedule generation configs
OmegaConf.register_new_resolver("today", _today, replace=True)
