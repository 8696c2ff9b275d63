#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class InvalidRuleError(Exception):
    """A recurrence rule that cannot be expanded (unknown frequency, out of
    range anchors or unparsable dates)."""


class ScheduleFileError(Exception):
    pass
