#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
PACKAGE_NAME = "auditsched"
CONFIGS_PATH = f"pkg://{PACKAGE_NAME}.configs"
DEFAULT_HORIZON_DAYS = 90
"""How far ahead of the reference date a single expansion materialises dates."""
LAST_DAY_OF_MONTH = -1
LAST_WEEK_OF_MONTH = -1
DAYS_IN_WEEK = 7
RULES_FILE_EXTENSIONS = ("json", "nt")
SCHEDULE_DATE_FORMAT = "%Y-%m-%d"
SCHEDULE_TIME_FORMAT = "%H:%M"
