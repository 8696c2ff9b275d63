#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging
from collections import defaultdict
from collections.abc import Mapping

import hydra
from omegaconf import DictConfig, OmegaConf

from auditsched.constants import CONFIGS_PATH
from auditsched.exceptions import InvalidRuleError
from auditsched.readers import load_records, load_schedule
from auditsched.schedule import (
    RecurringAuditRule,
    ScheduledAudit,
    generate_scheduled_audits,
    mark_generated,
)
from auditsched.writers import save_models

logger = logging.getLogger(__name__)


def _existing_dates(cfg: DictConfig) -> dict[int | None, set[datetime.date]]:
    """Dates already scheduled, by the rule that generated them."""
    existing = defaultdict(set)
    if not cfg.existing_schedule_file:
        return existing
    for audit in load_schedule(cfg.existing_schedule_file):
        existing[audit.recurring_rule_id].add(audit.scheduled_date)
    return existing


def generate(cfg: DictConfig) -> list[ScheduledAudit]:
    """Generate the audits for all active rules in `cfg.rules_file` and write
    them to `cfg.out_file`."""
    if cfg.debug:
        logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    reference_now = (
        datetime.date.fromisoformat(str(cfg.reference_now))
        if cfg.reference_now
        else datetime.date.today()
    )
    existing = _existing_dates(cfg)
    audits, rules, n_invalid = [], [], 0
    for i, record in enumerate(load_records(cfg.rules_file)):
        try:
            rule = RecurringAuditRule.from_record(record)
        except InvalidRuleError as e:
            if not cfg.skip_invalid:
                raise
            n_invalid += 1
            rule_id = record.get("id", i) if isinstance(record, Mapping) else i
            logger.warning(f"Skipping invalid rule {rule_id}: {e}")
            continue
        new_audits = generate_scheduled_audits(
            rule,
            horizon_days=cfg.horizon_days,
            reference_now=reference_now,
            existing=existing.get(rule.id, ()) if rule.id is not None else (),
        )
        logger.info(
            f"Rule {rule.id} ({rule.recurrence.summary}): "
            f"{len(new_audits)} new audits"
        )
        audits.extend(new_audits)
        rules.append(mark_generated(rule, new_audits))

    audits.sort(key=lambda a: (a.scheduled_date, a.store_id))
    save_models(audits, cfg.out_file)
    if cfg.updated_rules_file:
        save_models(rules, cfg.updated_rules_file)
        logger.info(f"Updated rules written to {cfg.updated_rules_file}")
    if n_invalid > 0:
        logger.warning(f"{n_invalid} invalid rules were skipped")
    logger.info(
        f"{len(audits)} audits scheduled until "
        f"{reference_now + datetime.timedelta(days=cfg.horizon_days)} "
        f"written to {cfg.out_file}"
    )
    return audits


@hydra.main(config_name="generate", config_path=CONFIGS_PATH, version_base=None)
def generate_schedule(cfg: DictConfig):
    generate(cfg)


if __name__ == "__main__":
    generate_schedule()
