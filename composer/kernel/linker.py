"""
Composer Kernel — Linker

Pure function: (configs, datas) → LinkedRecord list
No side effects. No IO.

Data entries whose config_id has no matching configuration are dropped:
the CMS does not enforce the foreign key, and orphaned content must not
break a page.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from composer.kernel.types import ConfigEntry, DataEntry, LinkedRecord, LinkResult, Warning

logger = logging.getLogger(__name__)


def link(configs: Iterable[ConfigEntry], datas: Iterable[DataEntry]) -> list[LinkedRecord]:
    """Join data entries to their configuration. Output follows data order."""
    return link_with_report(configs, datas).records


def link_with_report(configs: Iterable[ConfigEntry], datas: Iterable[DataEntry]) -> LinkResult:
    """
    Same join as link(), plus the warnings collected along the way.

    - duplicate config ids: last one wins (DUPLICATE_CONFIG_ID)
    - missing or dangling config_id: data entry dropped (MISSING_REFERENCE)
    - several data entries on one config: all kept, flagged (DUPLICATE_CONFIG_REFERENCE)
    """
    warnings: list[Warning] = []
    by_id = index_configs(configs, warnings)

    records: list[LinkedRecord] = []
    referenced_by: dict[str, str] = {}

    for data in datas:
        config = by_id.get(data.config_id) if data.config_id is not None else None
        if config is None:
            logger.debug("linker: dropped orphan data entry %s (configId=%r)", data.id, data.config_id)
            warnings.append(
                Warning(
                    code="MISSING_REFERENCE",
                    message=f"Data entry '{data.id}' references unknown config '{data.config_id}'",
                    details={"data_id": data.id, "config_id": data.config_id},
                )
            )
            continue

        first = referenced_by.get(config.id)
        if first is not None:
            logger.warning(
                "linker: config %s referenced by more than one data entry (%s, %s)",
                config.id,
                first,
                data.id,
            )
            warnings.append(
                Warning(
                    code="DUPLICATE_CONFIG_REFERENCE",
                    message=f"Config '{config.id}' is referenced by '{first}' and '{data.id}'",
                    details={"config_id": config.id, "data_ids": [first, data.id]},
                )
            )
        else:
            referenced_by[config.id] = data.id

        records.append(LinkedRecord(config=config, data=data))

    return LinkResult(records=records, warnings=warnings)


def index_configs(
    configs: Iterable[ConfigEntry],
    warnings: list[Warning] | None = None,
) -> dict[str, ConfigEntry]:
    """Map config id → entry. Later duplicates replace earlier ones."""
    by_id: dict[str, ConfigEntry] = {}
    for config in configs:
        if config.id in by_id and warnings is not None:
            warnings.append(
                Warning(
                    code="DUPLICATE_CONFIG_ID",
                    message=f"Config id '{config.id}' appears more than once; last one wins",
                    details={"config_id": config.id},
                )
            )
        by_id[config.id] = config
    return by_id


def index_records(records: Iterable[LinkedRecord]) -> dict[str, LinkedRecord]:
    """Map config id → record, for resolving cross-record references."""
    return {record.config.id: record for record in records}
