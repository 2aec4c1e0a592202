"""
detailing_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the ONLY way to obtain payroll configuration at runtime
    through ``get_active_config()``.  Returns a ``PayrollConfig`` whose
    ``IncentiveRules`` drive every engine call.

Architecture position:
    Configuration -- YAML-driven rule sets.  Sits above
    ``detailing_kernel`` and ``detailing_engines``; the kernel MUST NEVER
    import from ``detailing_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested rules file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ValueError`` -- unknown keys or invalid rule values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry containing the config id, version
    and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from detailing_config.loader import (
    compute_checksum,
    config_to_dict,
    load_yaml_file,
    parse_decimal,
    parse_payroll_config,
)
from detailing_modules.payroll.config import PayrollConfig

_logger = logging.getLogger("detailing_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "payroll_default.yaml"


def get_active_config(path: Path | str | None = None) -> PayrollConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Rules file to load.  Defaults to the shipped
            ``sets/payroll_default.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has unknown keys or invalid values.
    """
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    data = load_yaml_file(source)
    config = parse_payroll_config(data)
    checksum = compute_checksum(config)

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": data.get("config_id"),
            "config_version": data.get("version"),
            "checksum": checksum,
            "source": str(source),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "compute_checksum",
    "config_to_dict",
    "get_active_config",
    "load_yaml_file",
    "parse_decimal",
    "parse_payroll_config",
]
