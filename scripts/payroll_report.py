#!/usr/bin/env python3
"""
Print a month's payroll sheet from a YAML data file.

The data file holds the roster, service catalog, job feed and (optionally)
per-month deductions:

    staff:
      - {id: S1, name: Ravi, role: Washer, base_salary: "12000"}
    services:
      - {id: SV1, name: Foam Wash, sku: WSH-01, category: WASHING}
    jobs:
      - {id: J1, date: "2024-06-02", time_in: "10:15", vehicle_class: SEDAN,
         total: "800", service_ids: [SV1], assigned_staff_ids: [S1]}
    deductions:
      "2024-06":
        - {staff_id: S1, late_fine: "100"}

Everything is loaded into a throwaway SQLite database and read back through
PayrollService, so the sheet is exactly what the application would show.

Usage:
    python3 scripts/payroll_report.py --data shop.yaml --month 2024-06
    python3 scripts/payroll_report.py --data shop.yaml --month 2024-06 --json
    python3 scripts/payroll_report.py --data shop.yaml --month 2024-06 --rules rules.yaml
    python3 scripts/payroll_report.py --data shop.yaml --month 2024-06 --finalize
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from detailing_config import get_active_config, load_yaml_file, parse_decimal  # noqa: E402
from detailing_kernel.db import create_tables, init_engine_from_url, reset_engine, session_scope  # noqa: E402
from detailing_kernel.domain.dtos import (  # noqa: E402
    DeductionRecord,
    JobRecord,
    JobStatus,
    ServiceCatalogEntry,
    StaffMember,
    StaffRole,
)
from detailing_kernel.exceptions import DetailingKernelError  # noqa: E402
from detailing_kernel.logging_config import configure_logging  # noqa: E402
from detailing_modules.payroll import (  # noqa: E402
    PayrollService,
    PayrollSheet,
    StaticJobFeed,
    StaticServiceCatalog,
)

CLI_ACTOR_ID = UUID("00000000-0000-0000-0000-0000000000c1")

MONEY_COLUMNS = (
    ("Base", "base_salary"),
    ("Daily", "daily_limit_incentive"),
    ("Evening", "total_evening"),
    ("Sunday", "sunday_profit_share"),
    ("Referral", "referral_commission"),
    ("Premium", "premium_incentive"),
    ("Washing", "washing_pool_share"),
    ("Shift", "shift_bonus"),
    ("Gross", "gross_pay"),
    ("Deduct", "total_deduction"),
    ("Net", "net_pay"),
)


def _money(data: dict[str, Any], key: str, where: str) -> Decimal:
    return parse_decimal(data.get(key, "0"), f"{where}.{key}")


def parse_staff(rows: list[dict[str, Any]]) -> list[StaffMember]:
    return [
        StaffMember(
            id=str(r["id"]),
            name=str(r["name"]),
            role=StaffRole(r["role"]),
            base_salary=_money(r, "base_salary", "staff"),
            current_advance=_money(r, "current_advance", "staff"),
            loan_balance=_money(r, "loan_balance", "staff"),
            is_active=bool(r.get("is_active", True)),
        )
        for r in rows
    ]


def parse_services(rows: list[dict[str, Any]]) -> list[ServiceCatalogEntry]:
    return [
        ServiceCatalogEntry(
            id=str(r["id"]),
            name=str(r["name"]),
            sku=str(r.get("sku", "")),
            category=str(r.get("category", "")),
        )
        for r in rows
    ]


def parse_jobs(rows: list[dict[str, Any]]) -> list[JobRecord]:
    return [
        JobRecord(
            id=str(r["id"]),
            date=str(r["date"]),
            time_in=str(r.get("time_in", "")),
            vehicle_class=str(r.get("vehicle_class", "")),
            total=_money(r, "total", "jobs"),
            service_ids=tuple(str(s) for s in r.get("service_ids", ())),
            assigned_staff_ids=tuple(str(s) for s in r.get("assigned_staff_ids", ())),
            referred_by_staff_id=r.get("referred_by_staff_id"),
            status=JobStatus(r.get("status", JobStatus.INVOICED.value)),
        )
        for r in rows
    ]


def parse_deductions(rows: list[dict[str, Any]]) -> list[DeductionRecord]:
    return [
        DeductionRecord(
            staff_id=str(r["staff_id"]),
            late_fine=_money(r, "late_fine", "deductions"),
            leave_fine=_money(r, "leave_fine", "deductions"),
            advance_recovery=_money(r, "advance_recovery", "deductions"),
            loan_emi=_money(r, "loan_emi", "deductions"),
            other=_money(r, "other", "deductions"),
        )
        for r in rows
    ]


def sheet_to_dict(sheet: PayrollSheet) -> dict[str, Any]:
    return {
        "month": sheet.month,
        "status": sheet.status.value,
        "totals": {
            "base_salary": str(sheet.totals.base_salary),
            "incentives": str(sheet.totals.incentives),
            "deductions": str(sheet.totals.deductions),
            "net_pay": str(sheet.totals.net_pay),
            "staff_count": sheet.totals.staff_count,
        },
        "line_items": [item.to_snapshot() for item in sheet.line_items],
    }


def render_table(sheet: PayrollSheet) -> str:
    quant = Decimal("0.01")
    header = f"{'Staff':<18}{'Role':<16}" + "".join(f"{h:>11}" for h, _ in MONEY_COLUMNS)
    lines = [
        f"Payroll {sheet.month} [{sheet.status.value.upper()}]",
        header,
        "-" * len(header),
    ]
    for item in sheet.line_items:
        cells = "".join(
            f"{getattr(item, attr).quantize(quant):>11}" for _, attr in MONEY_COLUMNS
        )
        lines.append(f"{item.staff_name[:17]:<18}{item.role.value:<16}{cells}")
    t = sheet.totals
    lines.append("-" * len(header))
    lines.append(
        f"{t.staff_count} staff  base {t.base_salary.quantize(quant)}  "
        f"incentives {t.incentives.quantize(quant)}  "
        f"deductions {t.deductions.quantize(quant)}  "
        f"net {t.net_pay.quantize(quant)}"
    )
    return "\n".join(lines)


def build_sheet(
    data: dict[str, Any],
    month: str,
    rules_path: Path | None,
    finalize: bool,
) -> PayrollSheet:
    config = get_active_config(rules_path)
    init_engine_from_url("sqlite://")
    try:
        create_tables()
        with session_scope() as session:
            service = PayrollService(
                session,
                StaticJobFeed(parse_jobs(data.get("jobs") or [])),
                StaticServiceCatalog(parse_services(data.get("services") or [])),
                config=config,
            )
            for member in parse_staff(data.get("staff") or []):
                service.upsert_staff(member, CLI_ACTOR_ID)
            month_deductions = (data.get("deductions") or {}).get(month) or []
            for deduction in parse_deductions(month_deductions):
                service.set_deduction(month, deduction, CLI_ACTOR_ID)
            if finalize:
                service.finalize(month, CLI_ACTOR_ID)
            return service.get_payroll(month)
    finally:
        reset_engine()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print a month's payroll sheet from a YAML data file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--data", type=Path, required=True, help="YAML data file")
    parser.add_argument("--month", type=str, required=True, help="Payroll month YYYY-MM")
    parser.add_argument(
        "--rules",
        type=Path,
        default=None,
        help="Rules YAML (default: detailing_config/sets/payroll_default.yaml)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    parser.add_argument(
        "--finalize",
        action="store_true",
        help="Finalize the month before printing (snapshot view)",
    )
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    if not args.data.exists():
        print(f"ERROR: Data file not found: {args.data}")
        return 1

    try:
        sheet = build_sheet(load_yaml_file(args.data), args.month, args.rules, args.finalize)
    except (DetailingKernelError, ValueError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}")
        return 1

    if args.json:
        print(json.dumps(sheet_to_dict(sheet), indent=2))
    else:
        print(render_table(sheet))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
