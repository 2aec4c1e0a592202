"""
Payroll Module Service (``detailing_modules.payroll.service``).

Responsibility
--------------
Owns the monthly payroll lifecycle.  A month is DRAFT until it is
finalized: every draft read recomputes line items from the live roster,
job feed, service catalog and stored deductions.  Finalizing freezes the
computed line items as a ``PayrollRun`` keyed by month, recovers advance
and loan balances, and emits one aggregate labor expense transaction.

Architecture position
---------------------
**Modules layer** -- thin ERP glue.  ``PayrollService`` is the sole public
entry point for payroll lifecycle operations.  All pay arithmetic is
delegated to ``detailing_engines.compute_payroll``; reads go through
``PayrollSelector``.

Invariants enforced
-------------------
* Each public write method owns the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on any exception).
* Finalize is atomic: snapshot, balance recovery and expense transaction
  are committed together or not at all.
* One run per month.  Re-finalizing replaces the prior run; it is not an
  error and no history is kept.
* Deductions for a finalized month are locked.
* Balances never go below zero.

Failure modes
-------------
* ``InvalidMonthKeyError`` -- month is not ``YYYY-MM``.
* ``PayrollMonthFinalizedError`` -- deduction edit on a locked month;
  nothing is written.
* ``StaffNotFoundError`` -- deduction for a staff id not on the roster.
* ``PayrollRunNotFoundError`` -- ``get_run`` for a draft month.
* Unexpected exception  -> session rolled back, exception re-raised.

Usage::

    service = PayrollService(session, job_feed, catalog, clock=clock)
    sheet = service.get_payroll("2024-06")          # live draft
    service.set_deduction("2024-06", DeductionRecord("S1", late_fine=Decimal("100")), actor_id)
    run = service.finalize("2024-06", actor_id)     # frozen snapshot
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from detailing_engines import PayrollLineItem, compute_payroll, validate_month_key
from detailing_kernel.domain.clock import Clock, SystemClock
from detailing_kernel.domain.dtos import DeductionRecord, StaffMember
from detailing_kernel.exceptions import (
    PayrollMonthFinalizedError,
    PayrollRunNotFoundError,
    StaffNotFoundError,
)
from detailing_kernel.logging_config import LogContext, get_logger
from detailing_modules.payroll.config import PayrollConfig
from detailing_modules.payroll.feeds import JobFeed, ServiceCatalog
from detailing_modules.payroll.models import (
    ExpenseTransaction,
    PayrollRun,
    PayrollRunStatus,
    PayrollSheet,
    PayrollTotals,
)
from detailing_modules.payroll.orm import (
    DeductionModel,
    ExpenseTransactionModel,
    PayrollRunModel,
    StaffModel,
)
from detailing_modules.payroll.selectors import PayrollSelector

logger = get_logger("modules.payroll.service")

ZERO = Decimal("0")


class PayrollService:
    """
    Draft/finalize lifecycle for monthly payroll.

    Contract
    --------
    * ``compute_draft`` and the other reads have no side effects and may be
      called any number of times.
    * ``finalize`` is the only operation that touches balances or emits a
      transaction.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeds.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT post to ledger accounts; the expense transaction is the
      hand-off to accounting.
    * Does NOT keep a history of replaced runs.
    """

    def __init__(
        self,
        session: Session,
        job_feed: JobFeed,
        service_catalog: ServiceCatalog,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ):
        self._session = session
        self._job_feed = job_feed
        self._service_catalog = service_catalog
        self._config = config or PayrollConfig()
        self._clock = clock or SystemClock()
        self._selector = PayrollSelector(session)

    @property
    def config(self) -> PayrollConfig:
        return self._config

    # =========================================================================
    # Reads
    # =========================================================================

    def compute_draft(self, month: str) -> tuple[PayrollLineItem, ...]:
        """
        Recompute the month's line items from live data.

        Ignores any finalized run; use ``get_payroll`` for what a reader
        should see.
        """
        validate_month_key(month)
        items = compute_payroll(
            jobs=self._job_feed.list_jobs(),
            staff=self._selector.list_staff(),
            services=self._service_catalog.list_services(),
            deductions=self._selector.get_deductions(month),
            month=month,
            rules=self._config.rules,
        )
        logger.info("payroll_draft_computed", extra={
            "month": month,
            "staff_count": len(items),
            "total_net_pay": str(sum((i.net_pay for i in items), ZERO)),
        })
        return items

    def get_status(self, month: str) -> PayrollRunStatus:
        validate_month_key(month)
        if self._selector.is_finalized(month):
            return PayrollRunStatus.FINALIZED
        return PayrollRunStatus.DRAFT

    def get_payroll(self, month: str) -> PayrollSheet:
        """Finalized snapshot when one exists, otherwise the live draft."""
        validate_month_key(month)
        run = self._selector.get_run(month)
        if run is not None:
            return PayrollSheet(
                month=month,
                status=PayrollRunStatus.FINALIZED,
                line_items=run.line_items,
                totals=self.summarize(run.line_items),
                run=run,
            )
        items = self.compute_draft(month)
        return PayrollSheet(
            month=month,
            status=PayrollRunStatus.DRAFT,
            line_items=items,
            totals=self.summarize(items),
        )

    def get_deductions(self, month: str) -> dict[str, DeductionRecord]:
        validate_month_key(month)
        return self._selector.get_deductions(month)

    def get_run(self, month: str) -> PayrollRun:
        validate_month_key(month)
        run = self._selector.get_run(month)
        if run is None:
            raise PayrollRunNotFoundError(month)
        return run

    def list_runs(self) -> list[PayrollRun]:
        return self._selector.list_runs()

    def list_expense_transactions(self) -> list[ExpenseTransaction]:
        return self._selector.list_expense_transactions()

    @staticmethod
    def summarize(line_items: Iterable[PayrollLineItem]) -> PayrollTotals:
        """Column totals for a sheet."""
        base = incentives = deductions = net = ZERO
        count = 0
        for item in line_items:
            base += item.base_salary
            incentives += item.gross_incentives
            deductions += item.total_deduction
            net += item.net_pay
            count += 1
        return PayrollTotals(
            base_salary=base,
            incentives=incentives,
            deductions=deductions,
            net_pay=net,
            staff_count=count,
        )

    # =========================================================================
    # Roster
    # =========================================================================

    def upsert_staff(self, member: StaffMember, actor_id: UUID) -> StaffMember:
        """Insert or update a roster entry keyed by staff id."""
        try:
            row = self._session.scalars(
                select(StaffModel).where(StaffModel.staff_code == member.id)
            ).one_or_none()
            if row is None:
                self._session.add(StaffModel.from_dto(member, created_by_id=actor_id))
            else:
                row.name = member.name
                row.role = member.role.value
                row.base_salary = member.base_salary
                row.current_advance = member.current_advance
                row.loan_balance = member.loan_balance
                row.is_active = member.is_active
                row.updated_by_id = actor_id
            self._session.commit()
            logger.info("payroll_staff_upserted", extra={
                "staff_id": member.id,
                "role": member.role.value,
                "inserted": row is None,
            })
            return member
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Deductions
    # =========================================================================

    def set_deduction(
        self,
        month: str,
        deduction: DeductionRecord,
        actor_id: UUID,
    ) -> DeductionRecord:
        """
        Create or replace one staff member's deductions for a DRAFT month.

        Raises:
            PayrollMonthFinalizedError: the month is finalized.
            StaffNotFoundError: the staff id is not on the roster.
        """
        validate_month_key(month)
        with LogContext.bind(month=month, actor_id=str(actor_id)):
            try:
                if self._selector.is_finalized(month):
                    logger.warning("deduction_rejected_month_finalized", extra={
                        "staff_id": deduction.staff_id,
                    })
                    raise PayrollMonthFinalizedError(month, deduction.staff_id)
                if not self._selector.staff_exists(deduction.staff_id):
                    raise StaffNotFoundError(deduction.staff_id)

                row = self._session.scalars(
                    select(DeductionModel).where(
                        DeductionModel.month == month,
                        DeductionModel.staff_code == deduction.staff_id,
                    )
                ).one_or_none()
                if row is None:
                    self._session.add(
                        DeductionModel.from_dto(deduction, month, created_by_id=actor_id)
                    )
                else:
                    row.apply(deduction, updated_by_id=actor_id)
                self._session.commit()

                logger.info("deduction_recorded", extra={
                    "staff_id": deduction.staff_id,
                    "total_deduction": str(deduction.total),
                })
                return deduction
            except Exception:
                self._session.rollback()
                raise

    # =========================================================================
    # Finalize
    # =========================================================================

    def finalize(self, month: str, actor_id: UUID) -> PayrollRun:
        """
        Freeze the month's payroll.

        Recomputes the draft, replaces any existing run for the month,
        reduces advance and loan balances by the deducted amounts (floored
        at zero) and emits one expense transaction for the total net pay.
        All of it commits as a unit.
        """
        validate_month_key(month)
        with LogContext.bind(month=month, actor_id=str(actor_id)):
            try:
                items = self.compute_draft(month)
                run = PayrollRun(
                    month=month,
                    generated_at=self._clock.now(),
                    total_amount=sum((i.net_pay for i in items), ZERO),
                    line_items=items,
                )

                with LogContext.bind(run_id=str(run.id)):
                    replaced = self._replace_run(run, actor_id)
                    self._recover_balances(items, actor_id)
                    transaction = self._emit_expense_transaction(run, actor_id)
                    self._session.commit()

                    logger.info("payroll_finalized", extra={
                        "run_id": str(run.id),
                        "staff_count": run.staff_count,
                        "total_amount": str(run.total_amount),
                        "transaction_id": str(transaction.id),
                        "replaced_prior_run": replaced,
                    })
                return run
            except Exception:
                self._session.rollback()
                logger.warning("payroll_finalize_rolled_back")
                raise

    def _replace_run(self, run: PayrollRun, actor_id: UUID) -> bool:
        prior = self._session.scalars(
            select(PayrollRunModel).where(PayrollRunModel.month == run.month)
        ).one_or_none()
        if prior is not None:
            logger.info("payroll_run_replaced", extra={
                "prior_run_id": str(prior.id),
                "prior_total_amount": str(prior.total_amount),
            })
            self._session.delete(prior)
            # Unique month constraint: the delete must reach the DB first.
            self._session.flush()
        self._session.add(PayrollRunModel.from_dto(run, created_by_id=actor_id))
        return prior is not None

    def _recover_balances(
        self,
        items: Iterable[PayrollLineItem],
        actor_id: UUID,
    ) -> None:
        for item in items:
            advance = item.deductions.advance_recovery
            emi = item.deductions.loan_emi
            if not advance and not emi:
                continue
            row = self._session.scalars(
                select(StaffModel).where(StaffModel.staff_code == item.staff_id)
            ).one()
            row.current_advance = max(ZERO, row.current_advance - advance)
            row.loan_balance = max(ZERO, row.loan_balance - emi)
            row.updated_by_id = actor_id
            logger.debug("staff_balances_recovered", extra={
                "staff_id": item.staff_id,
                "advance_recovery": str(advance),
                "loan_emi": str(emi),
                "current_advance": str(row.current_advance),
                "loan_balance": str(row.loan_balance),
            })

    def _emit_expense_transaction(
        self,
        run: PayrollRun,
        actor_id: UUID,
    ) -> ExpenseTransaction:
        transaction = ExpenseTransaction(
            tx_date=self._clock.now().date(),
            amount=run.total_amount,
            category=self._config.labor_expense_category,
            method=self._config.payment_method,
            description=(
                f"Staff Payroll Execution - {run.staff_count} Employees ({run.month})"
            ),
            reference_id=run.id,
        )
        self._session.add(
            ExpenseTransactionModel.from_dto(transaction, created_by_id=actor_id)
        )
        logger.info("payroll_expense_emitted", extra={
            "transaction_id": str(transaction.id),
            "amount": str(transaction.amount),
            "category": transaction.category,
        })
        return transaction

