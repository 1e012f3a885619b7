"""
AgreementService tests: creation, month queries and date-range reconciliation.

Verifies:
- Moving the end date later clones the old end month into the new months
- Moving a bound inward destroys rows outside the new range
- Templates are purged once the range is complete
- Seeding distributes templates over every budget month
- A failed edit rolls back both the dates and the budget rows
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from retainer_kernel.domain.budgets import BudgetKind
from retainer_kernel.domain.months import Month
from retainer_kernel.exceptions import (
    AgreementNotFoundError,
    InvalidAgreementError,
    InvalidBudgetError,
    ReconciliationError,
)
from retainer_kernel.models.budget import LaborBudget


def periods(budget_selector, agreement_id, kind=BudgetKind.LABOR):
    return [
        (b.year, b.month)
        for b in budget_selector.all_budgets(kind, agreement_id)
        if not b.is_template
    ]


class TestCreateAgreement:

    def test_create_and_get(self, agreement_service, test_actor_id):
        info = agreement_service.create_agreement(
            "  Monthly support  ", test_actor_id,
            start_date=date(2010, 1, 15), end_date=date(2010, 3, 10),
        )

        fetched = agreement_service.get_agreement(info.id)
        assert fetched.title == "Monthly support"
        assert fetched.short_type == "R"
        assert fetched.status == "open"
        assert fetched.beginning_date == date(2010, 1, 1)
        assert fetched.ending_date == date(2010, 3, 31)

    def test_blank_title_rejected(self, agreement_service, test_actor_id):
        with pytest.raises(InvalidAgreementError):
            agreement_service.create_agreement("   ", test_actor_id)

    def test_unknown_agreement(self, agreement_service):
        with pytest.raises(AgreementNotFoundError) as exc_info:
            agreement_service.get_agreement(uuid4())
        assert exc_info.value.code == "AGREEMENT_NOT_FOUND"

    def test_delete_cascades_to_budgets(self, session, agreement_service, create_agreement,
                                        create_budget):
        agreement = create_agreement()
        create_budget(agreement, year=2010, month=1)
        create_budget(agreement, BudgetKind.OVERHEAD)
        session.commit()

        agreement_service.delete_agreement(agreement.id)

        assert session.query(LaborBudget).count() == 0


class TestMonthQueries:

    def test_months(self, agreement_service, test_actor_id):
        info = agreement_service.create_agreement(
            "Support", test_actor_id, start_date=date(2010, 1, 1), end_date=date(2010, 4, 30),
        )

        assert agreement_service.months(info.id) == [
            date(2010, 1, 1), date(2010, 2, 1), date(2010, 3, 1),
        ]
        assert agreement_service.months_before(info.id, date(2010, 2, 1)) == [date(2010, 1, 1)]
        assert agreement_service.months_after(info.id, date(2010, 2, 1)) == [date(2010, 3, 1)]
        assert agreement_service.within_date_range(info.id, date(2010, 4, 30))
        assert not agreement_service.within_date_range(info.id, date(2010, 5, 1))

    def test_months_empty_without_dates(self, agreement_service, test_actor_id):
        info = agreement_service.create_agreement("Undated", test_actor_id)
        assert agreement_service.months(info.id) == []
        assert not agreement_service.within_date_range(info.id, date(2010, 1, 1))

    def test_current_period(self, agreement_service, deterministic_clock):
        assert agreement_service.current_date() == date(2010, 2, 15)
        assert agreement_service.current_period() == "February 2010"

        deterministic_clock.set_time(datetime(2011, 1, 3, 9, 0, tzinfo=timezone.utc))

        assert agreement_service.current_date() == date(2011, 1, 3)
        assert agreement_service.current_period() == "January 2011"


class TestUpdateDates:

    def test_extend_end_clones_previous_end_month(self, agreement_service, create_agreement,
                                                  create_budget, budget_selector, test_actor_id):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 2, 28))
        create_budget(agreement, year=2010, month=1, amount=Decimal("999"))
        create_budget(agreement, year=2010, month=2, amount=Decimal("100"), hours=Decimal("10"))

        agreement_service.update_dates(agreement.id, test_actor_id, end_date=date(2010, 4, 30))

        assert periods(budget_selector, agreement.id) == [(2010, 1), (2010, 2), (2010, 3)]
        (march,) = budget_selector.budgets_at(BudgetKind.LABOR, agreement.id, Month(2010, 3))
        assert march.budget_amount == Decimal("100")
        assert march.hours == Decimal("10")
        assert march.created_by_id == test_actor_id

    def test_shrink_back_destroys_later_months(self, agreement_service, create_agreement,
                                               create_budget, budget_selector, test_actor_id):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 2, 28))
        create_budget(agreement, year=2010, month=2, amount=Decimal("100"))
        agreement_service.update_dates(agreement.id, test_actor_id, end_date=date(2010, 5, 31))
        assert periods(budget_selector, agreement.id) == [(2010, 2), (2010, 3), (2010, 4)]

        agreement_service.update_dates(agreement.id, test_actor_id, end_date=date(2010, 2, 28))

        assert periods(budget_selector, agreement.id) == [(2010, 2)]

    def test_extend_start_clones_previous_start_month(self, agreement_service, create_agreement,
                                                      create_budget, budget_selector, test_actor_id):
        agreement = create_agreement(date(2010, 3, 1), date(2010, 5, 31))
        create_budget(agreement, BudgetKind.OVERHEAD, 2010, 3, amount=Decimal("30"))

        agreement_service.update_dates(agreement.id, test_actor_id, start_date=date(2010, 1, 10))

        assert periods(budget_selector, agreement.id, BudgetKind.OVERHEAD) == [
            (2010, 1), (2010, 2), (2010, 3),
        ]

    def test_undated_rows_purged_once_range_complete(self, agreement_service, create_agreement,
                                                     create_budget, budget_selector, test_actor_id):
        agreement = create_agreement(date(2010, 1, 1), None)
        create_budget(agreement, amount=Decimal("200"))
        create_budget(agreement, BudgetKind.OVERHEAD, amount=Decimal("20"))

        agreement_service.update_dates(agreement.id, test_actor_id, end_date=date(2010, 4, 30))

        assert budget_selector.undated(BudgetKind.LABOR, agreement.id) == []
        assert budget_selector.undated(BudgetKind.OVERHEAD, agreement.id) == []

    def test_incomplete_range_keeps_budgets(self, agreement_service, create_agreement,
                                            create_budget, budget_selector, test_actor_id):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 4, 30))
        create_budget(agreement, year=2010, month=1)
        create_budget(agreement)

        agreement_service.update_dates(agreement.id, test_actor_id, end_date=None)

        assert len(budget_selector.all_budgets(BudgetKind.LABOR, agreement.id)) == 2
        assert agreement_service.get_agreement(agreement.id).end_date is None

    def test_start_after_end_empties_ledger(self, agreement_service, create_agreement,
                                            create_budget, budget_selector, test_actor_id):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 4, 30))
        for month in (1, 2, 3):
            create_budget(agreement, year=2010, month=month, amount=Decimal("100"))
        create_budget(agreement, BudgetKind.OVERHEAD, 2010, 2, amount=Decimal("20"))
        create_budget(agreement, amount=Decimal("200"))

        info = agreement_service.update_dates(agreement.id, test_actor_id,
                                              start_date=date(2010, 6, 1))

        assert info.start_date == date(2010, 6, 1)
        assert agreement_service.months(agreement.id) == []
        assert budget_selector.all_budgets(BudgetKind.LABOR, agreement.id) == []
        assert budget_selector.all_budgets(BudgetKind.OVERHEAD, agreement.id) == []

    def test_unchanged_dates_are_noop(self, agreement_service, create_agreement, create_budget,
                                      budget_selector, test_actor_id, captured_logs):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 4, 30))
        create_budget(agreement)

        agreement_service.update_dates(
            agreement.id, test_actor_id, start_date=date(2010, 1, 1), end_date=date(2010, 4, 30),
        )

        assert len(budget_selector.undated(BudgetKind.LABOR, agreement.id)) == 1
        assert not any(r["message"] == "agreement_dates_updated" for r in captured_logs())

    def test_update_records_actor_and_logs(self, agreement_service, create_agreement,
                                           test_actor_id, captured_logs):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 2, 28))
        editor = uuid4()

        agreement_service.update_dates(agreement.id, editor, end_date=date(2010, 6, 30))

        assert agreement.updated_by_id == editor
        updated = [r for r in captured_logs() if r["message"] == "agreement_dates_updated"]
        assert len(updated) == 1
        assert updated[0]["agreement_id"] == str(agreement.id)
        assert updated[0]["actor_id"] == str(editor)
        assert updated[0]["new_end"] == "2010-06-30"

    def test_failure_rolls_back_dates_and_rows(self, session, agreement_service, create_agreement,
                                               create_budget, budget_selector, test_actor_id,
                                               captured_logs):
        agreement = create_agreement(date(2010, 1, 1), date(2010, 2, 28))
        create_budget(agreement, year=2010, month=1, amount=Decimal("100"))
        # Written straight to storage; cloning it trips ledger validation
        create_budget(agreement, year=2010, month=2, amount=Decimal("-5"))
        create_budget(agreement, amount=Decimal("7"))
        session.commit()

        with pytest.raises(ReconciliationError) as exc_info:
            agreement_service.update_dates(agreement.id, test_actor_id, end_date=date(2010, 5, 31))

        assert exc_info.value.stage == "update_dates"
        assert isinstance(exc_info.value.__cause__, InvalidBudgetError)
        assert agreement_service.get_agreement(agreement.id).end_date == date(2010, 2, 28)
        assert periods(budget_selector, agreement.id) == [(2010, 1), (2010, 2)]
        assert len(budget_selector.undated(BudgetKind.LABOR, agreement.id)) == 1
        assert any(r["message"] == "reconciliation_failed" for r in captured_logs())


class TestSeedPeriods:

    def test_templates_distributed_over_months(self, agreement_service, budget_selector,
                                               test_actor_id):
        info = agreement_service.create_agreement(
            "Support", test_actor_id, start_date=date(2010, 1, 1), end_date=date(2010, 4, 30),
        )
        agreement_service.add_template_budget(
            info.id, BudgetKind.LABOR, test_actor_id, amount=Decimal("200"), hours=Decimal("20"),
        )

        delta = agreement_service.create_budgets_for_periods(info.id, test_actor_id)

        assert len(delta.creates) == 3
        assert periods(budget_selector, info.id) == [(2010, 1), (2010, 2), (2010, 3)]
        assert budget_selector.undated(BudgetKind.LABOR, info.id) == []
        assert budget_selector.sum_amount(BudgetKind.LABOR, info.id) == Decimal("600")
        assert budget_selector.sum_hours(BudgetKind.LABOR, info.id) == Decimal("60")

    def test_seeding_waits_for_complete_range(self, agreement_service, budget_selector,
                                              test_actor_id):
        info = agreement_service.create_agreement("Open ended", test_actor_id,
                                                  start_date=date(2010, 1, 1))
        agreement_service.add_template_budget(info.id, BudgetKind.OVERHEAD, test_actor_id,
                                              amount=Decimal("50"))

        delta = agreement_service.create_budgets_for_periods(info.id, test_actor_id)

        assert delta.is_empty
        assert len(budget_selector.undated(BudgetKind.OVERHEAD, info.id)) == 1

    def test_invalid_template_amount_rejected(self, agreement_service, test_actor_id):
        info = agreement_service.create_agreement("Support", test_actor_id)
        with pytest.raises(InvalidBudgetError):
            agreement_service.add_template_budget(
                info.id, BudgetKind.LABOR, test_actor_id, amount=Decimal("-1"),
            )
