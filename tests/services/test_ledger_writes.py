"""
LedgerService tests.

Verifies:
- Templates and dated rows are created through the agreement's collections
- Validation rejects negative amounts and hours
- create_from_templates stamps every template with the target month
- purge_undated / purge_outside_range remove exactly the doomed rows
- apply() writes creates before destroys and never commits
"""

from datetime import date
from decimal import Decimal

import pytest

from retainer_kernel.domain.budgets import BudgetKind, DatedBudget, TemplateBudget
from retainer_kernel.domain.months import Month, MonthRange
from retainer_kernel.domain.reconciliation import (
    BudgetCreate,
    BudgetDestroy,
    DestroyReason,
    LedgerDelta,
)
from retainer_kernel.exceptions import InvalidBudgetError
from retainer_kernel.models.budget import OverheadBudget


class TestAddBudgets:

    def test_add_template(self, ledger_service, create_agreement, test_actor_id):
        agreement = create_agreement()

        row = ledger_service.add_template(
            BudgetKind.LABOR, agreement, test_actor_id,
            amount=Decimal("200"), hours=Decimal("20"), activity="support",
        )

        assert row.is_template
        assert row.agreement_id == agreement.id
        assert row.created_by_id == test_actor_id
        assert row in agreement.labor_budgets
        assert agreement.overhead_budgets == []

    def test_add_dated_budget(self, ledger_service, create_agreement, test_actor_id):
        agreement = create_agreement()

        row = ledger_service.add_budget(
            BudgetKind.OVERHEAD, agreement, Month(2010, 2), test_actor_id, amount=Decimal("40"),
        )

        assert row.period == Month(2010, 2)
        assert row in agreement.overhead_budgets

    @pytest.mark.parametrize("field", ["amount", "hours"])
    def test_negative_values_rejected(self, ledger_service, create_agreement, test_actor_id, field):
        agreement = create_agreement()

        with pytest.raises(InvalidBudgetError) as exc_info:
            ledger_service.add_template(
                BudgetKind.LABOR, agreement, test_actor_id, **{field: Decimal("-1")},
            )

        assert exc_info.value.code == "INVALID_BUDGET"
        assert agreement.labor_budgets == []


class TestCreateFromTemplates:

    def test_every_template_stamped(self, ledger_service, create_agreement, test_actor_id):
        agreement = create_agreement()
        templates = [
            TemplateBudget(Decimal("100"), Decimal("10"), "design"),
            DatedBudget(Month(2010, 1), Decimal("50"), Decimal("5")),
        ]

        rows = ledger_service.create_from_templates(
            BudgetKind.LABOR, agreement, Month(2010, 3), templates, test_actor_id,
        )

        assert [r.period for r in rows] == [Month(2010, 3), Month(2010, 3)]
        assert [r.budget_amount for r in rows] == [Decimal("100"), Decimal("50")]
        assert rows[0].activity == "design"


class TestPurges:

    def test_purge_undated(self, ledger_service, create_agreement, create_budget):
        agreement = create_agreement()
        create_budget(agreement)
        create_budget(agreement)
        dated = create_budget(agreement, year=2010, month=1)

        removed = ledger_service.purge_undated(BudgetKind.LABOR, agreement)

        assert removed == 2
        assert [b.id for b in agreement.labor_budgets] == [dated.id]

    def test_purge_outside_range(self, session, ledger_service, create_agreement, create_budget, budget_selector):
        agreement = create_agreement()
        jan = create_budget(agreement, BudgetKind.OVERHEAD, 2010, 1)
        create_budget(agreement, BudgetKind.OVERHEAD, 2010, 5)
        create_budget(agreement, BudgetKind.OVERHEAD, 2009, 12)
        template = create_budget(agreement, BudgetKind.OVERHEAD)

        removed = ledger_service.purge_outside_range(
            BudgetKind.OVERHEAD, agreement, MonthRange(date(2010, 1, 1), date(2010, 3, 31)),
        )

        assert removed == 2
        remaining = {b.id for b in budget_selector.all_budgets(BudgetKind.OVERHEAD, agreement.id)}
        assert remaining == {jan.id, template.id}


class TestApply:

    def test_apply_creates_and_destroys(self, session, ledger_service, create_agreement, create_budget,
                                        budget_selector, test_actor_id):
        agreement = create_agreement()
        doomed = create_budget(agreement, year=2010, month=5)
        delta = LedgerDelta(
            creates=(
                BudgetCreate(BudgetKind.LABOR, DatedBudget(Month(2010, 2), Decimal("10"))),
                BudgetCreate(BudgetKind.OVERHEAD, DatedBudget(Month(2010, 2), Decimal("5"))),
            ),
            destroys=(BudgetDestroy(BudgetKind.LABOR, doomed.id, DestroyReason.OUTSIDE_RANGE),),
        )

        ledger_service.apply(agreement, delta, test_actor_id)

        labor = budget_selector.all_budgets(BudgetKind.LABOR, agreement.id)
        overhead = budget_selector.all_budgets(BudgetKind.OVERHEAD, agreement.id)
        assert [(b.year, b.month) for b in labor] == [(2010, 2)]
        assert [b.budget_amount for b in overhead] == [Decimal("5")]
        assert session.in_transaction()

    def test_apply_rejects_invalid_clone(self, ledger_service, create_agreement, test_actor_id):
        agreement = create_agreement()
        delta = LedgerDelta(
            creates=(BudgetCreate(BudgetKind.LABOR, DatedBudget(Month(2010, 2), Decimal("-5"))),),
        )

        with pytest.raises(InvalidBudgetError):
            ledger_service.apply(agreement, delta, test_actor_id)

    def test_empty_delta_is_noop(self, ledger_service, create_agreement, test_actor_id, captured_logs):
        agreement = create_agreement()

        ledger_service.apply(agreement, LedgerDelta(), test_actor_id)

        assert agreement.labor_budgets == []
        assert not any(r["message"] == "ledger_delta_applied" for r in captured_logs())


class TestModelValidation:

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range_rejected(self, month, test_actor_id):
        with pytest.raises(InvalidBudgetError) as exc_info:
            OverheadBudget(year=2010, month=month, created_by_id=test_actor_id)

        assert exc_info.value.field == "month"
        assert exc_info.value.kind == "overhead"
