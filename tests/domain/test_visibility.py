"""
Tests for CostVisibilityPolicy.

Covers:
- full permission sees figures over all entries
- "own" permission sees figures over the user's own entries only
- no permission omits the field (None), never zero
- costs disabled omits every field regardless of permissions
- the aggregator is never asked for a field the user cannot see
- logCosts / showCosts decisions
- per-entry listings and rate visibility
"""

from decimal import Decimal

import pytest

from costs_kernel.domain.aggregation import CostAggregator
from costs_kernel.domain.models import User
from costs_kernel.domain.permissions import CostScope, Permission
from costs_kernel.domain.values import Money
from costs_kernel.domain.visibility import CostField, CostVisibilityPolicy
from tests.conftest import ALICE_ID, BOB_ID, TYPE_X_ID, TYPE_Y_ID


class _StaticResolver:
    """Grants a fixed set of permissions to everyone, in every context."""

    def __init__(self, *granted: Permission):
        self.granted = set(granted)
        self.calls: list[Permission] = []

    def is_allowed(self, user, permission, context):
        self.calls.append(permission)
        return permission in self.granted


class _SpyAggregator(CostAggregator):
    """Records which figures were computed."""

    def __init__(self, source):
        super().__init__(source)
        self.computed: list[str] = []

    def labor_cost(self, work_item, author_id=None):
        self.computed.append("labor")
        return super().labor_cost(work_item, author_id)

    def material_cost(self, work_item, author_id=None):
        self.computed.append("material")
        return super().material_cost(work_item, author_id)

    def cost_type_summaries(self, work_item, author_id=None):
        self.computed.append("by_type")
        return super().cost_type_summaries(work_item, author_id)


@pytest.fixture
def policy(resolver, aggregator) -> CostVisibilityPolicy:
    return CostVisibilityPolicy(resolver, aggregator)


class TestScopes:

    def test_full_permission(self, policy, bob, work_item):
        assert policy.scope_for(bob, work_item, CostField.OVERALL_COSTS) is CostScope.ALL

    def test_own_permission(self, policy, alice, work_item):
        assert policy.scope_for(alice, work_item, CostField.LABOR_COSTS) is CostScope.OWN

    def test_no_permission(self, policy, carol, work_item):
        assert policy.scope_for(carol, work_item, CostField.MATERIAL_COSTS) is CostScope.NONE

    def test_costs_disabled_beats_permissions(self, aggregator, disabled_work_item, bob):
        resolver = _StaticResolver(*Permission)
        policy = CostVisibilityPolicy(resolver, aggregator)
        assert policy.scope_for(bob, disabled_work_item, CostField.OVERALL_COSTS) is CostScope.NONE
        assert resolver.calls == []

    def test_full_wins_over_own(self, aggregator, alice, work_item):
        policy = CostVisibilityPolicy(
            _StaticResolver(Permission.VIEW_COST_ENTRIES, Permission.VIEW_OWN_COST_ENTRIES), aggregator
        )
        assert policy.scope_for(alice, work_item, CostField.OVERALL_COSTS) is CostScope.ALL


class TestFigures:

    def test_full_scope_overall(self, policy, bob, work_item):
        assert policy.figure(bob, work_item, CostField.OVERALL_COSTS) == Money.of("268", "EUR")

    def test_own_scope_labor(self, policy, alice, work_item):
        """Alice logged 100 of the 250 labor costs and only sees her share."""
        assert policy.figure(alice, work_item, CostField.LABOR_COSTS) == Money.of("100", "EUR")

    def test_no_permission_is_none_not_zero(self, policy, carol, work_item):
        assert policy.figure(carol, work_item, CostField.LABOR_COSTS) is None

    def test_costs_by_type_is_not_a_figure(self, policy, bob, work_item):
        with pytest.raises(ValueError):
            policy.figure(bob, work_item, CostField.COSTS_BY_TYPE)

    def test_summaries_own_scope(self, policy, alice, work_item):
        summaries = policy.summaries(alice, work_item)
        assert [(s.cost_type.id, s.costs.amount) for s in summaries] == [
            (TYPE_X_ID, Decimal("10")),
            (TYPE_Y_ID, Decimal("5")),
        ]

    def test_hidden_fields_never_computed(self, source, carol, work_item):
        spy = _SpyAggregator(source)
        policy = CostVisibilityPolicy(_StaticResolver(), spy)
        policy.evaluate(carol, work_item)
        assert spy.computed == []


class TestEvaluate:

    def test_full_user(self, policy, bob, work_item):
        costs = policy.evaluate(bob, work_item)
        assert costs.labor_costs == "250.00 EUR"
        assert costs.material_costs == "18.00 EUR"
        assert costs.overall_costs == "268.00 EUR"
        assert costs.costs_by_type == {"Travel": "13.00 EUR", "Equipment": "5.00 EUR"}
        assert costs.can_log_costs
        assert costs.can_show_costs

    def test_own_user(self, policy, alice, work_item):
        costs = policy.evaluate(alice, work_item)
        assert costs.labor_costs == "100.00 EUR"
        assert costs.overall_costs == "115.00 EUR"
        assert costs.scopes[CostField.OVERALL_COSTS] is CostScope.OWN
        assert costs.can_log_costs

    def test_user_without_permissions(self, policy, carol, work_item):
        costs = policy.evaluate(carol, work_item)
        assert costs.labor_costs is None
        assert costs.overall_costs is None
        assert costs.costs_by_type is None
        assert not costs.is_visible(CostField.LABOR_COSTS)
        assert not costs.can_log_costs
        assert not costs.can_show_costs

    def test_costs_disabled(self, aggregator, bob, disabled_work_item):
        policy = CostVisibilityPolicy(_StaticResolver(*Permission), aggregator)
        costs = policy.evaluate(bob, disabled_work_item)
        assert dict(costs.figures) == {}
        assert costs.summaries is None
        assert not costs.can_log_costs
        assert not costs.can_show_costs

    def test_evaluation_logged_with_context(self, captured_logs, policy, bob, work_item):
        policy.evaluate(bob, work_item)
        record = next(r for r in captured_logs() if r["message"] == "cost_visibility_evaluated")
        assert record["user_id"] == str(BOB_ID)
        assert record["work_item_id"] == str(work_item.id)
        assert record["scopes"]["overall_costs"] == "all"

    def test_anonymous_user(self, policy, work_item):
        costs = policy.evaluate(User.anonymous(), work_item)
        assert costs.overall_costs is None


class TestLinks:

    def test_log_own_costs_enough_for_link(self, aggregator, alice, work_item):
        policy = CostVisibilityPolicy(_StaticResolver(Permission.LOG_OWN_COSTS), aggregator)
        assert policy.can_log_costs(alice, work_item)
        assert not policy.can_show_costs(alice, work_item)

    def test_show_costs_with_own_view(self, aggregator, alice, work_item):
        policy = CostVisibilityPolicy(_StaticResolver(Permission.VIEW_OWN_COST_ENTRIES), aggregator)
        assert policy.can_show_costs(alice, work_item)


class TestEntryListings:

    def test_own_cost_entries(self, policy, alice, work_item):
        assert {e.user_id for e in policy.visible_cost_entries(alice, work_item)} == {ALICE_ID}

    def test_all_cost_entries(self, policy, bob, work_item):
        assert len(policy.visible_cost_entries(bob, work_item)) == 3

    def test_no_cost_entries(self, policy, carol, work_item):
        assert policy.visible_cost_entries(carol, work_item) == []

    def test_time_entries(self, policy, alice, bob, work_item):
        assert [e.user_id for e in policy.visible_time_entries(alice, work_item)] == [ALICE_ID]
        assert len(policy.visible_time_entries(bob, work_item)) == 2

    def test_cost_rates(self, policy, alice, bob, work_item, disabled_work_item):
        assert policy.cost_rates_visible(bob, work_item)
        assert not policy.cost_rates_visible(alice, work_item)
        assert not policy.cost_rates_visible(bob, disabled_work_item)

    def test_hourly_rates(self, policy, alice, bob, work_item, time_entries):
        alice_entry, bob_entry = time_entries
        assert policy.hourly_rate_visible(bob, work_item, alice_entry)
        assert policy.hourly_rate_visible(alice, work_item, alice_entry)
        assert not policy.hourly_rate_visible(alice, work_item, bob_entry)
