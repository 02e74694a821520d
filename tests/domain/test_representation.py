"""
Tests for the work item cost representation.

Covers:
- money properties present only when visible
- logCosts, showCosts and costsByType links
- embedded costsByType collection
- base representation is merged, not replaced
- explicit_absent renders hidden properties as null
- custom provider pipelines
- schema and sums fragments
- cost entry and time entry collections
"""

from urllib.parse import parse_qs, urlsplit

import pytest

from costs_kernel.domain.api_paths import ApiPaths
from costs_kernel.domain.models import CurrencySettings, Project, WorkItem
from costs_kernel.domain.representation import (
    DEFAULT_PROVIDERS,
    LINKS,
    PROPERTIES,
    FieldProvider,
    WorkItemCostsRepresenter,
    WorkItemSumsRepresenter,
    sums_schema,
    work_item_schema,
)
from costs_kernel.domain.values import Money
from costs_kernel.domain.visibility import CostField, CostVisibilityPolicy
from tests.conftest import ALICE_ID, PROJECT_ID, TYPE_X_ID, WORK_ITEM_ID, uid

WP_PATH = f"/api/v3/work_packages/{WORK_ITEM_ID}"


@pytest.fixture
def policy(resolver, aggregator) -> CostVisibilityPolicy:
    return CostVisibilityPolicy(resolver, aggregator)


@pytest.fixture
def representer(policy) -> WorkItemCostsRepresenter:
    return WorkItemCostsRepresenter(policy)


class TestProperties:

    def test_full_user_properties(self, representer, bob, work_item):
        result = representer.represent(bob, work_item)
        assert result["laborCosts"] == "250.00 EUR"
        assert result["materialCosts"] == "18.00 EUR"
        assert result["overallCosts"] == "268.00 EUR"

    def test_own_user_properties(self, representer, alice, work_item):
        result = representer.represent(alice, work_item)
        assert result["laborCosts"] == "100.00 EUR"
        assert result["overallCosts"] == "115.00 EUR"

    def test_hidden_fields_omitted_not_zero(self, representer, carol, work_item):
        result = representer.represent(carol, work_item)
        for key in ("laborCosts", "materialCosts", "overallCosts"):
            assert key not in result
        assert LINKS not in result
        assert "_embedded" not in result

    def test_costs_disabled_omits_everything(self, representer, bob, disabled_work_item):
        assert representer.represent(bob, disabled_work_item) == {}

    def test_base_merged(self, representer, bob, work_item):
        base = {"subject": "Build launch pad", "_links": {"self": {"href": WP_PATH}}}
        result = representer.represent(bob, work_item, base)
        assert result["subject"] == "Build launch pad"
        assert result["_links"]["self"] == {"href": WP_PATH}
        assert "logCosts" in result["_links"]
        assert base["_links"] == {"self": {"href": WP_PATH}}

    def test_base_keys_not_overwritten(self, representer, bob, work_item):
        result = representer.represent(bob, work_item, {"overallCosts": "host value"})
        assert result["overallCosts"] == "host value"

    def test_explicit_absent(self, policy, carol, work_item):
        representer = WorkItemCostsRepresenter(policy, explicit_absent=True)
        result = representer.represent(carol, work_item)
        assert result["laborCosts"] is None
        assert result["overallCosts"] is None
        assert LINKS not in result

    def test_explicit_absent_costs_disabled_omits_everything(self, policy, bob, disabled_work_item, disabled_project):
        representer = WorkItemCostsRepresenter(policy, explicit_absent=True)
        result = representer.represent(bob, disabled_work_item)
        assert result == {}
        assert set(result) == set(work_item_schema(disabled_project))

    def test_project_currency_template(self, resolver, aggregator, bob):
        project = Project(
            id=PROJECT_ID,
            name="Apollo",
            currency=CurrencySettings(code="USD", format="%u%n", unit="$"),
        )
        work_item = WorkItem(id=WORK_ITEM_ID, project=project, subject="Dollars")
        result = WorkItemCostsRepresenter(CostVisibilityPolicy(resolver, aggregator)).represent(bob, work_item)
        assert result["laborCosts"] == "$250.00"


class TestLinks:

    def test_log_costs_link(self, representer, bob, work_item):
        link = representer.represent(bob, work_item)["_links"]["logCosts"]
        assert link == {
            "href": f"/work_packages/{WORK_ITEM_ID}/cost_entries/new",
            "type": "text/html",
            "title": "Log costs on Build launch pad",
        }

    def test_show_costs_link(self, representer, bob, work_item):
        link = representer.represent(bob, work_item)["_links"]["showCosts"]
        assert link["title"] == "Show cost entries"
        url = urlsplit(link["href"])
        assert url.path == f"/projects/{PROJECT_ID}/cost_reports"
        query = parse_qs(url.query)
        assert query["fields[]"] == ["WorkPackageId"]
        assert query["operators[WorkPackageId]"] == ["="]
        assert query["values[WorkPackageId]"] == [str(WORK_ITEM_ID)]
        assert query["set_filter"] == ["1"]

    def test_costs_by_type_link(self, representer, bob, work_item):
        link = representer.represent(bob, work_item)["_links"]["costsByType"]
        assert link == {"href": f"{WP_PATH}/summarized_costs_by_type"}

    def test_custom_paths(self, policy, bob, work_item):
        representer = WorkItemCostsRepresenter(policy, paths=ApiPaths(root="/api/v4", html_root="/app"))
        links = representer.represent(bob, work_item)["_links"]
        assert links["logCosts"]["href"].startswith("/app/work_packages/")
        assert links["costsByType"]["href"].startswith("/api/v4/work_packages/")

    def test_log_costs_with_own_permission_only(self, representer, alice, work_item):
        links = representer.represent(alice, work_item)["_links"]
        assert "logCosts" in links
        assert "showCosts" in links


class TestEmbeddedCostsByType:

    def test_collection(self, representer, bob, work_item):
        collection = representer.represent(bob, work_item)["_embedded"]["costsByType"]
        assert collection["_type"] == "Collection"
        assert collection["total"] == collection["count"] == 2
        first, second = collection["_embedded"]["elements"]
        assert first["_type"] == "AggregatedCostEntry"
        assert first["costs"] == "13.00 EUR"
        assert first["spentUnits"] == "3"
        assert first["_links"]["costType"] == {"href": f"/api/v3/cost_types/{TYPE_X_ID}", "title": "Travel"}
        assert second["costs"] == "5.00 EUR"

    def test_standalone_resource(self, representer, alice, carol, work_item):
        resource = representer.represent_costs_by_type(alice, work_item)
        assert [e["costs"] for e in resource["_embedded"]["elements"]] == ["10.00 EUR", "5.00 EUR"]
        assert resource["_links"]["self"]["href"] == f"{WP_PATH}/summarized_costs_by_type"
        assert representer.represent_costs_by_type(carol, work_item) is None


class TestProviders:

    def test_default_order(self):
        assert [(p.section, p.key) for p in DEFAULT_PROVIDERS] == [
            (PROPERTIES, "laborCosts"),
            (PROPERTIES, "materialCosts"),
            (PROPERTIES, "overallCosts"),
            (LINKS, "logCosts"),
            (LINKS, "showCosts"),
            (LINKS, "costsByType"),
            ("_embedded", "costsByType"),
        ]

    def test_extra_provider(self, policy, bob, work_item):
        budget = FieldProvider(
            key="budget",
            section=PROPERTIES,
            visible=lambda ctx: ctx.costs.is_visible(CostField.OVERALL_COSTS),
            render=lambda ctx: "n/a",
        )
        representer = WorkItemCostsRepresenter(policy, providers=(*DEFAULT_PROVIDERS, budget))
        assert representer.represent(bob, work_item)["budget"] == "n/a"
        assert len(representer.providers) == len(DEFAULT_PROVIDERS) + 1

    def test_earlier_provider_wins(self, policy, bob, work_item):
        first = FieldProvider("overallCosts", PROPERTIES, lambda ctx: True, lambda ctx: "first")
        representer = WorkItemCostsRepresenter(policy, providers=(first, *DEFAULT_PROVIDERS))
        assert representer.represent(bob, work_item)["overallCosts"] == "first"


class TestSchemas:

    def test_work_item_schema(self, project):
        schema = work_item_schema(project)
        assert list(schema) == ["overallCosts", "laborCosts", "materialCosts", "costsByType"]
        assert schema["overallCosts"] == {
            "type": "String",
            "name": "Overall costs",
            "required": False,
            "hasDefault": False,
            "writable": False,
        }
        assert schema["costsByType"]["type"] == "Collection"
        assert schema["costsByType"]["name"] == "Spent units"

    def test_schema_empty_when_disabled(self, disabled_project):
        assert work_item_schema(disabled_project) == {}
        assert work_item_schema(None) == {}

    def test_sums_schema(self):
        assert list(sums_schema(["overall_costs", "labor_costs"])) == ["laborCosts", "overallCosts"]
        assert sums_schema([]) == {}


class TestSums:

    def test_sums_only_summable_columns(self, policy, bob, work_item):
        sums = WorkItemSumsRepresenter(policy, ["overall_costs"])
        assert sums.represent(bob, [work_item], CurrencySettings()) == {"overallCosts": "268.00 EUR"}

    def test_sums_use_user_scope(self, policy, alice, work_item, project):
        other = WorkItem(id=uid(12), project=project, subject="Empty")
        sums = WorkItemSumsRepresenter(policy, ["labor_costs", "material_costs"])
        totals = sums.sums(alice, [work_item, other], CurrencySettings())
        assert totals == {
            CostField.LABOR_COSTS: Money.of("100", "EUR"),
            CostField.MATERIAL_COSTS: Money.of("15", "EUR"),
        }

    def test_hidden_items_contribute_nothing(self, policy, carol, work_item):
        sums = WorkItemSumsRepresenter(policy, ["overall_costs"])
        assert sums.represent(carol, [work_item], CurrencySettings()) == {"overallCosts": "0.00 EUR"}


class TestEntryCollections:

    def test_cost_entries_with_rates(self, representer, bob, work_item):
        collection = representer.represent_cost_entries(bob, work_item)
        assert collection["count"] == 3
        element = collection["_embedded"]["elements"][0]
        assert element["_type"] == "CostEntry"
        assert element["costs"] == "10.00 EUR"
        assert element["spentUnits"] == "2"
        assert element["_links"]["costType"]["title"] == "Travel"
        assert element["_links"]["workPackage"] == {"href": WP_PATH, "title": "Build launch pad"}
        assert collection["_links"]["self"]["href"] == f"{WP_PATH}/cost_entries"

    def test_cost_entries_without_rate_permission(self, representer, alice, work_item):
        collection = representer.represent_cost_entries(alice, work_item)
        assert collection["count"] == 2
        assert all("costs" not in e for e in collection["_embedded"]["elements"])
        assert {e["_links"]["user"]["href"] for e in collection["_embedded"]["elements"]} == {
            f"/api/v3/users/{ALICE_ID}"
        }

    def test_time_entries_rates(self, representer, alice, bob, work_item):
        for_bob = representer.represent_time_entries(bob, work_item)["_embedded"]["elements"]
        assert [e["hourlyRate"] for e in for_bob] == ["50.00 EUR", "50.00 EUR"]
        assert for_bob[1]["costs"] == "150.00 EUR"

        for_alice = representer.represent_time_entries(alice, work_item)["_embedded"]["elements"]
        assert len(for_alice) == 1
        assert for_alice[0]["hourlyRate"] == "50.00 EUR"
        assert for_alice[0]["hours"] == "2"

    def test_time_entries_hidden(self, representer, carol, work_item):
        assert representer.represent_time_entries(carol, work_item)["count"] == 0
