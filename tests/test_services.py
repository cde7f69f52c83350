"""
Tests für die Service-Schicht (Use-Cases + Auswertungen über SQLite).
"""

from dataclasses import replace

import pytest

from planner_pioneer.filters import ACTIVE, COMPLETED, UNASSIGNED
from planner_pioneer.models import Project
from planner_pioneer.services import PlannerService
from planner_pioneer.validation import ValidationError


@pytest.fixture
def planned(svc):
    """Projekt P mit Risiko +20 %, Modul M1, F1 (1/2/3) und F2 (M=4); dazu Waisen."""

    pid = svc.create_project("Projekt P")
    svc.add_factor(pid, "Risk", 20)
    mid = svc.create_module("Modul 1", project_id=pid)
    f1 = svc.create_feature("F1", module_id=mid, optimistic=1, most_likely=2, pessimistic=3)
    f2 = svc.create_feature("F2", module_id=mid, most_likely=4)
    orphan_module = svc.create_module("Lose")
    f3 = svc.create_feature("F3", module_id=orphan_module, most_likely=1.5)
    f4 = svc.create_feature("F4", most_likely=0.5)
    f5 = svc.create_feature("F5")
    return {
        "project": pid,
        "module": mid,
        "orphan_module": orphan_module,
        "features": (f1, f2, f3, f4, f5),
    }


class TestBootstrap:
    def test_bootstrap_in_memory(self):
        service = PlannerService.bootstrap(db_path=":memory:")
        try:
            assert service.snapshot().projects == ()
        finally:
            service.close()


class TestEstimation:
    def test_end_to_end_scenario(self, svc, planned):
        f1, f2, *_ = planned["features"]
        assert svc.expected_duration(f1) == 2.0
        assert svc.expected_duration(f2) == 4.0
        assert svc.module_duration(planned["module"]) == pytest.approx(6.0)

        summary = svc.project_summary(planned["project"])
        assert summary.total_duration == pytest.approx(6.0)
        assert summary.total_with_factors == pytest.approx(7.2)
        assert summary.module_count == 1

    def test_feature_without_estimate(self, svc, planned):
        assert svc.expected_duration(planned["features"][4]) is None

    def test_unassigned_summary(self, svc, planned):
        u = svc.unassigned_summary()
        assert u.features_without_module == pytest.approx(0.5)
        assert u.modules_without_project == pytest.approx(1.5)
        assert u.total == pytest.approx(2.0)

    def test_update_estimate_changes_totals(self, svc, planned):
        f2 = planned["features"][1]
        svc.update_estimate(f2, optimistic=None, most_likely=10, pessimistic=None)
        assert svc.module_duration(planned["module"]) == pytest.approx(12.0)

    def test_series_for_chart(self, svc, planned):
        ((title, base, total),) = svc.get_series_project_durations()
        assert title == "Projekt P"
        assert base == pytest.approx(6.0)
        assert total == pytest.approx(7.2)


class TestFactorLifecycle:
    def test_update_factor_recomputes_total(self, svc, planned):
        pid = planned["project"]
        (risk,) = svc.get_project(pid).factors
        svc.update_factor(replace(risk, value=50))
        assert svc.project_summary(pid).total_with_factors == pytest.approx(9.0)

    def test_delete_factor_returns_to_base(self, svc, planned):
        pid = planned["project"]
        (risk,) = svc.get_project(pid).factors
        svc.delete_factor(risk.id)
        summary = svc.project_summary(pid)
        assert summary.factor_adjustments == ()
        assert summary.total_with_factors == pytest.approx(summary.total_duration)
        assert summary.total_with_factors == pytest.approx(6.0)


class TestUpdates:
    def test_update_project(self, svc, planned):
        pid = planned["project"]
        svc.update_project(replace(svc.get_project(pid), title="Projekt Q", description="neu"))
        p = svc.get_project(pid)
        assert p.title == "Projekt Q"
        assert p.description == "neu"
        assert len(p.factors) == 1

    def test_update_unknown_project(self, svc):
        with pytest.raises(LookupError):
            svc.update_project(Project(id="nope", title="X"))

    def test_reassigning_module_moves_duration(self, svc, planned):
        other = svc.create_project("Projekt O")
        module = svc.get_module(planned["module"])

        svc.update_module(replace(module, project_id=other))

        assert svc.project_summary(planned["project"]).total_duration == 0.0
        assert svc.project_summary(other).total_duration == pytest.approx(6.0)
        assert svc.unassigned_summary().total == pytest.approx(2.0)

    def test_unassigning_module(self, svc, planned):
        module = svc.get_module(planned["module"])
        svc.update_module(replace(module, project_id=None))
        assert svc.unassigned_summary().modules_without_project == pytest.approx(7.5)

    def test_module_summaries(self, svc, planned):
        by_id = {s.module_id: s for s in svc.module_summaries()}
        assert by_id[planned["module"]].feature_count == 2
        assert by_id[planned["module"]].total_duration == pytest.approx(6.0)
        assert by_id[planned["orphan_module"]].project_id is None
        assert by_id[planned["orphan_module"]].total_duration == pytest.approx(1.5)


class TestLookups:
    def test_unknown_project_for_module(self, svc):
        with pytest.raises(LookupError):
            svc.create_module("X", project_id="nope")

    def test_unknown_module_for_feature(self, svc):
        with pytest.raises(LookupError):
            svc.create_feature("X", module_id="nope")

    def test_toggle_unknown_feature(self, svc):
        with pytest.raises(LookupError):
            svc.toggle_feature("nope")


class TestToggleAndFilter:
    def test_toggle_feature(self, svc, planned):
        f1 = planned["features"][0]
        assert svc.toggle_feature(f1) is True
        assert [f.id for f in svc.list_features(status=COMPLETED)] == [f1]
        assert svc.toggle_feature(f1) is False

    def test_list_features_unassigned_project(self, svc, planned):
        _, _, f3, f4, f5 = planned["features"]
        ids = {f.id for f in svc.list_features(project_id=UNASSIGNED)}
        assert ids == {f3, f4, f5}

    def test_list_modules(self, svc, planned):
        assert [m.id for m in svc.list_modules(project_id=planned["project"])] == [planned["module"]]
        assert [m.id for m in svc.list_modules(project_id=UNASSIGNED)] == [planned["orphan_module"]]

    def test_list_projects(self, svc, planned):
        svc.toggle_project(planned["project"])
        assert svc.list_projects(ACTIVE) == []
        assert [p.id for p in svc.list_projects(COMPLETED)] == [planned["project"]]


class TestMasterTable:
    def test_rows_resolve_module_and_project(self, svc, planned):
        table = svc.master_table(planned["project"])
        rows = {r.feature_title: r for r in table.rows}
        assert set(rows) == {"F1", "F2"}
        assert rows["F1"].project_title == "Projekt P"
        assert rows["F1"].module_title == "Modul 1"
        assert rows["F1"].expected == 2.0
        assert rows["F2"].optimistic is None
        assert table.totals.expected == pytest.approx(6.0)

    def test_unassigned_rows_have_no_project(self, svc, planned):
        table = svc.master_table(UNASSIGNED)
        assert {r.feature_title for r in table.rows} == {"F3", "F4", "F5"}
        assert all(r.project_id is None for r in table.rows)


class TestDashboard:
    def test_stats(self, svc, planned):
        svc.toggle_feature(planned["features"][1])
        stats = svc.dashboard_stats()
        assert stats.total_projects == 1
        assert stats.total_modules == 2
        assert stats.total_features == 5
        assert stats.completed_features == 1
        assert stats.active_features == 4
        assert stats.unestimated_features == 1
        assert stats.estimated_hours == pytest.approx(8.0)
        assert stats.open_hours == pytest.approx(4.0)

    def test_recent_projects(self, svc):
        ids = [svc.create_project(f"P{i}") for i in range(7)]
        recent = svc.recent_projects()
        assert len(recent) == 5
        assert set(p.id for p in recent) <= set(ids)

    def test_recent_modules(self, svc):
        ids = [svc.create_module(f"M{i}") for i in range(6)]
        recent = svc.recent_modules(limit=3)
        assert len(recent) == 3
        assert set(m.id for m in recent) <= set(ids)


class TestForms:
    def test_create_feature_from_form(self, svc):
        mid = svc.create_module_from_form("Login")
        fid = svc.create_feature_from_form("Formular", mid, "", "2,5", "4")
        f = svc.get_feature(fid)
        assert f.module_id == mid
        assert f.pert_optimistic is None
        assert f.expected_duration == pytest.approx(2.8)

    def test_invalid_order_rejected(self, svc):
        with pytest.raises(ValidationError):
            svc.create_feature_from_form("Formular", "", "5", "2", "")

    def test_unknown_module_is_validation_error(self, svc):
        with pytest.raises(ValidationError):
            svc.create_feature_from_form("Formular", "nope", "", "1", "")

    def test_factor_from_form(self, svc):
        pid = svc.create_project_from_form("Website")
        svc.add_factor_from_form(pid, "Overhead", "15%")
        assert svc.get_project(pid).factors[0].value == 15.0

    def test_empty_project_title(self, svc):
        with pytest.raises(ValidationError):
            svc.create_project_from_form("  ")
