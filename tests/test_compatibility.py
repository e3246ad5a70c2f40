"""Tests for the compatibility checker."""

import pytest

from constants import Severity
from registry.descriptor import ModuleConflict, ModuleDependency, ModuleDescriptor
from registry.module_registry import ModuleRegistry
from resolution.compatibility import check_compatibility, suggest_alternatives
from resolution.models import InstallationRequest, PlanOptions
from resolution.problems import ProblemCode


def make_module(module_id, version="1.0.0", deps=(), conflicts=(), frameworks=None, **kwargs):
    return ModuleDescriptor(
        id=module_id,
        version=version,
        dependencies=[d if isinstance(d, ModuleDependency) else ModuleDependency(d) for d in deps],
        conflicts=[c if isinstance(c, ModuleConflict) else ModuleConflict(c) for c in conflicts],
        framework_support=frameworks if frameworks is not None else {"nextjs": "full"},
        **kwargs,
    )


def check(registry, ids, framework="nextjs", **options):
    return check_compatibility(InstallationRequest.build(ids, framework, PlanOptions(**options)), registry)


@pytest.fixture
def registry():
    return ModuleRegistry()


class TestExpansion:
    """Transitive closure over required dependencies."""

    def test_closure_includes_transitive(self, registry):
        registry.register(make_module("a", deps=["b"]))
        registry.register(make_module("b", deps=["c"]))
        registry.register(make_module("c"))
        report = check(registry, ["a"])
        assert report.ok
        assert report.expanded_ids == ("a", "b", "c")

    def test_absent_optional_dependency_skipped(self, registry):
        registry.register(make_module("a", deps=[ModuleDependency("cache", optional=True)]))
        report = check(registry, ["a"])
        assert report.ok
        assert report.expanded_ids == ("a",)

    def test_registered_optional_dependency_not_pulled_in(self, registry):
        registry.register(make_module("a", deps=[ModuleDependency("cache", optional=True)]))
        registry.register(make_module("cache"))
        assert check(registry, ["a"]).expanded_ids == ("a",)

    def test_unknown_requested_module(self, registry):
        report = check(registry, ["ghost"])
        assert [p.code for p in report.problems] == [ProblemCode.UNKNOWN_MODULE]
        assert report.problems[0].involved_module_ids == ("ghost",)

    def test_missing_dependency_names_both_modules(self, registry):
        registry.register(make_module("a", deps=[ModuleDependency("ghost", reason="storage")]))
        report = check(registry, ["a"])
        assert [p.code for p in report.problems] == [ProblemCode.MISSING_DEPENDENCY]
        problem = report.problems[0]
        assert problem.details["moduleId"] == "ghost"
        assert problem.details["requiredBy"] == "a"
        assert "storage" in problem.message

    def test_missing_dependency_reported_per_dependent(self, registry):
        registry.register(make_module("a", deps=["ghost"]))
        registry.register(make_module("b", deps=["ghost"]))
        report = check(registry, ["a", "b"])
        assert [p.details["requiredBy"] for p in report.problems] == ["a", "b"]

    def test_excluded_dependency(self, registry):
        registry.register(make_module("a", deps=["b"]))
        registry.register(make_module("b"))
        report = check(registry, ["a"], exclude=frozenset({"b"}))
        assert [p.code for p in report.problems] == [ProblemCode.EXCLUDED_DEPENDENCY]
        assert report.expanded_ids == ("a",)


class TestFrameworkSupport:
    def test_undeclared_framework_is_error(self, registry):
        registry.register(make_module("a", frameworks={"nextjs": "full"}))
        report = check(registry, ["a"], framework="electron")
        assert [p.code for p in report.errors] == [ProblemCode.FRAMEWORK_UNSUPPORTED]
        assert "does not declare support" in report.errors[0].message

    def test_explicitly_unsupported_message(self, registry):
        registry.register(make_module("a", frameworks={"nextjs": "full", "flutter": "unsupported"}))
        report = check(registry, ["a"], framework="flutter")
        assert "explicitly does not support flutter" in report.errors[0].message

    def test_partial_support_is_warning(self, registry):
        registry.register(make_module("a", frameworks={"tauri": "partial"}))
        report = check(registry, ["a"], framework="tauri")
        assert report.ok
        assert [p.code for p in report.warnings] == [ProblemCode.PARTIAL_SUPPORT]
        assert report.warnings[0].severity == Severity.WARNING

    def test_partial_support_carries_limitations(self, registry):
        registry.register(make_module(
            "desktop-tray",
            frameworks={"tauri": "partial"},
            framework_limitations={"tauri": ["no tray icons on Wayland", "no badges"]},
        ))
        report = check(registry, ["desktop-tray"], framework="tauri")
        warning = report.warnings[0]
        assert warning.message == (
            "Module desktop-tray has partial support for tauri. Limitations: no tray icons on Wayland, no badges"
        )
        assert warning.details["limitations"] == ["no tray icons on Wayland", "no badges"]

    def test_problems_are_hashable(self, registry):
        registry.register(make_module("a", frameworks={"tauri": "partial"}))
        first = check(registry, ["a"], framework="tauri").warnings[0]
        second = check(registry, ["a"], framework="tauri").warnings[0]
        assert first == second
        assert len({first, second}) == 1

    def test_dependencies_checked_too(self, registry):
        registry.register(make_module("a", deps=["b"], frameworks={"flutter": "full"}))
        registry.register(make_module("b", frameworks={"nextjs": "full"}))
        report = check(registry, ["a"], framework="flutter")
        assert [p.involved_module_ids for p in report.errors] == [("b",)]


class TestConflicts:
    """Pairwise conflicts in either direction."""

    def test_conflict_declared_on_one_side(self, registry):
        registry.register(make_module("ai-anthropic"))
        registry.register(make_module("ai-openai-enhanced", conflicts=[
            ModuleConflict("ai-anthropic", Severity.ERROR, "both register the default AI provider"),
        ]))
        for order in (["ai-openai-enhanced", "ai-anthropic"], ["ai-anthropic", "ai-openai-enhanced"]):
            report = check(registry, order)
            assert [p.code for p in report.problems] == [ProblemCode.CONFLICT]
            assert set(report.problems[0].involved_module_ids) == {"ai-openai-enhanced", "ai-anthropic"}

    def test_conflict_declared_on_both_sides_reported_once(self, registry):
        registry.register(make_module("a", conflicts=["b"]))
        registry.register(make_module("b", conflicts=["a"]))
        report = check(registry, ["a", "b"])
        assert len(report.problems) == 1

    def test_error_declaration_wins(self, registry):
        registry.register(make_module("a", conflicts=[ModuleConflict("b", Severity.WARNING, "soft")]))
        registry.register(make_module("b", conflicts=[ModuleConflict("a", Severity.ERROR, "hard")]))
        report = check(registry, ["a", "b"])
        assert [p.code for p in report.problems] == [ProblemCode.CONFLICT]
        assert report.problems[0].details["reason"] == "hard"

    def test_warning_conflict(self, registry):
        registry.register(make_module("a", conflicts=[
            ModuleConflict("b", Severity.WARNING, "duplicate charts", resolution="disable charts in b"),
        ]))
        registry.register(make_module("b"))
        report = check(registry, ["a", "b"])
        assert report.ok
        assert [p.code for p in report.warnings] == [ProblemCode.CONFLICT_WARNING]
        assert report.warnings[0].details["resolution"] == "disable charts in b"

    def test_conflict_with_dependency_is_found(self, registry):
        registry.register(make_module("a", deps=["b"]))
        registry.register(make_module("b"))
        registry.register(make_module("c", conflicts=["b"]))
        report = check(registry, ["a", "c"])
        assert [p.code for p in report.problems] == [ProblemCode.CONFLICT]

    def test_conflict_version_range(self, registry):
        registry.register(make_module("a", conflicts=[ModuleConflict("b", version_range="<2.0.0")]))
        registry.register(make_module("b", version="2.1.0"))
        assert check(registry, ["a", "b"]).ok
        registry.register(make_module("b", version="1.9.0"), overwrite=True)
        assert not check(registry, ["a", "b"]).ok


class TestVersions:
    def test_version_mismatch(self, registry):
        registry.register(make_module("user_analytics", version="1.0.0"))
        registry.register(make_module("business_intelligence", deps=[ModuleDependency("user_analytics", "^2.0.0")]))
        report = check(registry, ["business_intelligence"])
        assert [p.code for p in report.problems] == [ProblemCode.VERSION_MISMATCH]
        details = report.problems[0].details
        assert details["required"] == "^2.0.0"
        assert details["actual"] == "1.0.0"
        assert details["requiredBy"] == "business_intelligence"

    def test_optional_dependency_version_checked_when_present(self, registry):
        registry.register(make_module("cache", version="3.0.0"))
        registry.register(make_module("a", deps=[ModuleDependency("cache", "~1.0.0", optional=True)]))
        report = check(registry, ["a", "cache"])
        assert [p.code for p in report.problems] == [ProblemCode.VERSION_MISMATCH]


class TestExhaustiveReporting:
    """The checker never stops at the first problem."""

    def test_every_independent_problem_reported(self, registry):
        registry.register(make_module("x", deps=["m1", "m2"]))
        registry.register(make_module("y", frameworks={"flutter": "full"}))
        report = check(registry, ["x", "y", "ghost"])
        codes = sorted(p.code.value for p in report.problems)
        assert codes == sorted([
            "UnknownModuleError",
            "MissingDependencyError",
            "MissingDependencyError",
            "FrameworkUnsupportedError",
        ])

    def test_lifecycle_warnings(self, registry):
        registry.register(make_module("old", deprecated=True))
        registry.register(make_module("new", experimental=True))
        report = check(registry, ["old", "new"])
        assert report.ok
        assert [p.code for p in report.warnings] == [
            ProblemCode.EXPERIMENTAL_MODULE,
            ProblemCode.DEPRECATED_MODULE,
        ]


class TestSuggestAlternatives:
    def test_same_category_non_conflicting(self, registry):
        registry.register(make_module("ai-openai", category="ai", conflicts=["ai-anthropic"]))
        registry.register(make_module("ai-anthropic", category="ai"))
        registry.register(make_module("ai-gemini", category="ai"))
        registry.register(make_module("ai-local", category="ai", frameworks={"electron": "full"}))
        registry.register(make_module("chat", category="ai", conflicts=["ai-anthropic"]))
        registry.register(make_module("auth-jwt", category="auth"))

        selected = ["ai-openai", "ai-anthropic"]
        assert suggest_alternatives("ai-openai", selected, registry) == ["ai-gemini", "ai-local"]
        assert suggest_alternatives("ai-openai", selected, registry, framework="nextjs") == ["ai-gemini"]

    def test_unknown_module(self, registry):
        assert suggest_alternatives("ghost", [], registry) == []
