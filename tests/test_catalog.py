"""Tests for catalog file loading."""

import json

import pytest

from errors import CatalogError, DuplicateModuleError
from registry.catalog import find_catalog, load_catalog, parse_catalog, register_catalog
from registry.module_registry import ModuleRegistry

CATALOG_YAML = """
modules:
  - id: user_analytics
    version: 1.0.0
    category: analytics
    frameworks: {nextjs: full, flutter: full}
  - id: business_intelligence
    version: 1.2.0
    category: analytics
    dependencies:
      - {module: user_analytics, version: "^1.0.0", reason: event source}
    frameworks: {nextjs: full, flutter: unsupported}
request:
  modules: [business_intelligence]
  framework: nextjs
settings:
  error-on-warnings: true
"""


class TestLoadCatalog:
    def test_yaml(self, tmp_path):
        path = tmp_path / "dna-modules.yml"
        path.write_text(CATALOG_YAML, encoding="utf-8")
        catalog = load_catalog(str(path))
        assert [d.id for d in catalog.descriptors] == ["user_analytics", "business_intelligence"]
        assert catalog.request == {"modules": ["business_intelligence"], "framework": "nextjs"}
        assert catalog.settings == {"error-on-warnings": True}

    def test_json(self, tmp_path):
        path = tmp_path / "dna-modules.json"
        path.write_text(json.dumps({"modules": [{"id": "a", "version": "1.0.0"}]}), encoding="utf-8")
        catalog = load_catalog(str(path))
        assert [d.id for d in catalog.descriptors] == ["a"]
        assert catalog.request == {}

    def test_bare_list(self):
        catalog = parse_catalog([{"id": "a", "version": "1.0.0"}])
        assert [d.id for d in catalog.descriptors] == ["a"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError) as exc_info:
            load_catalog(str(tmp_path / "absent.yml"))
        assert "file not found" in str(exc_info.value)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("modules: [unclosed", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(str(path))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(str(path))

    @pytest.mark.parametrize("document", [
        "just a string",
        {"modules": {"id": "a"}},
        {"modules": ["a"]},
        {"modules": [], "request": ["a"]},
    ])
    def test_wrong_shape(self, document):
        with pytest.raises(CatalogError):
            parse_catalog(document, "inline")


class TestFindCatalog:
    def test_default_name_found(self, tmp_path):
        (tmp_path / "dna-modules.yaml").write_text("modules: []", encoding="utf-8")
        assert find_catalog(str(tmp_path)) == str(tmp_path / "dna-modules.yaml")

    def test_yml_preferred(self, tmp_path):
        (tmp_path / "dna-modules.json").write_text("{}", encoding="utf-8")
        (tmp_path / "dna-modules.yml").write_text("modules: []", encoding="utf-8")
        assert find_catalog(str(tmp_path)) == str(tmp_path / "dna-modules.yml")

    def test_none_found(self, tmp_path):
        assert find_catalog(str(tmp_path)) is None


class TestRegisterCatalog:
    def test_registers_all_with_factories(self):
        catalog = parse_catalog({"modules": [
            {"id": "a", "version": "1.0.0"},
            {"id": "b", "version": "1.0.0"},
        ]})

        def factory(descriptor, context):
            return descriptor.id

        reg = ModuleRegistry()
        assert register_catalog(reg, catalog, {"a": factory}) == ["a", "b"]
        assert reg.get_factory("a") is factory
        assert reg.get_factory("b") is None

    def test_invalid_descriptor_wrapped(self):
        catalog = parse_catalog({"modules": [{"id": "a", "version": "latest"}]}, "inline")
        with pytest.raises(CatalogError) as exc_info:
            register_catalog(ModuleRegistry(), catalog)
        assert "inline" in str(exc_info.value)

    def test_string_dependencies_rejected(self):
        with pytest.raises(CatalogError) as exc_info:
            parse_catalog({"modules": [
                {"id": "a", "version": "1.0.0"},
                {"id": "business_intelligence", "version": "1.0.0", "dependencies": "user_analytics"},
            ]}, "inline")
        assert "module #2: dependencies must be a list" in str(exc_info.value)

    def test_duplicate_ids(self):
        catalog = parse_catalog({"modules": [
            {"id": "a", "version": "1.0.0"},
            {"id": "a", "version": "2.0.0"},
        ]})
        with pytest.raises(DuplicateModuleError):
            register_catalog(ModuleRegistry(), catalog)
