"""Tests for dependency scope classification."""
from types import SimpleNamespace

import pytest

from depscope.analyzer.scope import DependencyScope, scope_of


def _element(unit):
    return SimpleNamespace(unit=unit)


@pytest.fixture
def units(loader):
    return {
        'foo': loader.from_source("package com.acme;\npublic class Foo {}\n", 'Foo.java'),
        'bar': loader.from_source("package com.acme;\npublic class Bar { Foo foo; }\n", 'Bar.java'),
        'baz': loader.from_source("package com.other;\npublic class Baz { com.acme.Foo foo; }\n", 'Baz.java'),
        'xml': loader.from_source('<bean class="com.acme.Foo"/>\n', 'beans.xml'),
    }


class TestScopeOf:
    """scope_of() classification rules."""

    def test_same_file_is_private(self, units):
        assert scope_of(_element(units['foo']), _element(units['foo'])) is DependencyScope.PRIVATE

    def test_same_package_is_package_private(self, units):
        assert scope_of(_element(units['foo']), _element(units['bar'])) is DependencyScope.PACKAGE_PRIVATE

    def test_other_package_is_public(self, units):
        assert scope_of(_element(units['foo']), _element(units['baz'])) is DependencyScope.PUBLIC

    def test_non_java_side_is_unknown(self, units):
        assert scope_of(_element(units['foo']), _element(units['xml'])) is DependencyScope.UNKNOWN
        assert scope_of(_element(units['xml']), _element(units['foo'])) is DependencyScope.UNKNOWN

    def test_missing_unit_is_unknown(self, units):
        assert scope_of(_element(None), _element(units['foo'])) is DependencyScope.UNKNOWN
        assert scope_of(object(), _element(units['foo'])) is DependencyScope.UNKNOWN

    def test_same_name_different_identity_is_not_private(self, loader):
        """Two in-memory files with the same package but different names."""
        first = loader.from_source("package p;\nclass A {}\n", 'A.java')
        second = loader.from_source("package p;\nclass B {}\n", 'B.java')
        assert scope_of(_element(first), _element(second)) is DependencyScope.PACKAGE_PRIVATE

    def test_default_package_units_share_a_package(self, loader):
        first = loader.from_source("class A {}\n", 'A.java')
        second = loader.from_source("class B { A a; }\n", 'B.java')
        assert scope_of(_element(first), _element(second)) is DependencyScope.PACKAGE_PRIVATE

    def test_protected_is_never_produced(self, units):
        results = {
            scope_of(_element(a), _element(b))
            for a in units.values()
            for b in units.values()
        }
        assert DependencyScope.PROTECTED not in results


class TestDependencyScopeOrder:
    """Sorting uses declaration order."""

    def test_declaration_order(self):
        ordered = sorted(DependencyScope, key=lambda scope: scope.value)
        assert ordered == [
            DependencyScope.PRIVATE,
            DependencyScope.PACKAGE_PRIVATE,
            DependencyScope.PROTECTED,
            DependencyScope.PUBLIC,
            DependencyScope.UNKNOWN,
        ]
