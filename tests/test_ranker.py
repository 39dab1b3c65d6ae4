"""Tests for classification, ordering and package grouping."""
from types import SimpleNamespace

import pytest

from depscope.analyzer.elements import NavigableLocation, SourcePosition
from depscope.analyzer.errors import UnclassifiableUsageError
from depscope.analyzer.ranker import Item, annotate_separators, classify_and_rank, package_name_of
from depscope.analyzer.reference_index import UsageContext, UsageSite
from depscope.analyzer.scope import DependencyScope


def _location(file_name, line=1):
    return NavigableLocation(file_name=file_name, line=line, column=1, offset=0)


def _item(scope, package, file_name):
    return Item(scope=scope, location=_location(file_name), package_name=package)


class TestClassifyAndRank:
    """End-to-end ranking of the fixture project's usages of com.acme.Foo."""

    def test_grouped_survey(self, collector, foo_target):
        items = classify_and_rank(foo_target, collector.collect(foo_target))

        assert [(i.location.file_name, i.scope, i.separator) for i in items] == [
            ('Bar.java', DependencyScope.PACKAGE_PRIVATE, 'com.acme'),
            ('Baz.java', DependencyScope.PUBLIC, 'com.other'),
            ('Qux.java', DependencyScope.PUBLIC, None),
        ]

    def test_no_private_or_unknown_items(self, collector, foo_target):
        items = classify_and_rank(foo_target, collector.collect(foo_target))
        assert all(i.scope not in (DependencyScope.PRIVATE, DependencyScope.UNKNOWN) for i in items)

    def test_pipeline_is_idempotent(self, collector, foo_target):
        first = classify_and_rank(foo_target, collector.collect(foo_target))
        second = classify_and_rank(foo_target, collector.collect(foo_target))
        assert first == second

    def test_same_named_type_variable_and_local_are_not_dependents(self, collector, foo_target):
        """Box<Foo> and 'int Foo' in com.acme never refer to com.acme.Foo."""
        files = [i.location.file_name for i in classify_and_rank(foo_target, collector.collect(foo_target))]
        assert 'Box.java' not in files
        assert 'Counter.java' not in files

    def test_unreferenced_class_yields_nothing(self, collector, detector, java_file):
        lonely = detector.resolve(SourcePosition(java_file('com/acme/Lonely.java'), 3, 14))
        assert classify_and_rank(lonely, collector.collect(lonely)) == []

    def test_sites_without_package_are_dropped(self, loader, foo_target):
        xml = loader.from_source('<bean class="com.acme.Foo"/>', 'beans.xml')
        site = UsageSite(xml, xml.location_at_offset(13), UsageContext.TEXT)
        assert classify_and_rank(foo_target, [site]) == []

    def test_default_package_usage(self, loader):
        owner = loader.from_source("package lib;\npublic class Api {}\n", 'Api.java')
        user = loader.from_source("import lib.Api;\nclass Main { Api api; }\n", 'Main.java')
        target = SimpleNamespace(unit=owner)
        site = UsageSite(user, user.location_at_offset(0), UsageContext.TYPE_REFERENCE)

        items = classify_and_rank(target, [site])
        assert [(i.package_name, i.scope, i.separator) for i in items] == [('', DependencyScope.PUBLIC, '')]


class TestPackageNameOf:
    def test_raises_for_text_unit(self, loader):
        xml = loader.from_source('<beans/>', 'beans.xml')
        with pytest.raises(UnclassifiableUsageError):
            package_name_of(UsageSite(xml, xml.location_at_offset(0), UsageContext.TEXT))


class TestAnnotateSeparators:
    """Separator labels on the first item of each package."""

    def test_one_separator_per_package(self):
        items = annotate_separators([
            _item(DependencyScope.PACKAGE_PRIVATE, 'a', 'A1.java'),
            _item(DependencyScope.PUBLIC, 'a', 'A2.java'),
            _item(DependencyScope.PUBLIC, 'b', 'B1.java'),
        ])
        assert [i.separator for i in items] == ['a', None, 'b']

    def test_existing_labels_are_replaced(self):
        stale = Item(DependencyScope.PUBLIC, _location('A.java'), 'a', separator='old')
        first, second = annotate_separators([
            _item(DependencyScope.PUBLIC, 'a', 'Z.java'),
            stale,
        ])
        assert first.separator == 'a'
        assert second.separator is None

    def test_empty(self):
        assert annotate_separators([]) == []


class TestOrdering:
    """Items sort by package, then by scope inside the package."""

    def test_sort_is_by_package_then_scope(self, loader):
        owner = loader.from_source("package m;\npublic class T {}\n", 'T.java')
        units = {
            'z_pub': loader.from_source("package z;\nclass ZPub {}\n", 'ZPub.java'),
            'a_pub': loader.from_source("package a;\nclass APub {}\n", 'APub.java'),
            'm_pkg': loader.from_source("package m;\nclass MPkg {}\n", 'MPkg.java'),
            'm_pkg2': loader.from_source("package m;\nclass MPkg2 {}\n", 'MPkg2.java'),
        }
        sites = [
            UsageSite(units[key], units[key].location_at_offset(0), UsageContext.TYPE_REFERENCE)
            for key in ('z_pub', 'm_pkg', 'a_pub', 'm_pkg2')
        ]

        items = classify_and_rank(SimpleNamespace(unit=owner), sites)
        assert [(i.location.file_name, i.separator) for i in items] == [
            ('APub.java', 'a'),
            ('MPkg.java', 'm'),
            ('MPkg2.java', None),
            ('ZPub.java', 'z'),
        ]
        assert [i.scope for i in items] == [
            DependencyScope.PUBLIC,
            DependencyScope.PACKAGE_PRIVATE,
            DependencyScope.PACKAGE_PRIVATE,
            DependencyScope.PUBLIC,
        ]
