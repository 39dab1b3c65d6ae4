"""Tests for usage collection (import filtering, dedup, fallback, staleness)."""
import pytest

from depscope.analyzer.cancellation import CancellationToken
from depscope.analyzer.collector import ReferenceCollector
from depscope.analyzer.elements import SourcePosition
from depscope.analyzer.errors import QueryCancelledError, StaleReferenceError
from depscope.analyzer.reference_index import ProjectScope, ReferenceIndex, UsageContext


class CountdownToken(CancellationToken):
    """Cancels itself after a fixed number of checks."""

    def __init__(self, checks_allowed: int):
        super().__init__()
        self.checks_allowed = checks_allowed
        self.checks = 0

    def check(self):
        self.checks += 1
        if self.checks > self.checks_allowed:
            self.cancel()
        super().check()


class TestCollect:
    """ReferenceCollector.collect() on the fixture project."""

    def test_one_site_per_file(self, collector, foo_target):
        sites = collector.collect(foo_target)
        assert [s.unit.name for s in sites] == ['Bar.java', 'Foo.java', 'Baz.java', 'Qux.java', 'beans.xml']

    def test_no_import_sites(self, collector, foo_target):
        sites = collector.collect(foo_target)
        assert all(not s.context.is_import for s in sites)

    def test_import_only_files_are_dropped(self, collector, foo_target):
        files = {s.unit.name for s in collector.collect(foo_target)}
        assert 'OnlyImports.java' not in files
        assert 'StaticUser.java' not in files

    def test_file_with_import_keeps_body_usage(self, collector, foo_target):
        baz = next(s for s in collector.collect(foo_target) if s.unit.name == 'Baz.java')
        assert (baz.location.line, baz.location.column) == (7, 9)
        assert baz.context is UsageContext.TYPE_REFERENCE

    def test_first_reference_in_file_is_kept(self, collector, foo_target):
        bar = next(s for s in collector.collect(foo_target) if s.unit.name == 'Bar.java')
        assert (bar.location.line, bar.location.column) == (4, 13)

    def test_unreferenced_class_falls_back_to_own_file(self, collector, detector, java_file):
        lonely = detector.resolve(SourcePosition(java_file('com/acme/Lonely.java'), 3, 14))
        assert collector.collect(lonely) == []

    def test_without_project_scope_searches_own_file(self, foo_target):
        collector = ReferenceCollector(ReferenceIndex())
        sites = collector.collect(foo_target)
        assert [s.unit.name for s in sites] == ['Foo.java']
        assert sites[0].location.line == 10

    def test_empty_project_falls_back(self, foo_target, tmp_path, loader):
        empty = tmp_path / 'empty'
        empty.mkdir()
        collector = ReferenceCollector(ReferenceIndex(), project_scope=ProjectScope(empty, loader))
        assert [s.unit.name for s in collector.collect(foo_target)] == ['Foo.java']


class TestStaleness:
    """Edits to the target's file invalidate the query."""

    def test_stale_target_raises(self, collector, foo_target, java_file):
        path = java_file('com/acme/Foo.java')
        path.write_text(path.read_text().replace('Helper', 'Assistant'))

        with pytest.raises(StaleReferenceError) as exc_info:
            collector.collect(foo_target)
        assert 'com.acme.Foo' in str(exc_info.value)

    def test_deleted_target_raises(self, collector, foo_target, java_file):
        java_file('com/acme/Foo.java').unlink()
        with pytest.raises(StaleReferenceError):
            collector.collect(foo_target)


class TestCancellation:
    """Cancellation before and during the query."""

    def test_cancelled_before_query(self, collector, foo_target):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(QueryCancelledError):
            collector.collect(foo_target, token)

    def test_cancelled_mid_enumeration(self, collector, foo_target):
        token = CountdownToken(checks_allowed=3)
        with pytest.raises(QueryCancelledError):
            collector.collect(foo_target, token)
        assert token.is_cancelled()
        assert token.checks == 4
