"""Shared fixtures for depscope tests."""
import shutil
from pathlib import Path

import pytest

from depscope.analyzer.collector import ReferenceCollector
from depscope.analyzer.declaration import DeclarationDetector
from depscope.analyzer.elements import SourcePosition
from depscope.analyzer.reference_index import ProjectScope, ReferenceIndex
from depscope.analyzer.source_unit import SourceUnitLoader


FIXTURES_DIR = Path(__file__).parent / 'fixtures'
JAVA_PROJECT = FIXTURES_DIR / 'java_project'
JAVA_SOURCES = Path('src') / 'main' / 'java'


@pytest.fixture
def loader():
    """Loader that also reads XML and properties files as text."""
    return SourceUnitLoader(text_extensions=['.xml', '.properties'])


@pytest.fixture
def project_root(tmp_path):
    """Private copy of the fixture project, safe to edit."""
    root = tmp_path / 'java_project'
    shutil.copytree(JAVA_PROJECT, root)
    return root


@pytest.fixture
def java_file(project_root):
    """Resolve a path like 'com/acme/Foo.java' inside the copied project."""
    def _java_file(relative: str) -> Path:
        return (project_root / JAVA_SOURCES / relative).resolve()
    return _java_file


@pytest.fixture
def detector(loader):
    return DeclarationDetector(loader)


@pytest.fixture
def foo_target(detector, java_file):
    """TargetClass for com.acme.Foo (name on line 3, column 14)."""
    return detector.resolve(SourcePosition(java_file('com/acme/Foo.java'), 3, 14))


@pytest.fixture
def project_scope(project_root, loader):
    return ProjectScope(project_root, loader)


@pytest.fixture
def collector(project_scope):
    return ReferenceCollector(ReferenceIndex(), project_scope=project_scope)
