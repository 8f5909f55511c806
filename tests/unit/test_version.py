"""Tests for version metadata."""

import nadfun
from nadfun.version import __version__, __version_info__


def test_version_info_matches_version_string():
    assert ".".join(str(part) for part in __version_info__) == __version__
    assert len(__version_info__) == 3


def test_package_exposes_version():
    assert nadfun.VERSION == __version__
    assert nadfun.PROJECT_NAME == "nadfun-trading"
