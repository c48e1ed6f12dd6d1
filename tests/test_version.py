# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT

"""Tests for release version parsing and inspection."""

import pytest

from conftest import release_index

from alpinebox.errors import NetworkError, ParseError
from alpinebox.provision.version import (
    UNKNOWN_VERSION,
    ReleaseVersion,
    VersionInspector,
    parse_release_index,
    same_major_minor,
)

INDEX_URL = "http://mirror.test/alpine/latest-stable/releases/x86_64/"


class TestReleaseVersion:
    """Parsing and ordering of release triples."""

    def test_parse_plain(self):
        assert ReleaseVersion.parse("3.19.1") == ReleaseVersion(3, 19, 1)

    def test_parse_tag_prefix_and_suffix(self):
        assert ReleaseVersion.parse("v2.27.0") == ReleaseVersion(2, 27, 0)
        assert ReleaseVersion.parse("3.20.0_rc1\n") == ReleaseVersion(3, 20, 0)

    @pytest.mark.parametrize("text", ["", "Unknown", "3.19", "edge"])
    def test_parse_rejects_non_triples(self, text):
        with pytest.raises(ParseError):
            ReleaseVersion.parse(text)

    def test_ordering_is_numeric(self):
        assert ReleaseVersion(3, 9, 0) < ReleaseVersion(3, 10, 0)
        assert max(ReleaseVersion(3, 20, 9), ReleaseVersion(3, 21, 0)) == ReleaseVersion(3, 21, 0)

    def test_str_and_major_minor(self):
        version = ReleaseVersion(3, 20, 2)
        assert str(version) == "3.20.2"
        assert version.major_minor == "3.20"


class TestSameMajorMinor:
    def test_patch_difference_matches(self):
        assert same_major_minor("3.19.0", "3.19.7")

    def test_minor_difference_does_not_match(self):
        assert not same_major_minor("3.19.0", "3.20.0")

    def test_accepts_release_versions(self):
        assert same_major_minor(ReleaseVersion(3, 19, 1), "3.19.4")

    def test_unknown_never_matches(self):
        assert not same_major_minor(UNKNOWN_VERSION, "3.19.0")


class TestParseReleaseIndex:
    def test_picks_newest_minirootfs(self):
        html = release_index("3.20.1", "3.20.3", "3.20.2")
        assert parse_release_index(html) == ReleaseVersion(3, 20, 3)

    def test_sorts_numerically_not_lexically(self):
        html = release_index("3.9.6", "3.10.0")
        assert parse_release_index(html) == ReleaseVersion(3, 10, 0)

    def test_ignores_release_candidates(self):
        html = (
            '<a href="alpine-minirootfs-3.21.0_rc1-x86_64.tar.gz">rc</a>'
            '<a href="alpine-minirootfs-3.20.3-x86_64.tar.gz">stable</a>'
        )
        assert parse_release_index(html) == ReleaseVersion(3, 20, 3)

    def test_no_releases(self):
        assert parse_release_index("<html><body>Not Found</body></html>") is None


class TestVersionInspector:
    def test_current_version_reads_release_file(self, tmp_path, http):
        release = tmp_path / "alpine-release"
        release.write_text("3.19.1\n")
        inspector = VersionInspector(release, INDEX_URL, http)
        assert inspector.current_version() == "3.19.1"

    def test_current_version_unknown_when_missing(self, tmp_path, http):
        inspector = VersionInspector(tmp_path / "missing", INDEX_URL, http)
        assert inspector.current_version() == UNKNOWN_VERSION

    def test_latest_version(self, tmp_path, http):
        http.pages[INDEX_URL] = release_index("3.20.3")
        inspector = VersionInspector(tmp_path / "r", INDEX_URL, http)
        assert inspector.latest_version() == ReleaseVersion(3, 20, 3)

    def test_latest_version_absent_on_network_error(self, tmp_path, http):
        http.pages[INDEX_URL] = NetworkError("unreachable")
        inspector = VersionInspector(tmp_path / "r", INDEX_URL, http)
        assert inspector.latest_version() is None

    def test_latest_version_absent_when_nothing_matches(self, tmp_path, http):
        http.pages[INDEX_URL] = "<html>maintenance</html>"
        inspector = VersionInspector(tmp_path / "r", INDEX_URL, http)
        assert inspector.latest_version() is None
