# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Alpine release versions: the local release file and the upstream index."""

import re
from html.parser import HTMLParser
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

from alpinebox.errors import NetworkError, ParseError
from alpinebox.utils.http import HttpClient
from alpinebox.utils.logging import get_logger

logger = get_logger(__name__)

# Reported when /etc/alpine-release cannot be read
UNKNOWN_VERSION = "Unknown"

VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")

# alpine-minirootfs-3.20.3-x86_64.tar.gz
MINIROOTFS_PATTERN = re.compile(r"^alpine-minirootfs-(\d+\.\d+\.\d+)-[\w-]+\.tar\.gz$")


class ReleaseVersion(NamedTuple):
    """A three-part release number, ordered component-wise."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "ReleaseVersion":
        """Parse ``X.Y.Z`` (optionally ``vX.Y.Z``) from the start of text.

        Raises:
            ParseError: If text does not start with a release triple
        """
        match = VERSION_PATTERN.match(text.strip()) if text else None
        if not match:
            raise ParseError(f"Not a release version: {text!r}")
        return cls(*(int(part) for part in match.groups()))

    @property
    def major_minor(self) -> str:
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


VersionLike = Union[str, ReleaseVersion]


def _coerce(value: VersionLike) -> ReleaseVersion:
    if isinstance(value, ReleaseVersion):
        return value
    return ReleaseVersion.parse(value)


def same_major_minor(a: VersionLike, b: VersionLike) -> bool:
    """Compare only the major and minor components.

    Unparseable input never matches.
    """
    try:
        left, right = _coerce(a), _coerce(b)
    except ParseError:
        return False
    return (left.major, left.minor) == (right.major, right.minor)


class _AnchorCollector(HTMLParser):
    """Collects href targets from an Apache/nginx directory index."""

    def __init__(self):
        super().__init__()
        self.hrefs: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag != "a":
            return
        for name, value in attrs:
            if name == "href" and value:
                self.hrefs.append(value)


def parse_release_index(html: str) -> Optional[ReleaseVersion]:
    """Pick the newest release from a releases directory listing.

    Only minirootfs tarballs are considered, since every stable release
    publishes exactly one per architecture.
    """
    collector = _AnchorCollector()
    collector.feed(html)
    collector.close()

    versions = []
    for href in collector.hrefs:
        name = href.rsplit("/", 1)[-1]
        match = MINIROOTFS_PATTERN.match(name)
        if match:
            versions.append(ReleaseVersion.parse(match.group(1)))

    return max(versions) if versions else None


class VersionInspector:
    """Reports the installed and the latest published Alpine release."""

    def __init__(self, release_file: Path, index_url: str, http: HttpClient):
        self.release_file = Path(release_file)
        self.index_url = index_url
        self.http = http

    def current_version(self) -> str:
        """Contents of the release file, or UNKNOWN_VERSION."""
        try:
            text = self.release_file.read_text().strip()
        except OSError:
            return UNKNOWN_VERSION
        return text or UNKNOWN_VERSION

    def latest_version(self) -> Optional[ReleaseVersion]:
        """Newest stable release on the mirror, or None if unavailable."""
        logger.info("Fetching latest Alpine version from official repository...")
        try:
            listing = self.http.get_text(self.index_url)
        except NetworkError as e:
            logger.error(f"Could not fetch latest Alpine version: {e}")
            return None

        latest = parse_release_index(listing)
        if latest is None:
            logger.error(f"No release found in listing at {self.index_url}")
            return None

        logger.success(f"Latest Alpine version found: {latest}")
        return latest
