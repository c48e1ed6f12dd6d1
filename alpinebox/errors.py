# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Error taxonomy for the provisioning engine.

Recoverable errors (NetworkError, ParseError) are caught by the phase that
depends on them and the run continues without that step. Fatal errors
propagate to the CLI, which logs them and exits with status 1.
"""

from typing import Optional


class ProvisionError(Exception):
    """Base class for provisioning failures.

    This exception bubbles up to handle_errors which formats it nicely.
    """

    fatal = True

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class NetworkError(ProvisionError):
    """A remote fetch was unreachable, timed out or returned nothing."""

    fatal = False


class ParseError(ProvisionError):
    """A version or tag string did not match the expected pattern."""

    fatal = False


class RepositoryWriteError(ProvisionError):
    """The apk repositories file could not be written or restored."""


class UpgradeExecutionError(ProvisionError):
    """apk failed to apply upgrades or install packages."""


class VerificationError(ProvisionError):
    """Docker or docker-compose did not report a version after provisioning."""


class LockError(ProvisionError):
    """Another provisioning run holds the lock."""


class PersistenceCommitWarning(ProvisionError):
    """lbu commit failed on a diskless root. Logged, never raised to the CLI."""

    fatal = False
