# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""Final check that the container tooling is usable."""

from typing import Dict, Sequence

from alpinebox.errors import VerificationError
from alpinebox.utils.logging import get_logger
from alpinebox.utils.process import CommandRunner

logger = get_logger(__name__)

DEFAULT_TOOLS = ("docker", "docker-compose")


class ToolVerifier:
    """Asks each tool for its version string."""

    def __init__(self, runner: CommandRunner, tools: Sequence[str] = DEFAULT_TOOLS):
        self.runner = runner
        self.tools = list(tools)

    def verify(self) -> Dict[str, str]:
        """Run ``<tool> --version`` for every tool.

        Returns:
            Mapping of tool name to its version line

        Raises:
            VerificationError: If any tool fails or prints nothing
        """
        logger.info("Verifying Docker installation...")
        versions = {}
        for tool in self.tools:
            result = self.runner.run([tool, "--version"], timeout=30)
            output = result.stdout.strip()
            if not result.ok or not output:
                logger.error("Docker verification failed")
                raise VerificationError(
                    f"{tool} is not usable: {result.describe()}",
                    hint="Re-provision the VM once the cause is fixed",
                )
            versions[tool] = output.splitlines()[0]
            logger.version(versions[tool])
        logger.success("Docker installation verified")
        return versions
