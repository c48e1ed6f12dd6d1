# Copyright (c) 2025 Marc Schütze <scharc@gmail.com>
# SPDX-License-Identifier: MIT
# See LICENSE file in the project root for full license information.

"""alpinebox - Provisioning and release upgrades for Alpine Linux container VMs."""

__version__ = "2.0.0"
