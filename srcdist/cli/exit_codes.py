# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

Cron wrappers only check zero versus non-zero, so every failure class maps
to 1. The names stay separate so call sites say which kind of failure they
are reporting.
"""

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 1
RELEASE_ERROR: int = 1
