# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build stage: runs the project's own toolchain inside the exported tree.

No release logic lives here, only the generated-file production and the
all-or-nothing step runner the packager reuses.
"""
