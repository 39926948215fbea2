# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""srcdist — build source-release tarballs from a git revision."""

__version__ = "0.1.0"
