# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release layout, packaging and publishing.

Takes a built tree and turns it into the four files that get uploaded:
<base>.tar.gz, <base>.tar.bz2 and an .md5 sidecar for each.
"""
