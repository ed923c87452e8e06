# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""CheckTree exceptions."""

from __future__ import annotations


class CheckTreeError(Exception):
    """Base exception for CheckTree errors."""

    pass


class UnknownKeyError(CheckTreeError, KeyError):
    """Raised when a key has never been seen by the TreeStore."""

    pass


class FetchFailure(CheckTreeError):
    """Raised by a data source when a fetch cannot be completed."""

    pass


class MalformedResponse(CheckTreeError):
    """A data source response that disagrees with what was requested or known.

    Never raised by the library: instances are logged and collected so the
    tree stays usable with a slightly buggy data source.
    """

    pass


class SelectionPendingError(CheckTreeError):
    """Raised when a selection fetch is started while another is in flight."""

    pass
