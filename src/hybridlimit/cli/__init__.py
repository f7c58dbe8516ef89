"""hybridlimit CLI package."""

from __future__ import annotations

from ._app import app as app  # noqa: F401
from ._app import console as console  # noqa: F401
from ._rich_output import key_value_panel as key_value_panel  # noqa: F401
from ._rich_output import result_banner as result_banner  # noqa: F401
from ._rich_output import section_header as section_header  # noqa: F401
from ._rich_output import trace_table as trace_table  # noqa: F401
from ._theme import HL_THEME as HL_THEME  # noqa: F401
from ._theme import PALETTE as PALETTE  # noqa: F401


def _register_commands() -> None:
    """Register command modules; import order sets the ``--help`` panel order."""
    # isort: off
    from . import _limit  # noqa: F401
    # isort: on


_register_commands()
