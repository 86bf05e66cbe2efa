from __future__ import annotations

import logging
from typing import Optional

from rich.logging import RichHandler

from waymaps.config import LOG_LEVEL


def configure(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_time=False, show_path=False)],
    )
