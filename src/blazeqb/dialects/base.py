"""
Dialect strategy interfaces describing how compiled statements reach a driver.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Tuple

from ..query.statement import Statement


class Dialect(Protocol):
    """
    Strategy interface consumed by adapters before handing SQL to a driver.
    """

    @property
    def name(self) -> str: ...

    @property
    def param_style(self) -> str: ...

    def translate(self, statement: Statement) -> Tuple[str, List[Any]]: ...
