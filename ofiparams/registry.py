"""Registry of declared parameter cells."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar

from .errors import DuplicateParameterError, UnknownParameterError
from .obs.events import DiagnosticSink
from .param.cell import IntParam, ParameterCell, StrParam

T = TypeVar("T")


@dataclass
class ParameterRegistry:
    """Map parameter names to their :class:`ParameterCell`.

    Cells are independent: they share no state and resolve in whatever order
    they are first accessed.  ``sink`` and ``environ`` are handed to every cell
    declared through :meth:`declare_int` or :meth:`declare_str`, which lets a
    test build a fresh registry against a controlled environment.
    """

    sink: Optional[DiagnosticSink] = None
    environ: Optional[Mapping[str, str]] = None
    cells: Dict[str, ParameterCell[Any]] = field(default_factory=dict)

    def register(self, cell: ParameterCell[T]) -> ParameterCell[T]:
        """Register ``cell`` under its name."""

        if cell.name in self.cells:
            raise DuplicateParameterError(f"Parameter '{cell.name}' is already registered")
        self.cells[cell.name] = cell
        return cell

    def declare_int(self, name: str, default: int, env: str | None = None) -> ParameterCell[int]:
        """Declare an integer parameter controlled by ``OFI_NCCL_<env>``."""

        cell = IntParam(name, env or name.upper(), default, sink=self.sink, environ=self.environ)
        return self.register(cell)

    def declare_str(self, name: str, default: str, env: str | None = None) -> ParameterCell[str]:
        """Declare a text parameter controlled by ``OFI_NCCL_<env>``."""

        cell = StrParam(name, env or name.upper(), default, sink=self.sink, environ=self.environ)
        return self.register(cell)

    def get(self, name: str) -> ParameterCell[Any]:
        """Return the cell registered under ``name``."""

        if name not in self.cells:
            raise UnknownParameterError(f"Unknown parameter: {name}")
        return self.cells[name]

    def value(self, name: str) -> Any:
        """Resolve and return the value of ``name``."""

        return self.get(name).get()

    def accessor(self, name: str) -> Callable[[], Any]:
        """Return a zero-argument accessor for ``name``."""

        return self.get(name).get

    def names(self) -> List[str]:
        return list(self.cells)

    def snapshot(self) -> Dict[str, Any]:
        """Resolve every parameter and return ``{name: value}``."""

        return {name: cell.get() for name, cell in self.cells.items()}

    def __contains__(self, name: object) -> bool:
        return name in self.cells

    def __iter__(self) -> Iterator[ParameterCell[Any]]:
        return iter(self.cells.values())

    def __len__(self) -> int:
        return len(self.cells)


__all__ = ["ParameterRegistry"]
