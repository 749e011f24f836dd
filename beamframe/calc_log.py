# beamframe/calc_log.py
"""
CALCULATION LOG: Step-by-Step Audit Trail
=========================================

Each solver narrates what it computed as an ordered list of sections,
each holding numbered steps:

    CalculationLog
      └─ CalculationSection  "2. Fixed End Moments"
           └─ CalculationStep  #1  description / formula / substitution / result [unit]

Formulas are LaTeX strings. The log is for presentation only; nothing
reads values back out of it.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class CalculationStep:
    step_number: int
    description: str
    formula: Optional[str] = None
    substitution: Optional[str] = None
    result: Optional[str] = None
    unit: Optional[str] = None
    highlight: bool = False


@dataclass(frozen=True)
class CalculationSection:
    title: str
    description: str = ""
    steps: Tuple[CalculationStep, ...] = ()


@dataclass(frozen=True)
class CalculationLog:
    sections: Tuple[CalculationSection, ...] = ()

    @property
    def titles(self) -> List[str]:
        return [s.title for s in self.sections]

    def section(self, title: str) -> CalculationSection:
        """Section whose title is, or starts with, `title`."""
        for s in self.sections:
            if s.title == title or s.title.startswith(title):
                return s
        raise KeyError(title)


@dataclass
class LogBuilder:
    """Mutable helper used while a solve() is running."""
    _sections: List[CalculationSection] = field(default_factory=list)
    _title: Optional[str] = None
    _description: str = ""
    _steps: List[CalculationStep] = field(default_factory=list)

    def section(self, title: str, description: str = "") -> "LogBuilder":
        self._close()
        self._title = title
        self._description = description
        return self

    def step(
        self,
        description: str,
        formula: Optional[str] = None,
        substitution: Optional[str] = None,
        result: Optional[str] = None,
        unit: Optional[str] = None,
        highlight: bool = False,
    ) -> "LogBuilder":
        if self._title is None:
            raise RuntimeError("step() called before section()")
        self._steps.append(CalculationStep(
            step_number=len(self._steps) + 1,
            description=description,
            formula=formula,
            substitution=substitution,
            result=result,
            unit=unit,
            highlight=highlight,
        ))
        return self

    def _close(self) -> None:
        if self._title is not None:
            self._sections.append(
                CalculationSection(self._title, self._description, tuple(self._steps))
            )
        self._title = None
        self._description = ""
        self._steps = []

    def build(self) -> CalculationLog:
        self._close()
        return CalculationLog(tuple(self._sections))


def fmt(value: float, digits: int = 2) -> str:
    """Fixed-point text, with -0.00 shown as 0.00."""
    text = f"{value:.{digits}f}"
    if text.startswith("-") and float(text) == 0.0:
        return text[1:]
    return text


def sci(value: float, digits: int = 4) -> str:
    return f"{value:.{digits}e}"
