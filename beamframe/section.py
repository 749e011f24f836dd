# beamframe/section.py
"""
SECTION RIGIDITY: EI and EA from User Input
===========================================

A span or member states its flexural rigidity in one of three ways:

    direct       EI given outright (kN·m²)
    multiplier   EI = shared default EI × multiplier   (relative stiffness)
    separate     E and I given with units, converted to kN/m² and m⁴

Unit factors
------------
    E:  GPa ×1e6   MPa ×1e3   kPa ×1   kN/m² ×1         → kN/m²
    I:  m4 ×1      cm4 ×1e-8  mm4 ×1e-12                → m⁴
    A:  m2 ×1      cm2 ×1e-4  mm2 ×1e-6                 → m²

Axial rigidity (frames only): E·A when a section area is given in the
separate mode, otherwise EA ≈ 1000·EI (members practically inextensible).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import CONFIG, SolverConfig
from .errors import InputError


E_UNITS = {"GPa": 1e6, "MPa": 1e3, "kPa": 1.0, "kN/m²": 1.0, "kN/m2": 1.0}
I_UNITS = {"m4": 1.0, "cm4": 1e-8, "mm4": 1e-12}
A_UNITS = {"m2": 1.0, "cm2": 1e-4, "mm2": 1e-6}


def _convert(value: float, unit: str, table: dict, what: str) -> float:
    try:
        return value * table[unit]
    except KeyError:
        raise InputError(
            f"Unknown {what} unit '{unit}' (expected one of {sorted(table)})"
        ) from None


def convert_e(value: float, unit: str) -> float:
    """Young's modulus → kN/m²."""
    return _convert(value, unit, E_UNITS, "modulus")


def convert_i(value: float, unit: str) -> float:
    """Second moment of area → m⁴."""
    return _convert(value, unit, I_UNITS, "inertia")


def convert_a(value: float, unit: str) -> float:
    """Area → m²."""
    return _convert(value, unit, A_UNITS, "area")


class EIMode(str, Enum):
    DIRECT = "direct"
    MULTIPLIER = "multiplier"
    SEPARATE = "separate"


@dataclass(frozen=True)
class SectionDefaults:
    """Model-wide fallbacks for members that leave values out."""
    ei: float = CONFIG.default_ei
    e: float = CONFIG.default_e
    e_unit: str = CONFIG.default_e_unit
    i: float = CONFIG.default_i
    i_unit: str = CONFIG.default_i_unit
    a: float = CONFIG.default_a
    a_unit: str = CONFIG.default_a_unit

    @classmethod
    def from_config(cls, config: SolverConfig, ei: Optional[float] = None) -> "SectionDefaults":
        return cls(
            ei=config.default_ei if ei is None else ei,
            e=config.default_e, e_unit=config.default_e_unit,
            i=config.default_i, i_unit=config.default_i_unit,
            a=config.default_a, a_unit=config.default_a_unit,
        )


@dataclass(frozen=True)
class Rigidity:
    """
    How a span/member specifies its stiffness.

    Only the fields belonging to `mode` are read.
    """
    mode: EIMode = EIMode.MULTIPLIER
    ei: Optional[float] = None
    multiplier: float = 1.0
    E: Optional[float] = None
    e_unit: Optional[str] = None
    I: Optional[float] = None
    i_unit: Optional[str] = None
    A: Optional[float] = None
    a_unit: Optional[str] = None

    @classmethod
    def direct(cls, ei: float) -> "Rigidity":
        return cls(mode=EIMode.DIRECT, ei=ei)

    @classmethod
    def relative(cls, multiplier: float) -> "Rigidity":
        return cls(mode=EIMode.MULTIPLIER, multiplier=multiplier)

    @classmethod
    def separate(cls, E: float, I: float, e_unit: str = "GPa", i_unit: str = "m4",
                 A: Optional[float] = None, a_unit: str = "m2") -> "Rigidity":
        return cls(mode=EIMode.SEPARATE, E=E, e_unit=e_unit, I=I, i_unit=i_unit,
                   A=A, a_unit=a_unit)

    def e_value(self, defaults: SectionDefaults) -> float:
        """E in kN/m²."""
        if self.E is None:
            return convert_e(defaults.e, defaults.e_unit)
        return convert_e(self.E, self.e_unit or defaults.e_unit)

    def i_value(self, defaults: SectionDefaults) -> float:
        """I in m⁴."""
        if self.I is None:
            return convert_i(defaults.i, defaults.i_unit)
        return convert_i(self.I, self.i_unit or defaults.i_unit)

    def effective_ei(self, defaults: SectionDefaults) -> float:
        """EI in kN·m²."""
        if self.mode == EIMode.DIRECT:
            if self.ei is None:
                raise InputError("EI mode 'direct' requires an ei value")
            return float(self.ei)
        if self.mode == EIMode.SEPARATE:
            return self.e_value(defaults) * self.i_value(defaults)
        return float(defaults.ei * self.multiplier)

    def effective_ea(self, defaults: SectionDefaults,
                     ratio: float = CONFIG.ea_to_ei_ratio) -> float:
        """EA in kN."""
        if self.mode == EIMode.SEPARATE and self.A is not None:
            return self.e_value(defaults) * convert_a(self.A, self.a_unit or defaults.a_unit)
        return ratio * self.effective_ei(defaults)

    def describe(self, defaults: SectionDefaults) -> str:
        """Short text for the calculation log."""
        if self.mode == EIMode.DIRECT:
            return f"EI = {self.effective_ei(defaults):.0f} kN·m² (direct)"
        if self.mode == EIMode.SEPARATE:
            return (f"E = {self.e_value(defaults):.4e} kN/m², I = {self.i_value(defaults):.4e} m⁴, "
                    f"EI = {self.effective_ei(defaults):.0f} kN·m²")
        return f"EI = {self.multiplier:g} × {defaults.ei:.0f} = {self.effective_ei(defaults):.0f} kN·m²"
