"""
Model-specific configuration classes.

- calcsize: Mode size diagnosis and Aitken <-> Accumulation transfer
"""

from __future__ import annotations

from calcsize.config.models.calcsize import CalcSizeConfig, CalcSizeParameters

__all__ = ["CalcSizeConfig", "CalcSizeParameters"]
