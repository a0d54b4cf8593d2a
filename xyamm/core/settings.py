"""
Engine settings.

Defaults ship as `xyamm/config/amm_defaults.yaml`. A deployment file passed to
`load_settings` is layered over them, then explicit `overrides` on top.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..kernels.python.cpmm_swap import BPS_DENOM
from ..kernels.python.fixed_point import U64_MAX


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AmmSettings:
    """Runtime config for the pool controller."""

    min_initial_liquidity: int = 1000
    max_fee_bps: int = BPS_DENOM
    lp_decimals: int = 6
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("min_initial_liquidity", "max_fee_bps", "lp_decimals"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if not (0 <= self.min_initial_liquidity <= U64_MAX):
            raise ValueError(f"min_initial_liquidity out of range: {self.min_initial_liquidity}")
        if not (0 <= self.max_fee_bps <= BPS_DENOM):
            raise ValueError(f"max_fee_bps must be in [0, {BPS_DENOM}]: {self.max_fee_bps}")
        if not (0 <= self.lp_decimals <= 18):
            raise ValueError(f"lp_decimals must be in [0, 18]: {self.lp_decimals}")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}: {self.log_level!r}")


def _defaults_path() -> Path:
    # xyamm/core/settings.py -> xyamm/ -> config/amm_defaults.yaml
    return Path(__file__).resolve().parents[1] / "config" / "amm_defaults.yaml"


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise TypeError(f"settings YAML must be a mapping: {path}")
    known = {f.name for f in fields(AmmSettings)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise ValueError(f"unknown settings keys in {path}: {unknown}")
    return dict(obj)


@lru_cache(maxsize=1)
def default_settings() -> AmmSettings:
    return AmmSettings(**_load_yaml_mapping(_defaults_path()))


def load_settings(
    path: Optional[Path | str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> AmmSettings:
    values = _load_yaml_mapping(_defaults_path())
    if path is not None:
        values.update(_load_yaml_mapping(Path(path)))
    if overrides:
        known = {f.name for f in fields(AmmSettings)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"unknown settings overrides: {unknown}")
        values.update(overrides)
    return AmmSettings(**values)
