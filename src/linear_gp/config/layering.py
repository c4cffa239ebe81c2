"""Layer configuration values from files, environment variables, and explicit overrides, letting later sources override earlier ones."""

from __future__ import annotations
from dataclasses import fields as dc_fields
from typing import Any, Dict, Mapping, Type, Union, get_args, get_origin, get_type_hints
import os
import types

from linear_gp.utils.errors import ConfigurationError
from .model import HyperParameters, ProgramParams


def _try_parse_bool(s: str) -> bool:
    t = s.strip().lower()
    if t in {"1", "true", "yes", "on", "y"}:
        return True
    if t in {"0", "false", "no", "off", "n"}:
        return False
    # Fallback: non-empty truthy
    return bool(t)


def _unwrap_optional(to_type: Any) -> tuple[Any, bool]:
    origin = get_origin(to_type)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(to_type) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return to_type, False


def _coerce_value(val: Any, to_type: Any) -> Any:
    to_type, optional = _unwrap_optional(to_type)
    if val is None:
        return None
    if optional and isinstance(val, str) and val.strip().lower() in {"", "none", "null"}:
        return None
    if get_origin(to_type) is tuple:
        if isinstance(val, str):
            return tuple(part.strip() for part in val.split(",") if part.strip())
        if isinstance(val, (list, tuple)):
            return tuple(val)
        return val
    if not isinstance(to_type, type) or type(val) is to_type:
        return val
    try:
        if to_type is bool:
            if isinstance(val, str):
                return _try_parse_bool(val)
            return bool(val)
        if to_type in (int, float, str):
            return to_type(val)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"cannot convert {val!r} to {to_type.__name__}") from e
    return val


def _load_toml(path: str) -> Dict[str, Any]:
    import tomllib
    with open(path, "rb") as f:
        return tomllib.load(f)


def _load_yaml(path: str) -> Dict[str, Any]:
    import yaml
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a config file (TOML or YAML).

    Returns a nested dict. Accepts top-level sections ``evolution`` and
    ``program`` or flat keys matching :class:`HyperParameters` field names.
    """
    ext = os.path.splitext(str(path))[1].lower()
    if ext in (".toml", ".tml"):
        return _load_toml(str(path))
    if ext in (".yaml", ".yml"):
        return _load_yaml(str(path))
    raise ConfigurationError(f"Unsupported config extension: {ext}")


def _field_types(dc_type: Type) -> Dict[str, Any]:
    hints = get_type_hints(dc_type)
    return {f.name: hints.get(f.name, f.type) for f in dc_fields(dc_type)}


def _collect_env_overrides(dc_type: Type, prefix: str) -> Dict[str, Any]:
    """Collect env var overrides for a dataclass.

    Env keys use uppercase with underscores, e.g. ``LGP_POPULATION_SIZE``.
    """
    out: Dict[str, Any] = {}
    names = {name.lower(): name for name in _field_types(dc_type)}
    plen = len(prefix)
    for k, v in os.environ.items():
        if not k.startswith(prefix):
            continue
        key = k[plen:].lower()
        if key in names:
            out[names[key]] = v
    return out


def layer_dataclass_config(
    dc_type: Type,
    *,
    file_cfg: Mapping[str, Any] | None,
    env_prefix: str,
    overrides: Mapping[str, Any] | None,
) -> Dict[str, Any]:
    """Return a merged mapping for dc_type following precedence: file < env < overrides.

    Only scalar-like fields present on the dataclass are included; types are
    coerced best-effort.
    """
    result: Dict[str, Any] = {}
    field_types = _field_types(dc_type)
    sources = (
        dict(file_cfg or {}),
        _collect_env_overrides(dc_type, env_prefix),
        dict(overrides or {}),
    )
    for source in sources:
        for k, v in source.items():
            if k in field_types and not isinstance(v, Mapping):
                result[k] = _coerce_value(v, field_types[k])
    return result


def load_hyper_parameters(
    path: str | os.PathLike | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    env_prefix: str = "LGP_",
) -> HyperParameters:
    """Build validated :class:`HyperParameters` from file, env and overrides.

    ``overrides`` may carry a nested ``program`` mapping for
    :class:`ProgramParams` fields. Program env vars use ``<prefix>PROGRAM_``.
    """
    raw = load_config_file(str(path)) if path is not None else {}
    evo_section = raw.get("evolution", raw) if isinstance(raw.get("evolution"), Mapping) else raw
    prog_section = raw.get("program") if isinstance(raw.get("program"), Mapping) else {}
    overrides = dict(overrides or {})
    prog_overrides = overrides.pop("program", None) or {}

    evo_values = layer_dataclass_config(
        HyperParameters, file_cfg=evo_section, env_prefix=env_prefix, overrides=overrides
    )
    evo_values.pop("program", None)
    prog_values = layer_dataclass_config(
        ProgramParams,
        file_cfg=prog_section,
        env_prefix=f"{env_prefix}PROGRAM_",
        overrides=prog_overrides,
    )
    hyper_params = HyperParameters(**evo_values, program=ProgramParams(**prog_values))
    hyper_params.validate()
    return hyper_params
