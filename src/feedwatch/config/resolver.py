"""
Configuration resolution and environment variable substitution.
"""

import os
import re
from typing import Any


def resolve_config(config_data: dict[str, Any], env: str = "dev") -> dict[str, Any]:
    """
    Resolve ``${VAR_NAME}`` environment references and the ``{env}`` placeholder.

    Unset variables are left as-is so validation can report them.
    """
    return _resolve_value(config_data, env)


def _resolve_value(value: Any, env: str) -> Any:
    if isinstance(value, dict):
        return {k: _resolve_value(v, env) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_value(item, env) for item in value]
    elif isinstance(value, str):
        result = re.sub(r"\${([^}]+)}", lambda m: os.getenv(m.group(1), m.group(0)), value)
        return result.replace("{env}", env)
    else:
        return value


def is_unresolved(value: Any) -> bool:
    """True when a string still contains an unsubstituted ``${VAR}`` reference."""
    return isinstance(value, str) and re.search(r"\${[^}]+}", value) is not None
