"""
Policy Tables

Loads the curriculum rule table (course code -> required flag) and the
course identity table (course code -> identity code) from JSON files.

A missing file yields an empty table with a warning. A file that exists
but cannot be parsed raises ConfigurationError at load time.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Set, Union

from pydantic import BaseModel, Field

from .exceptions import ConfigurationError
from .identity import normalize_code, normalize_identity_map

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PolicyTables(BaseModel):
    """Normalized rule and identity tables for one request."""
    required_codes: Set[str] = Field(default_factory=set)
    identity_map: Dict[str, str] = Field(default_factory=dict)


def _read_json_object(path: PathLike, label: str) -> Optional[dict]:
    path = Path(path)
    if not path.exists():
        logger.warning("%s not found at %s; continuing without it", label, path)
        return None
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read {label} at {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{label} at {path} must be a JSON object")
    return data


def load_curriculum_rules(path: PathLike) -> Set[str]:
    """Normalized codes marked required (value true) in the rule table."""
    data = _read_json_object(path, "curriculum rules")
    if data is None:
        return set()
    for code, flag in data.items():
        if not isinstance(flag, bool):
            raise ConfigurationError(f"curriculum rule for {code!r} must be true/false")
    required = {normalize_code(code) for code, flag in data.items() if flag}
    required.discard("")
    logger.info("Loaded %d required rules", len(required))
    return required


def load_identity_map(path: PathLike) -> Dict[str, str]:
    """normalized course code -> identity code"""
    data = _read_json_object(path, "course identities")
    if data is None:
        return {}
    for code, identity in data.items():
        if not isinstance(identity, str):
            raise ConfigurationError(f"identity for {code!r} must be a string")
    mapping = normalize_identity_map(data)
    logger.info("Loaded %d identity mappings", len(mapping))
    return mapping


def load_policy_tables(rules_path: PathLike, identities_path: PathLike) -> PolicyTables:
    return PolicyTables(
        required_codes=load_curriculum_rules(rules_path),
        identity_map=load_identity_map(identities_path),
    )
