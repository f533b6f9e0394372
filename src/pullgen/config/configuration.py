"""
Registry of the settings pullgen reads.

Each entry documents one environment variable: the group ``pullgen settings
show`` lists it under, what it controls, and the values it accepts when it is
an enumeration.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence


@dataclass(frozen=True)
class Setting:
    env_var: str
    group: str
    description: str
    choices: tuple[str, ...] = ()


_registry: Dict[str, Setting] = {}


def register_setting(
    env_var: str,
    group: str,
    description: str,
    choices: Sequence[str] = (),
) -> Setting:
    """Add the setting for ``env_var``, replacing any earlier entry for it."""
    if not env_var or env_var != env_var.upper():
        raise ValueError(f"setting names must be upper-case environment variables, got {env_var!r}")
    setting = Setting(env_var=env_var, group=group, description=description, choices=tuple(choices))
    _registry[env_var] = setting
    return setting


def get_settings_registry() -> List[Setting]:
    """Registered settings ordered by group, then name."""
    return sorted(_registry.values(), key=lambda s: (s.group, s.env_var))
