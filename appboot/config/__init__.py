"""Configuration resolution.

- YAML sources under `<root>/config/` (default, per-topic, per-environment)
- layered external config (dotfiles, prefixed env vars, argv)
- runtime overrides and the reserved HOST/PORT variables
"""

from __future__ import annotations

from appboot.config.merge import deep_merge
from appboot.config.model import ConfigBag
from appboot.config.resolver import ConfigResolver, resolve_config

__all__ = ["ConfigBag", "ConfigResolver", "deep_merge", "resolve_config"]
