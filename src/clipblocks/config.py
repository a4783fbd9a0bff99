"""Configuration loader for the paste whitelist and heuristics.

Loads the paste policy from YAML files with priority resolution:
1. User config: ~/.config/clipblocks/policy.yaml (highest priority)
2. Project config: .clipblocks/policy.yaml in current directory
3. Package defaults: shipped with clipblocks (fallback)
"""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

POLICY_FILENAME = "policy.yaml"

# Lazy import yaml to avoid startup cost
_yaml = None

_default_policy: Optional["PolicyConfig"] = None


def _get_yaml():
    """Lazy-load PyYAML."""
    global _yaml
    if _yaml is None:
        import yaml
        _yaml = yaml
    return _yaml


def _get_package_defaults_path() -> Path:
    """Get path to the packaged default policy using importlib.resources."""
    try:
        from importlib.resources import files
        return files("clipblocks.policy_data") / "_defaults"
    except (ImportError, TypeError):
        # Editable installs without package metadata
        return Path(__file__).parent / "policy_data" / "_defaults"


class PolicyConfig:
    """Whitelist and heuristic policy for the paste pipeline.

    Settings are layered: package defaults first, then project and user
    files, then explicit overrides. ``allowed_attributes`` merges per tag;
    every other key is replaced wholesale by a higher-priority source.
    """

    CONFIG_LOCATIONS = [
        Path.cwd() / ".clipblocks",                       # Project config
        Path.home() / ".config" / "clipblocks",           # User overrides
    ]

    KNOWN_KEYS = frozenset([
        "inline_tags", "block_tags", "noise_tags", "line_break_tags", "allowed_attributes",
        "double_br_is_block", "base_url", "tracker_size",
    ])

    def __init__(
        self,
        overrides: Optional[dict] = None,
        include_user_config: bool = True,
    ):
        """Initialize the policy.

        Args:
            overrides: Settings applied on top of every file.
            include_user_config: Whether to read project and user policy
                                 files. Package defaults are always read.
        """
        self._settings: dict = {}
        self._load_file(_get_package_defaults_path() / POLICY_FILENAME)
        if include_user_config:
            for config_dir in self.CONFIG_LOCATIONS:
                self._load_file(config_dir / POLICY_FILENAME)
        if overrides:
            self._merge(overrides, source="overrides")
        self._resolve()

    @classmethod
    def from_dict(cls, overrides: dict) -> "PolicyConfig":
        """Build a policy from package defaults plus ``overrides`` only."""
        return cls(overrides=overrides, include_user_config=False)

    @classmethod
    def default(cls) -> "PolicyConfig":
        """Return the process-wide default policy, loading it on first use."""
        global _default_policy
        if _default_policy is None:
            _default_policy = cls()
        return _default_policy

    def _load_file(self, path) -> None:
        """Merge one YAML file into the settings if it exists and parses."""
        if not path.is_file():
            return

        yaml = _get_yaml()
        content = path.read_text(encoding="utf-8")

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            logger.warning("Skipping invalid policy file %s: %s", path, exc)
            return

        if not isinstance(data, dict):
            return
        self._merge(data, source=str(path))

    def _merge(self, data: dict, source: str) -> None:
        for key, value in data.items():
            if key not in self.KNOWN_KEYS:
                logger.warning("Ignoring unknown policy key %r in %s", key, source)
                continue
            if key == "allowed_attributes":
                merged = dict(self._settings.get(key, {}))
                merged.update(value or {})
                self._settings[key] = merged
            else:
                self._settings[key] = value

    def _resolve(self) -> None:
        """Freeze the merged settings into the attributes filters read."""
        settings = self._settings
        self.inline_tags = _tag_set(settings.get("inline_tags"))
        self.block_tags = _tag_set(settings.get("block_tags"))
        self.noise_tags = _tag_set(settings.get("noise_tags"))
        self.line_break_tags = _tag_set(settings.get("line_break_tags"))
        # Every tag that survives the non-whitelist unwrapper
        self.whitelist = self.inline_tags | self.block_tags
        self.allowed_attributes = {
            str(tag).lower(): _tag_set(names)
            for tag, names in (settings.get("allowed_attributes") or {}).items()
        }
        self.double_br_is_block = bool(settings.get("double_br_is_block", True))
        self.base_url = settings.get("base_url") or ""
        self.tracker_size = int(settings.get("tracker_size", 1))


def _tag_set(values) -> frozenset[str]:
    return frozenset(str(value).lower() for value in (values or []))
