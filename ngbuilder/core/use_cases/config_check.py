"""
Config check use case — validate ngbuilder.yml and report issues.
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from ngbuilder.core.config.loader import ConfigError, find_config_file, load_config
from ngbuilder.core.models.options import BuilderConfig

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: BuilderConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "targets": list(self.config.targets) if self.config else [],
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate builder configuration and report issues.

    Args:
        config_path: Optional explicit path to ngbuilder.yml.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No ngbuilder.yml found.")
        return result
    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    if not config.targets:
        result.warnings.append("No targets defined. There is nothing to build.")

    node_checked = False
    for name, target in config.targets.items():
        if not target.src:
            result.errors.append(f"Target '{name}': no source files are defined (src).")
        if not target.dest:
            result.errors.append(f"Target '{name}': no output file is defined (dest).")

        try:
            options = config.effective_options(target)
        except ValidationError as e:
            result.errors.append(f"Target '{name}': invalid options: {e}")
            continue

        if not options.main_module:
            result.errors.append(f"Target '{name}': no main module is defined (main_module).")
        if not _IDENTIFIER.match(options.module_var):
            result.errors.append(
                f"Target '{name}': module_var '{options.module_var}' is not a valid identifier."
            )

        overlap = set(options.all_external_modules) & set(options.excluded_modules)
        if overlap:
            result.warnings.append(
                f"Target '{name}': modules both external and excluded: {', '.join(sorted(overlap))}"
            )
        if options.main_module in options.all_external_modules:
            result.errors.append(
                f"Target '{name}': main module '{options.main_module}' is marked external."
            )

        for rule in options.rebase_debug_urls:
            try:
                re.compile(rule.match)
            except re.error as e:
                result.errors.append(
                    f"Target '{name}': invalid rebase_debug_urls pattern {rule.match!r}: {e}"
                )

        needs_node = options.validate_unwrapped and not options.debug
        if needs_node and not node_checked:
            node_checked = True
            if shutil.which(options.sandbox.node_binary) is None:
                result.warnings.append(
                    f"'{options.sandbox.node_binary}' was not found; release builds that "
                    "contain unwrapped code will fail. Install Node.js or set "
                    "validate_unwrapped: false."
                )

    result.valid = len(result.errors) == 0
    return result
