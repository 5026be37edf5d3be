"""
Domain models — Pydantic types for the builder.

All models are re-exported here for convenient access:

    from ngbuilder.core.models import ModuleRecord, BuildOptions, ValidationReport
"""

from ngbuilder.core.models.module import (
    ModuleHeader,
    ModuleRecord,
    SourceFile,
    StandaloneFile,
)
from ngbuilder.core.models.options import (
    BuilderConfig,
    BuildOptions,
    BuildTarget,
    DeclarationSyntax,
    SandboxOptions,
    UrlRebase,
    quoted_list,
)
from ngbuilder.core.models.validation import LeakedGlobal, ValidationReport

__all__ = [
    # options.py
    "BuildOptions",
    "BuildTarget",
    "BuilderConfig",
    "DeclarationSyntax",
    # validation.py
    "LeakedGlobal",
    # module.py
    "ModuleHeader",
    "ModuleRecord",
    "SandboxOptions",
    "SourceFile",
    "StandaloneFile",
    "UrlRebase",
    "ValidationReport",
    "quoted_list",
]
