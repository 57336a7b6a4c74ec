"""Core domain types and logic."""

from .config import ConfigError, PackageConfig, RunEnvironment, load_package_config
from .errors import ErrorCode
from .manifest import ManifestError, PackageManifest, get_var, has_var, load_manifest, set_var
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "PackageConfig",
    "RunEnvironment",
    "load_package_config",
    # errors
    "ErrorCode",
    # manifest
    "ManifestError",
    "PackageManifest",
    "get_var",
    "has_var",
    "load_manifest",
    "set_var",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
