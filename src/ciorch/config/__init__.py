"""Matrix configuration: load profiles, job catalog and resolution."""

from .loader import (
    DEFAULT_MATRIX_PATH,
    load_jobs,
    load_matrix_data,
    load_profiles,
    parse_dependencies,
    parse_jobs,
    parse_profiles,
)
from .resolver import Resolution, parse_skip_list, resolve
from .tables import (
    ConcurrencyTable,
    LoadProfile,
    OverrideTable,
    ProfileSet,
    VersionTable,
)

__all__ = [
    "DEFAULT_MATRIX_PATH",
    "ConcurrencyTable",
    "LoadProfile",
    "OverrideTable",
    "ProfileSet",
    "Resolution",
    "VersionTable",
    "load_jobs",
    "load_matrix_data",
    "load_profiles",
    "parse_dependencies",
    "parse_jobs",
    "parse_profiles",
    "parse_skip_list",
    "resolve",
]
