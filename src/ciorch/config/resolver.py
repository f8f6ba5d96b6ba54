"""Turn the run mode and the explicit skip list into one coherent resolution."""

from __future__ import annotations

import re
from typing import NamedTuple

from ciorch.common.errors import ConfigurationError
from ciorch.config.loader import load_profiles
from ciorch.config.tables import (
    ConcurrencyTable,
    ProfileSet,
    VersionTable,
)
from ciorch.models.jobs import RunMode, is_valid_job_key
from ciorch_logging import get_logger

logger = get_logger(__name__)

SKIP_LIST_SEPARATORS = re.compile(r",|\n|\s")


class Resolution(NamedTuple):
    """The tables and skip set for one run."""

    versions: VersionTable
    caps: ConcurrencyTable
    skip: frozenset[str]


def parse_skip_list(raw: str | None) -> frozenset[str]:
    """Split a free-form skip list into job keys.

    Tokens are separated by commas, newlines or any whitespace. Empty tokens are
    dropped; the rest are kept verbatim.

    Raises
    ------
    ConfigurationError
        If a token is not a well-formed job key
    """
    if not raw:
        return frozenset()

    tokens = [t for t in SKIP_LIST_SEPARATORS.split(raw) if t]
    malformed = sorted(t for t in tokens if not is_valid_job_key(t))
    if malformed:
        msg = f"Malformed job keys in skip list: {', '.join(malformed)}"
        raise ConfigurationError(msg)
    return frozenset(tokens)


def resolve(
    mode: RunMode,
    explicit_skip_list: str | None = None,
    profiles: ProfileSet | None = None,
) -> Resolution:
    """Resolve versions, concurrency caps and the skip set for ``mode``.

    In LIGHTENED mode only the reference interpreter version is used, the
    conservative caps apply and the skip list is honoured. In FULL mode the full
    override tables apply and the skip list is ignored.

    Parameters
    ----------
    mode : RunMode
        Active run mode
    explicit_skip_list : str | None
        Free-form list of job keys to skip
    profiles : ProfileSet | None
        Load profiles; defaults to the packaged matrix data

    Returns
    -------
    Resolution
        Version table, concurrency table and skip set, all from the same profile
    """
    profiles = profiles or load_profiles()
    profile = profiles.select(mode)
    versions: VersionTable = profile.versions

    if mode is RunMode.LIGHTENED:
        skip = parse_skip_list(explicit_skip_list)
    else:
        skip = frozenset()
        if explicit_skip_list and explicit_skip_list.strip():
            logger.debug("Ignoring skip list in %s mode: %r", mode.value, explicit_skip_list)

    logger.debug(
        "Resolved %s mode: %d version entries, %d cap entries, skip=%s",
        mode.value,
        len(versions),
        len(profile.caps),
        sorted(skip),
    )
    return Resolution(versions=versions, caps=profile.caps, skip=skip)
