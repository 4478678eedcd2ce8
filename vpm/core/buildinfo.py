"""Recording what a build actually installed."""

import logging
from pathlib import Path

from vpm.config.parser import save_build_info
from vpm.config.schemas import BuildInfo, BuildInfoRepos, BuildStrategy, LockedRepos

logger = logging.getLogger(__name__)


def make_build_info(repos_list: list[LockedRepos], strategy: BuildStrategy) -> BuildInfo:
    """Build a fresh record listing each repository exactly as pinned."""
    return BuildInfo(
        repos=[BuildInfoRepos(type=r.type, path=r.path, version=r.version) for r in repos_list],
        strategy=strategy,
    )


def write_build_info(path: Path, build_info: BuildInfo) -> None:
    """Persist the record, replacing any previous one.

    Only called after every repository installed successfully.
    """
    save_build_info(path, build_info)
    logger.debug("Wrote %s (%d repositories)", path, len(build_info.repos))
