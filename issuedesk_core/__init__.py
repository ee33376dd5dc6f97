"""issuedesk core - shared infrastructure for the issuedesk services.

Usage:
    from issuedesk_core import get_config, init_platform

    registry = await init_platform()
    result = await registry.execute("github_get_issue", args, ctx)
"""

from pathlib import Path

# Read version from VERSION file
_VERSION_FILE = Path(__file__).parent.parent / "VERSION"
__version__ = _VERSION_FILE.read_text().strip() if _VERSION_FILE.exists() else "0.0.0"


def get_version() -> str:
    """Get the current issuedesk version."""
    return __version__


from issuedesk_core.config import IssueDeskConfig, get_config  # noqa: E402


async def init_platform():
    """Load configuration and register every tool module.

    Returns the populated ToolRegistry singleton.
    """
    from logging_config import init_logging
    from tools import init_tools

    config = get_config()
    init_logging(console_level=config.log_level)
    return await init_tools()


__all__ = [
    "IssueDeskConfig",
    "get_config",
    "get_version",
    "init_platform",
    "__version__",
]
