"""
Version catalog

Turns upstream major-version records into the summaries shown on the upgrade
path page, and builds composer upgrade commands.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from upgrade_proxy.models.version import PhpRequirement, Requirements, SupportWindow, VersionSummary
from upgrade_proxy.proxy import VersionLookupError, VersionProxy

logger = logging.getLogger(__name__)

DEFAULT_MAJOR_VERSIONS = (7, 8, 9, 10, 11, 12, 13)

# major version -> minor suffixes of its LTS line
LTS_PATTERNS = {
    6: [".2"],
    7: [".6"],
    8: [".7"],
    9: [".5"],
    10: [".4"],
    11: [".5"],
    12: [".4"],
    13: [".4"],
}

EXTENSION_MAPPINGS = {
    # Core team extensions
    "headless": "friendsoftypo3/headless",
    "news": "georgringer/news",
    "gridelements": "gridelementsteam/gridelements",
    "mask": "mask/mask",
    "base_distribution": "typo3/cms-base-distribution",
    "form_framework": "typo3/cms-form",
    # Common community extensions
    "solr": "apache-solr-for-typo3/solr",
    "powermail": "in2code/powermail",
    "rx_shariff": "reelworx/rx-shariff",
    "container": "b13/container",
    "felogin": "typo3/cms-felogin",
    "redirects": "typo3/cms-redirects",
    "seo": "typo3/cms-seo",
    "fluid_styled_content": "typo3/cms-fluid-styled-content",
    "scheduler": "typo3/cms-scheduler",
    "tt_address": "friendsoftypo3/tt-address",
    "image_manipulation": "typo3/cms-image-manipulation",
    "google_sitemap": "dmitryd/typo3-realurl-google-sitemap",
    "realurl": "dmitryd/typo3-realurl",
    "bootstrap_package": "bk2k/bootstrap-package",
    "site_language_redirection": "sitegeist/site-language-redirection",
    "backend_theme": "typo3/cms-backend",
    "blog": "typo3/cms-blog",
}


def is_lts_version(major: int, full_version: str) -> bool:
    patterns = LTS_PATTERNS.get(major)
    if not patterns:
        return False
    return any(full_version.startswith(f"{major}{p}") for p in patterns)


def _find_requirement(data: Dict[str, Any], category: str, name: str) -> Optional[Dict[str, Any]]:
    for req in data.get("requirements") or []:
        if isinstance(req, dict) and req.get("category") == category and req.get("name") == name:
            return req
    return None


def create_version_summary(version: str, data: Dict[str, Any], is_lts: bool = False) -> VersionSummary:
    """
    Build the summary for one version from its upstream record.

    Args:
        version: Version label (e.g. "12")
        data: Record returned by the major/{version} endpoint
        is_lts: Force the LTS type regardless of the record flags

    Returns:
        VersionSummary with "Unknown" for anything the record does not provide
    """
    support = SupportWindow(
        active_until=str(data.get("maintained_until") or "Unknown"),
        security_until=str(data.get("elts_until") or "Unknown"),
    )

    php = PhpRequirement()
    php_req = _find_requirement(data, "php", "php")
    if php_req:
        php = PhpRequirement(
            min=str(php_req.get("min") or "Unknown"),
            max=str(php_req.get("max") or php_req.get("min") or "Unknown"),
        )

    mysql = "Unknown"
    mysql_req = _find_requirement(data, "database", "mysql")
    if mysql_req:
        mysql = str(mysql_req.get("min") or "Unknown")
        if mysql_req.get("max"):
            mysql += f" - {mysql_req['max']}"

    if is_lts or data.get("lts"):
        version_type = "lts"
    elif data.get("stable"):
        version_type = "sts"
    elif data.get("development"):
        version_type = "dev"
    else:
        version_type = "regular"

    return VersionSummary(
        version=version,
        type=version_type,
        release_date=str(data.get("release_date") or "Unknown"),
        support=support,
        requirements=Requirements(php=php, mysql=mysql),
    )


def _version_key(version: str) -> List[int]:
    parts = []
    for part in version.split("."):
        try:
            parts.append(int(part))
        except ValueError:
            parts.append(0)
    return parts


def sort_versions(summaries: Iterable[VersionSummary]) -> List[VersionSummary]:
    """Newest first; missing components compare as 0, so "12" == "12.0"."""
    def key(summary: VersionSummary) -> List[int]:
        parts = _version_key(summary.version)
        return parts + [0] * (4 - len(parts))

    return sorted(summaries, key=key, reverse=True)


def fetch_version_catalog(proxy: VersionProxy, majors: Iterable[int] = DEFAULT_MAJOR_VERSIONS) -> List[VersionSummary]:
    summaries = []
    logger.info("Starting to fetch TYPO3 versions...")

    for major in majors:
        try:
            data = proxy.lookup_major(str(major))
        except VersionLookupError as e:
            logger.warning(f"Failed to fetch TYPO3 version {major}: {e}")
            continue

        if not isinstance(data, dict) or data.get("version") is None:
            logger.warning(f"Failed to process version {major}: record has no version field")
            continue
        # major records flag their LTS line in "lts" (e.g. 12.4)
        summaries.append(create_version_summary(str(data["version"]), data, bool(data.get("lts"))))

    logger.info(f"Total versions found: {len(summaries)}")
    return sort_versions(summaries)


def get_extension_mappings() -> Dict[str, str]:
    return dict(EXTENSION_MAPPINGS)


def generate_upgrade_command(target_version: str, extensions: Optional[List[Dict[str, Any]]] = None) -> str:
    """
    Build the composer command that moves a project to target_version.

    Extensions are dicts with a "name", "package_name" or "key" entry. Bare
    extension keys are resolved to composer package names.
    """
    core_constraint = '"^' + target_version.lstrip("^") + '"'
    command = f"composer require typo3/cms-core:{core_constraint}"

    mappings = get_extension_mappings()
    for ext in extensions or []:
        package_name = ext.get("name") or ext.get("package_name") or ext.get("key")
        if not package_name or package_name == "typo3/cms-core":
            continue
        if "/" not in package_name:
            extension_key = package_name.lower()
            package_name = mappings.get(extension_key) or f"friendsoftypo3/{extension_key.replace('_', '-')}"
        command += f" {package_name}"

    return command + " -W"
