import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from upgrade_proxy.catalog import fetch_version_catalog
from upgrade_proxy.integrations.typo3_client import build_typo3_client
from upgrade_proxy.proxy import VersionProxy

logger = logging.getLogger(__name__)

DATA_FILE_PATH = Path("data/typo3-upgrade-data.json")


def update_version_data(output_path: Path = DATA_FILE_PATH, proxy: Optional[VersionProxy] = None) -> List[dict]:
    """Fetch the version catalog and write it to output_path as JSON."""
    proxy = proxy or VersionProxy(build_typo3_client())
    logger.info("Fetching TYPO3 version data...")
    versions = [summary.model_dump() for summary in fetch_version_catalog(proxy)]
    logger.info(f"Retrieved {len(versions)} TYPO3 versions")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(versions, indent=2), encoding="utf-8")
    logger.info(f"TYPO3 version data saved to {output_path}")
    return versions


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    output_path = Path(args[0]) if args else DATA_FILE_PATH
    try:
        update_version_data(output_path)
    except (OSError, RuntimeError) as e:
        logger.error(f"Error updating TYPO3 version data: {e}")
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
