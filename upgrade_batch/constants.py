from enum import Enum
from pathlib import Path

import upgrade_batch

#
# Filesystem
#

PACKAGE_DIR = Path(upgrade_batch.__file__).parent
PROJECT_ROOT = PACKAGE_DIR.parent
BATCH_PARAMS_DIR = PACKAGE_DIR / "batch_params"
DEPLOY_OUT_DIR = PROJECT_ROOT / "deploy-out"

DEFAULT_RELEASE = "1.1.0"
DEFAULT_OUTPUT_FILENAME = "gnosis_safe_schedule.json"


def registry_filename(release: str, chain_id: int) -> str:
    """Name of the address registry written by the deployment pipeline for a release."""
    return f"upgrade-{release}-{chain_id}.json"


#
# Registry naming conventions
#

PROXY_SUFFIX = "-Proxy"
NEW_IMPLEMENTATION_SUFFIX = "-NewImpl"

#
# Transaction builder format
#

BATCH_FORMAT_VERSION = "1.0"
TX_BUILDER_VERSION = "1.16.5"
BATCH_JSON_FORMAT = {"indent": 2}

# JSON.stringify equivalent; the checksum is computed over this serialization
CANONICAL_JSON_FORMAT = {"separators": (",", ":")}

#
# Governance calls
#

# AccessManager.schedule substitutes the earliest allowed timepoint for 0
EARLIEST_EXECUTION = 0
MAX_UINT48 = 2**48 - 1

NULL_VALUE = "0"
ZERO_ADDRESS = "0x" + "0" * 40

#
# Environment
#

SAFE_ADDRESS_ENVVAR_TEMPLATE = "{network}_SAFE_ADDRESS"
ACCESS_MANAGER_ENVVAR_TEMPLATE = "{network}_ACCESS_MANAGER_ADDRESS"

LOCAL_NETWORKS = ["local"]
FORK_NETWORK_SUFFIX = "-fork"


class MethodKind(Enum):
    SCHEDULE = "schedule"
    UPGRADE = "upgrade"
