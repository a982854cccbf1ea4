"""Constants for registry-watcher."""

# Configuration
CONFIG_FILE = "registry-watcher.yaml"
CONFIG_SECTION = "registry_watcher"
ENV_PREFIX = "REGISTRY_WATCHER_"

# Snapshot storage
SNAPSHOT_SUFFIX = ".xml"

# Notification attachments
ATTACHMENT_FILE_NAME = "registry-changes"
TMP_FILE_PREFIX = "dime"

# Version
WATCHER_VERSION = "0.1.0"
