# The name of the project
PROJECT_NAME = "kubehop"

# The environment variable for the directory where the kubehop data is saved
HOME_ENV_VAR = "KUBEHOP_HOME"

# File names inside the data directory
CONFIG_FILE_NAME = "config.yaml"
HISTORY_FILE_NAME = "history.yaml"

# Maximum number of connections kept in the history
MAX_HISTORY_ITEMS = 100

# Values starting with this prefix reference a named list in the app config
LIST_PREFIX = "$list:"

# Name of the kubeconfig context extension holding the history reference
KUBECONFIG_EXTENSION_NAME = "kubehop"

API_VERSION = "kubehop.io/v1alpha1"

# Well known configuration item names
USERNAME_CONFIG_ITEM = "username"
ALIAS_CONFIG_ITEM = "alias"
CLUSTER_ID_CONFIG_ITEM = "cluster-id"
