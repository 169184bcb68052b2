"""Constants shared across docvalidation modules."""

# Configuration file searched for in the working directory and its parents
CONFIG_FILE_NAME = ".docvalidation.json"

# Preferred document root when the markup has several top-level nodes
DOCUMENT_ROOT_TAG = "html"

# Joiner for attribute values that the HTML parser returns as token lists (class, rel, ...)
ATTRIBUTE_TOKEN_SEPARATOR = " "
