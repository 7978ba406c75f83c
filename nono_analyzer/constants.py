"""Constants for nono-analyzer."""

# Exit codes
EXIT_SUCCESS = 0  # Every checked package is compliant
EXIT_ISSUES = 1  # At least one package (or the primary artifact) is not compliant
EXIT_ERROR = 2  # Analysis failed due to error
EXIT_INVALID_TARGET = 3  # Target package could not be selected

# Namespace of the excluded runtime
DEFAULT_RUNTIME_NAMESPACE = "std"

# Feature enabled implicitly unless --no-default-features is given
DEFAULT_FEATURE = "default"

# Separators used inside Cargo feature tables
DEPENDENCY_FEATURE_SEPARATOR = "/"
DEPENDENCY_FEATURE_PREFIX = "dep:"
WEAK_DEPENDENCY_MARKER = "?"

# Marker attribute and the conditional-compilation wrapper
NO_STD_ATTRIBUTE = "no_std"
CFG_ATTR = "cfg_attr"

# Report markers
MARKER_SUCCESS = "✅"
MARKER_FAILURE = "❌"
MARKER_UNKNOWN = "❓"
