"""Reference constants for cascade calculations."""

# Noise reference temperature (IEEE standard T0) in Kelvin, also used as the
# antenna noise temperature in the G/T budget.
REFERENCE_TEMPERATURE_K = 290.0

# Output compression point given to stages that can never compress
# (passives, antennas, every stage in the receive direction).
UNCOMPRESSIBLE_OP1DB_DBM = 99.0

# Input power used when reducing a sub-chain to one merged component.
MERGE_REFERENCE_INPUT_DBM = -100.0

# Default input power for a calculation when the caller supplies none.
DEFAULT_INPUT_POWER_DBM = -100.0

# Frequency (GHz) given to a freshly placed component.
DEFAULT_FREQUENCY = "1.0"

# Default propagation distance for a new air-loss segment.
DEFAULT_PROPAGATION_DISTANCE_CM = 100.0

# Default element grid for a new phased array (N = 16).
DEFAULT_ARRAY_ROWS = 4
DEFAULT_ARRAY_COLS = 4
