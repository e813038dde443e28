"""Constants shared across the registry."""

# Identifiers and counter values are unsigned 64-bit integers.
U64_MAX = 2**64 - 1

# Storage segments.  Each logical map gets its own segment so keys from
# different maps can never collide.
COUNTER_SEGMENT = 0
PET_SEGMENT = 1
FOUND_REPORT_SEGMENT = 2

# Caller identity used for unauthenticated requests when ALLOW_ANONYMOUS is on.
ANONYMOUS_CALLER = "anonymous"
