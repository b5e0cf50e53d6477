"""Core constants: cache key structure and shared literal values.

Single source of truth for cache key structure (DRY). Used by
infrastructure cache, invalidation policy and the cached services.
"""

# Delimiter for composite keys: version:entity:operation[:identifier]
CACHE_KEY_SEP = ":"

# Default cache key version; bump via CACHE_VERSION when cached payload shapes change
CACHE_DEFAULT_VERSION = "v1"

# Minimum number of fields in a well-formed key (version, entity, operation)
CACHE_KEY_MIN_FIELDS = 3

# Serialization formats accepted for cached payloads
CACHE_SERIALIZATION_FORMATS = ("json", "msgpack")
