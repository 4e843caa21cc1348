"""Data API keywords and resource limit constants."""

# Reserved document keywords
ID = "_id"
VECTOR = "$vector"
VECTORIZE = "$vectorize"
LEXICAL = "$lexical"
HYBRID = "$hybrid"
SIMILARITY = "$similarity"

# Extended JSON wrappers
DATE = "$date"
UUID = "$uuid"
OBJECT_ID = "$objectId"
BINARY = "$binary"

# Query operators
SLICE = "$slice"
MATCH = "$match"

DEFAULT_MAX_RECURSION_DEPTH = 100
"""Maximum CEL tree visit recursion depth."""

DEFAULT_CHUNK_SIZE = 50
"""Documents sent per insertMany command."""

MAX_CHUNK_SIZE = 100
"""Largest chunk the Data API accepts in a single insertMany."""

DEFAULT_CONCURRENCY = 1
"""Parallel insertMany commands in flight."""

MAX_ARRAY_INDEX = 2**31
"""Largest array index accepted in a CEL member path."""
