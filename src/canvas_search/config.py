"""Configuration constants for canvas-search."""

import uuid

# Characters of context kept on each side of a match in a snippet.
SNIPPET_CONTEXT: int = 60

# Results returned by a single query, and candidates taken by the substring fallback.
MAX_RESULTS: int = 100

# Delay between the last keystroke and the search it triggers.
DEBOUNCE_SECONDS: float = 0.2

# Viewport distance differences at or below this are treated as ties.
DISTANCE_THRESHOLD: float = 100.0

# Tokens shorter than this are not indexed.
MIN_TOKEN_LENGTH: int = 2

# Stored text of an assigned-role unit is "<prefix> <role name>".
ROLE_LABEL_PREFIX: str = "Team Member:"

# Title shown for nodes without one.
UNTITLED_TITLE: str = "Untitled"

# Namespaces for deriving synthetic text unit ids from a node id.
ROLE_UNIT_NAMESPACE: uuid.UUID = uuid.UUID("6f1c2a0e-3b1d-5c8e-9a47-2d6b8e0f4c11")
NOTE_UNIT_NAMESPACE: uuid.UUID = uuid.UUID("b3e8d5f2-71a4-5e09-8c3d-4f2a9b6e1d70")
