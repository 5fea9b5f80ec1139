"""Configuration constants for collection-tree."""

import os
from pathlib import Path

# GraphQL endpoint of the catalog API.
API_URL: str = os.environ.get("COLLECTION_TREE_API_URL", "http://localhost:4000/graphql")

# API token location. First file found is used; COLLECTION_TREE_TOKEN overrides all of them.
API_TOKEN_FILES: list[Path] = [
    Path("~/.config/collection-tree-token.txt").expanduser(),
    Path("~/.config/secret/collection-tree-token.txt").expanduser(),
]

API_TOKEN_ENV: str = "COLLECTION_TREE_TOKEN"

# Seconds before a single catalog request is abandoned.
REQUEST_TIMEOUT: float = 30.0

# Upper bound on nodes visited by one path resolution.
MAX_RESOLVE_VISITS: int = 10_000
