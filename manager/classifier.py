"""File-name persona router.

Rules are checked in priority order; the first match wins:
front-end suffix, then data-layer suffix, then security keyword,
otherwise the backend persona.
"""

import os

FRONTEND = "frontend"
DATABASE = "database"
SECURITY = "security"
BACKEND = "backend"

PERSONAS = (FRONTEND, DATABASE, SECURITY, BACKEND)

FRONTEND_SUFFIXES = {
    ".html", ".htm", ".css", ".scss", ".sass", ".less",
    ".jsx", ".tsx", ".vue", ".svelte", ".astro",
}

DATABASE_SUFFIXES = {
    ".sql", ".prisma", ".graphql", ".gql", ".dbml", ".cql",
}

# Substrings, matched against the lower-cased base name
SECURITY_KEYWORDS = (
    "auth", "jwt", "token", "oauth", "crypt", "cipher",
    "password", "secret", "security", "hmac",
)


def classify_file(filename):
    """Return the persona that should author filename. Pure and deterministic."""
    name = os.path.basename((filename or "").strip()).lower()
    _, ext = os.path.splitext(name)

    if ext in FRONTEND_SUFFIXES:
        return FRONTEND
    if ext in DATABASE_SUFFIXES:
        return DATABASE
    if any(kw in name for kw in SECURITY_KEYWORDS):
        return SECURITY
    return BACKEND
