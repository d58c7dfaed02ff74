"""Tests for manager.classifier - file name to persona routing."""

from manager.classifier import BACKEND, DATABASE, FRONTEND, PERSONAS, SECURITY, classify_file


def test_frontend_files():
    for name in ("index.html", "static/style.css", "src/App.jsx", "components/Nav.vue", "theme.SCSS"):
        assert classify_file(name) == FRONTEND, name


def test_database_files():
    for name in ("schema.sql", "prisma/schema.prisma", "queries/users.graphql"):
        assert classify_file(name) == DATABASE, name


def test_security_keywords():
    for name in ("auth.js", "middleware/jwtVerify.ts", "utils/encryption.py", "TokenService.java",
                 "password_reset.py", "oauth_callback.py"):
        assert classify_file(name) == SECURITY, name


def test_backend_default():
    for name in ("index.js", "package.json", "main.py", "requirements.txt", "README.md", ""):
        assert classify_file(name) == BACKEND, name


def test_suffix_beats_security_keyword():
    """Priority order: a stylesheet about auth is still front-end work."""
    assert classify_file("auth.css") == FRONTEND
    assert classify_file("auth_tables.sql") == DATABASE


def test_keyword_matches_basename_only():
    assert classify_file("auth/index.js") == BACKEND


def test_deterministic():
    for name in ("auth.js", "index.html", "schema.sql", "main.py"):
        assert classify_file(name) == classify_file(name)
        assert classify_file(name) in PERSONAS
