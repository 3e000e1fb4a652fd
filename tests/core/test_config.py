import pytest

from videohost.core.config import Settings


def _settings(**overrides) -> Settings:
    # Ignore the developer's .env so the assertions only see explicit values.
    return Settings(_env_file=None, **overrides)


def test_defaults():
    s = _settings()
    assert s.API_PREFIX == "/api"
    assert s.VIDEOS_COLLECTION == "videos"
    assert s.USERS_COLLECTION == "users"
    assert s.S3_OBJECT_ACL == "public-read"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("*", ["*"]),
        (" * ", ["*"]),
        ("http://localhost:4200/, https://app.example.com", ["http://localhost:4200", "https://app.example.com"]),
        ("http://a.test,,", ["http://a.test"]),
    ],
)
def test_parsed_cors_origins(raw, expected):
    assert _settings(CORS_ALLOW_ORIGINS=raw).parsed_cors_origins == expected


def test_parsed_auth_algorithms():
    assert _settings(AUTH_ALGORITHMS="RS256, HS256,").parsed_auth_algorithms == [
        "RS256",
        "HS256",
    ]


@pytest.mark.parametrize(
    "issuer,jwks_url,expected",
    [
        ("https://idp.test", None, "https://idp.test/.well-known/jwks.json"),
        ("https://idp.test/", None, "https://idp.test/.well-known/jwks.json"),
        ("https://idp.test/", "https://keys.test/jwks", "https://keys.test/jwks"),
    ],
)
def test_resolved_jwks_url(issuer, jwks_url, expected):
    s = _settings(AUTH_ISSUER=issuer, AUTH_JWKS_URL=jwks_url)
    assert s.resolved_jwks_url == expected


def test_bool_tokens_with_inline_comments(monkeypatch):
    monkeypatch.setenv("OBSERVABILITY_ENABLED", "false   # keep local")
    monkeypatch.setenv("LOG_FILE_ENABLED", "true # ship logs")
    s = _settings()
    assert s.OBSERVABILITY_ENABLED is False
    assert s.LOG_FILE_ENABLED is True
