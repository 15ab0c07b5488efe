import pytest

from webhook_mailer.auth import extract_token, token_matches


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("abc", "abc"),
        ("Bearer abc", "abc"),
        ("Bearer Bearer abc", "Bearer abc"),
        ("bearer abc", "bearer abc"),
        ("Bearer ", ""),
    ],
)
def test_extract_token(header, expected):
    assert extract_token(header) == expected


def test_token_matches_bearer_and_bare_forms():
    assert token_matches("Bearer s3cret", "s3cret") is True
    assert token_matches("s3cret", "s3cret") is True


@pytest.mark.parametrize("header", [None, "", "Bearer ", "Bearer s3cre", "s3cret2", "S3CRET", "Bearer  s3cret"])
def test_token_mismatch(header):
    assert token_matches(header, "s3cret") is False


def test_token_comparison_handles_non_ascii():
    assert token_matches("Bearer clé-secrète", "clé-secrète") is True
    assert token_matches("Bearer cle-secrete", "clé-secrète") is False
