from urllib.parse import parse_qs, urlsplit

import pytest
import responses

from pikiclient.login import (
    CALLBACK_URL,
    LOGIN_URL,
    TOKEN_URL,
    USER_AGENT,
    VERIFIER_ALPHABET,
    LoginProcessor,
    code_challenge,
    extract_callback_code,
    generate_code_verifier,
)


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


def test_verifier_default_length_and_alphabet():
    verifier = generate_code_verifier()
    assert len(verifier) == 32
    assert set(verifier) <= set(VERIFIER_ALPHABET)


def test_verifier_custom_length():
    assert len(generate_code_verifier(64)) == 64
    assert generate_code_verifier(0) == ""


def test_verifier_negative_length_rejected():
    with pytest.raises(ValueError):
        generate_code_verifier(-1)


def test_code_challenge_of_empty_string():
    assert code_challenge("") == "47DEQpj8HBSa-_TImW-5JCeuQeRkm5NMpJWZG3hSuFU"


def test_code_challenge_is_unpadded_urlsafe():
    challenge = code_challenge(generate_code_verifier())
    assert len(challenge) == 43
    assert "=" not in challenge and "+" not in challenge and "/" not in challenge


def test_code_challenge_deterministic_and_distinct():
    assert code_challenge("abc") == code_challenge("abc")
    assert code_challenge("abc") != code_challenge("abd")


def test_extract_callback_code():
    assert extract_callback_code(CALLBACK_URL + "?code=xyz&via=login") == "xyz"


def test_extract_callback_code_ignores_other_urls():
    assert extract_callback_code("https://example.com/other?code=xyz") is None


def test_begin_builds_login_url():
    processor = LoginProcessor("client", "secret")
    url = processor.begin()
    assert url.startswith(LOGIN_URL + "?")
    query = parse_qs(urlsplit(url).query)
    assert query["code_challenge_method"] == ["S256"]
    assert query["client"] == ["pixiv-android"]
    assert query["code_challenge"] == [code_challenge(processor.code_verifier)]
    assert len(processor.code_verifier) == 32


def test_begin_twice_uses_fresh_verifier_of_same_length():
    processor = LoginProcessor("client", "secret")
    processor.begin()
    processor.begin()
    assert len(processor.code_verifier) == 32


def test_finish_posts_code_and_returns_body(mocked):
    mocked.add(responses.POST, TOKEN_URL, body='{"access_token": "token"}', status=200)
    processor = LoginProcessor("client", "secret")
    processor.begin()
    body = processor.finish("the-code")
    assert body == '{"access_token": "token"}'

    request = mocked.calls[0].request
    sent = parse_qs(request.body)
    assert sent["code"] == ["the-code"]
    assert sent["code_verifier"] == [processor.code_verifier]
    assert sent["grant_type"] == ["authorization_code"]
    assert sent["client_id"] == ["client"]
    assert sent["client_secret"] == ["secret"]
    assert sent["redirect_uri"] == [CALLBACK_URL]
    assert request.headers["User-Agent"] == USER_AGENT
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"


def test_finish_returns_body_on_error_status(mocked):
    mocked.add(responses.POST, TOKEN_URL, body="denied", status=400)
    processor = LoginProcessor("client", "secret")
    assert processor.finish("bad") == "denied"