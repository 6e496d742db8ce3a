"""자격 증명과 저장소 URL 파싱 테스트."""

import pytest

from repo_detailer.errors import ValidationError
from repo_detailer.models import AuthMode, RepositoryIdentity
from repo_detailer.sources.credentials import (
    Credential,
    FallbackAuthStrategy,
    RequiredAuthStrategy,
    parse_repo_url,
    parse_repository,
    validate_token,
)

VALID_TOKEN = "ghp_" + "a" * 36


class TestValidateToken:
    """validate_token 테스트."""

    def test_classic_token(self) -> None:
        assert validate_token(VALID_TOKEN) == VALID_TOKEN

    def test_fine_grained_token(self) -> None:
        token = "github_pat_" + "b" * 30
        assert validate_token(token) == token

    def test_strips_whitespace(self) -> None:
        assert validate_token(f"  {VALID_TOKEN}\n") == VALID_TOKEN

    def test_too_short(self) -> None:
        """20자 미만이면 거부한다."""
        with pytest.raises(ValidationError, match="too short"):
            validate_token("ghp_short")

    def test_unknown_prefix(self) -> None:
        with pytest.raises(ValidationError, match="ghp_"):
            validate_token("gho_" + "c" * 36)

    @pytest.mark.parametrize(
        ("token", "accepted"),
        [
            ("short", False),
            ("ghp_" + "x" * 20, True),
            ("github_pat_" + "x" * 20, True),
            ("xyz_" + "x" * 20, False),
        ],
    )
    def test_shape(self, token: str, accepted: bool) -> None:
        if accepted:
            assert validate_token(token) == token
        else:
            with pytest.raises(ValidationError):
                validate_token(token)


class TestParseRepoUrl:
    """parse_repo_url 테스트."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/widgets",
            "https://github.com/acme/widgets/",
            "https://github.com/acme/widgets.git",
            "https://github.com/acme/widgets/tree/main/src",
            "http://www.github.com/acme/widgets?tab=readme",
            "https://github.com/acme/widgets#readme",
        ],
    )
    def test_valid_urls(self, url: str) -> None:
        assert parse_repo_url(url) == RepositoryIdentity(owner="acme", name="widgets")

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "https://gitlab.com/acme/widgets",
            "https://github.com/acme",
            "github.com/acme/widgets",
            "https://github.com//widgets",
        ],
    )
    def test_invalid_urls(self, url: str) -> None:
        with pytest.raises(ValidationError):
            parse_repo_url(url)


class TestParseRepository:
    """parse_repository 테스트."""

    def test_identity_parse(self) -> None:
        assert RepositoryIdentity.parse("acme/widgets").owner == "acme"

    def test_owner_name(self) -> None:
        identity = parse_repository("acme/widgets")
        assert identity.full_name == "acme/widgets"
        assert str(identity) == "acme/widgets"

    def test_url(self) -> None:
        assert parse_repository(" https://github.com/acme/widgets ").name == "widgets"

    @pytest.mark.parametrize("target", ["widgets", "acme/", "a/b/c"])
    def test_invalid(self, target: str) -> None:
        with pytest.raises(ValidationError):
            parse_repository(target)


class TestCredential:
    """Credential 테스트."""

    def test_anonymous(self) -> None:
        credential = Credential.anonymous()
        assert credential.is_anonymous
        assert credential.auth_mode == AuthMode.public
        assert credential.secret is None

    def test_token(self) -> None:
        credential = Credential.token(VALID_TOKEN)
        assert credential.auth_mode == AuthMode.token
        assert credential.secret == VALID_TOKEN

    def test_repr_hides_secret(self) -> None:
        assert VALID_TOKEN not in repr(Credential.token(VALID_TOKEN))

    def test_fingerprint(self) -> None:
        other = "ghp_" + "b" * 36
        assert Credential.anonymous().fingerprint == ""
        assert Credential.token(VALID_TOKEN).fingerprint == Credential.token(VALID_TOKEN).fingerprint
        assert Credential.token(VALID_TOKEN).fingerprint != Credential.token(other).fingerprint
        assert VALID_TOKEN not in Credential.token(VALID_TOKEN).fingerprint

    def test_token_is_validated(self) -> None:
        with pytest.raises(ValidationError):
            Credential.token("not-a-token")


class TestAuthStrategies:
    """인증 재시도 전략 테스트."""

    def test_token_then_anonymous(self) -> None:
        strategy = FallbackAuthStrategy(Credential.token(VALID_TOKEN))
        attempts = strategy.attempts()
        assert [a.mode for a in attempts] == [AuthMode.token, AuthMode.public]
        assert attempts[0].headers == {"Authorization": f"Bearer {VALID_TOKEN}"}
        assert attempts[1].headers == {}

    def test_anonymous_only(self) -> None:
        strategy = FallbackAuthStrategy(Credential.anonymous())
        assert [a.mode for a in strategy.attempts()] == [AuthMode.public]

    def test_pin_skips_failed_attempt(self) -> None:
        """비인증으로 성공하면 이후 요청은 토큰을 다시 시도하지 않는다."""
        strategy = FallbackAuthStrategy(Credential.token(VALID_TOKEN))
        strategy.pin(strategy.attempts()[1])
        assert strategy.active_mode == AuthMode.public
        assert [a.mode for a in strategy.attempts()] == [AuthMode.public]

    def test_required_needs_token(self) -> None:
        with pytest.raises(ValidationError):
            RequiredAuthStrategy(Credential.anonymous())

    def test_required_has_no_fallback(self) -> None:
        strategy = RequiredAuthStrategy(Credential.token(VALID_TOKEN))
        assert [a.mode for a in strategy.attempts()] == [AuthMode.token]
