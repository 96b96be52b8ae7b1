"""
GitHub 공통 유틸리티 테스트
"""

from unittest.mock import MagicMock, patch

import pytest
from github import GithubException, UnknownObjectException

from codeowners_sync.common import (
    ConfigurationError,
    RemoteError,
    RemoteErrorKind,
    get_all_repos,
    get_github_client,
    get_org_name,
    get_organization,
    remote_errors,
)


def make_repo(name, fork=False, archived=False):
    repo = MagicMock()
    repo.name = name
    repo.fork = fork
    repo.archived = archived
    return repo


class TestRemoteError:
    def test_404_is_not_found(self):
        error = RemoteError.from_github_exception(
            UnknownObjectException(404, {"message": "Not Found"})
        )
        assert error.kind is RemoteErrorKind.NOT_FOUND
        assert error.is_not_found
        assert error.status == 404
        assert str(error) == "Not Found"

    def test_not_found_text_with_other_status_is_other(self):
        """메시지에 'Not Found'가 있어도 상태 코드가 404가 아니면 NOT_FOUND가 아니다"""
        error = RemoteError.from_github_exception(
            GithubException(403, {"message": "Not Found in cache, forbidden"})
        )
        assert error.kind is RemoteErrorKind.OTHER
        assert error.status == 403

    def test_data_without_message(self):
        error = RemoteError.from_github_exception(GithubException(500, None))
        assert error.kind is RemoteErrorKind.OTHER
        assert str(error)

    def test_remote_errors_converts_github_exception(self):
        with pytest.raises(RemoteError) as exc_info:
            with remote_errors():
                raise GithubException(422, {"message": "Reference already exists"})

        assert exc_info.value.status == 422
        assert str(exc_info.value) == "Reference already exists"
        assert isinstance(exc_info.value.__cause__, GithubException)

    def test_remote_errors_leaves_other_exceptions(self):
        with pytest.raises(KeyError):
            with remote_errors():
                raise KeyError("x")


class TestGetGithubClient:
    def test_empty_token(self):
        with pytest.raises(ConfigurationError):
            get_github_client("")

    @patch("codeowners_sync.common.Github")
    def test_client_options(self, mock_github, capsys):
        get_github_client("ghs_abc")

        kwargs = mock_github.call_args.kwargs
        assert kwargs["timeout"] == 30
        assert kwargs["retry"] is None
        assert "경고" not in capsys.readouterr().err

    @patch("codeowners_sync.common.Github")
    def test_unknown_token_prefix_warns(self, mock_github, capsys):
        get_github_client("abcdef")

        mock_github.assert_called_once()
        assert "경고" in capsys.readouterr().err


class TestGetOrgName:
    def test_repository_owner_first(self, monkeypatch):
        monkeypatch.setenv("GITHUB_REPOSITORY_OWNER", "owner-org")
        monkeypatch.setenv("GITHUB_REPOSITORY", "other-org/repo")
        monkeypatch.setenv("GITHUB_ORG_NAME", "env-org")
        assert get_org_name() == "owner-org"

    def test_owner_from_repository(self, monkeypatch):
        monkeypatch.setenv("GITHUB_REPOSITORY", "other-org/repo")
        monkeypatch.setenv("GITHUB_ORG_NAME", "env-org")
        assert get_org_name() == "other-org"

    def test_org_name_fallback(self, monkeypatch):
        monkeypatch.setenv("GITHUB_ORG_NAME", "env-org")
        assert get_org_name() == "env-org"

    def test_missing(self):
        with pytest.raises(ConfigurationError):
            get_org_name()


class TestGetOrganization:
    def test_found(self):
        g = MagicMock()
        assert get_organization(g, "my-org") is g.get_organization.return_value
        g.get_organization.assert_called_once_with("my-org")

    def test_not_found(self):
        g = MagicMock()
        g.get_organization.side_effect = UnknownObjectException(
            404, {"message": "Not Found"}
        )
        with pytest.raises(ConfigurationError):
            get_organization(g, "missing-org")

    def test_other_error_propagates(self):
        g = MagicMock()
        g.get_organization.side_effect = GithubException(401, {"message": "Bad credentials"})
        with pytest.raises(GithubException):
            get_organization(g, "my-org")


class TestGetAllRepos:
    def test_keeps_forks_archived_and_order(self):
        org = MagicMock()
        org.get_repos.return_value = [
            make_repo("b"),
            make_repo("fork", fork=True),
            make_repo("old", archived=True),
            make_repo("a"),
        ]

        names = [r.name for r in get_all_repos(org)]

        assert names == ["b", "fork", "old", "a"]
        org.get_repos.assert_called_once_with(type="all")
