"""
GitHub API 공통 유틸리티 모듈

PyGithub 라이브러리를 사용하여 Organization의 리포지토리를 조회합니다.
PyGithub의 GithubException은 상태 코드 기준으로 RemoteError로 변환됩니다.
"""
import os
import sys
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from dotenv import load_dotenv
from github import Auth, Github, GithubException
from github.Organization import Organization
from github.Repository import Repository

# 프로젝트 루트의 .env 파일 로드
load_dotenv()

# Personal Access Token, Fine-grained Token, Actions 토큰(ghs_), OAuth 토큰(gho_)
KNOWN_TOKEN_PREFIXES = ("ghp_", "github_pat_", "ghs_", "gho_")


class ConfigurationError(ValueError):
    """입력값 또는 정책 설정 파일이 잘못된 경우"""


class RemoteErrorKind(Enum):
    NOT_FOUND = "not_found"
    OTHER = "other"


class RemoteError(Exception):
    """
    GitHub API 호출 실패를 나타내는 예외

    오류 메시지 문자열이 아니라 HTTP 상태 코드로 kind를 결정합니다.

    Attributes:
        kind: 오류 종류 (NOT_FOUND 또는 OTHER)
        status: HTTP 상태 코드
    """

    def __init__(self, kind: RemoteErrorKind, status: int, message: str):
        super().__init__(message)
        self.kind = kind
        self.status = status

    @classmethod
    def from_github_exception(cls, e: GithubException) -> "RemoteError":
        kind = RemoteErrorKind.NOT_FOUND if e.status == 404 else RemoteErrorKind.OTHER
        message = None
        if isinstance(e.data, dict):
            message = e.data.get("message")
        return cls(kind, e.status, message or str(e))

    @property
    def is_not_found(self) -> bool:
        return self.kind is RemoteErrorKind.NOT_FOUND


@contextmanager
def remote_errors() -> Iterator[None]:
    """블록 안에서 발생한 GithubException을 RemoteError로 변환합니다."""
    try:
        yield
    except GithubException as e:
        raise RemoteError.from_github_exception(e) from e


def get_github_client(token: str) -> Github:
    """
    GitHub 클라이언트를 생성하는 함수

    Args:
        token: GitHub 토큰 (Organization 리포지토리의 contents, pull_requests 쓰기 권한 필요)

    Returns:
        Github: PyGithub 클라이언트 인스턴스

    Raises:
        ConfigurationError: 토큰이 비어 있는 경우
    """
    if not token:
        raise ConfigurationError(
            "GitHub 토큰이 설정되지 않았습니다. "
            "github-token 입력값 또는 GITHUB_TOKEN 환경변수를 확인해주세요."
        )

    # 토큰 형식 기본 검증
    if not token.startswith(KNOWN_TOKEN_PREFIXES):
        print(
            "경고: GitHub 토큰 형식이 예상과 다릅니다. "
            "Personal Access Token 또는 Actions 토큰인지 확인해주세요.",
            file=sys.stderr,
        )

    return Github(auth=Auth.Token(token), timeout=30, retry=None)


def get_org_name() -> str:
    """
    Organization 이름을 환경변수에서 가져오는 함수

    Actions 실행 환경에서는 워크플로를 실행한 리포지토리의 owner를 사용합니다.
    조회 순서: GITHUB_REPOSITORY_OWNER → GITHUB_REPOSITORY의 owner → GITHUB_ORG_NAME

    Returns:
        str: Organization 이름

    Raises:
        ConfigurationError: 어떤 환경변수에서도 찾을 수 없는 경우
    """
    org_name = os.getenv("GITHUB_REPOSITORY_OWNER")
    if org_name:
        return org_name

    repository = os.getenv("GITHUB_REPOSITORY", "")
    if "/" in repository:
        return repository.split("/", 1)[0]

    org_name = os.getenv("GITHUB_ORG_NAME")
    if not org_name:
        raise ConfigurationError(
            "Organization 이름을 확인할 수 없습니다. "
            "GITHUB_REPOSITORY_OWNER 또는 GITHUB_ORG_NAME 환경변수를 확인해주세요."
        )
    return org_name


def get_organization(g: Github, org_name: str | None = None) -> Organization:
    """
    GitHub Organization 객체를 가져오는 함수

    Args:
        g: PyGithub 클라이언트
        org_name: Organization 이름 (None이면 환경변수에서 가져옴)

    Returns:
        Organization: PyGithub Organization 객체

    Raises:
        ConfigurationError: Organization을 찾을 수 없는 경우
        GithubException: 그 외 API 오류
    """
    if org_name is None:
        org_name = get_org_name()

    try:
        return g.get_organization(org_name)
    except GithubException as e:
        if e.status == 404:
            raise ConfigurationError(
                f"Organization '{org_name}'을 찾을 수 없습니다."
            ) from e
        raise


def get_all_repos(org: Organization) -> Iterator[Repository]:
    """
    Organization의 모든 리포지토리를 가져오는 함수

    Fork, Archive 리포지토리도 포함하며 순서는 GitHub API의 페이지네이션 순서를 따릅니다.
    """
    return iter(org.get_repos(type="all"))
