"""
소스 리포지토리의 CODEOWNERS 파일을 Organization의 다른 리포지토리에 전파하는 스크립트

사용법:
    python -m codeowners_sync.propagate [--dry-run] [--continue-on-error]
        [--source-repo SOURCE_REPO] [--github-token TOKEN]

옵션:
    --dry-run: 실제 변경 없이 어떤 리포지토리에 PR이 생성될지 확인
    --continue-on-error: 한 리포지토리에서 오류가 나도 나머지 리포지토리를 계속 처리
    --source-repo: CODEOWNERS 원본 리포지토리 이름 (전파 대상에서 제외)
    --github-token: GitHub 토큰

동작:
    - 작업 디렉터리의 CODEOWNERS 와 .github/codeowners_repos_config.json 을 읽음
      (둘 중 하나라도 없으면 아무 API 호출 없이 종료)
    - include 에 있고 exclude 에 없는 리포지토리 중 CODEOWNERS 가 없는 곳에
      codeowners-feature-<리포지토리명> 브랜치를 만들고 PR 생성
    - 같은 head 의 PR 이 이미 있으면 건너뜀

기본적으로 첫 번째 API 오류에서 전체 실행을 중단합니다 (fail-fast).
"""
import argparse
import json
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from github import GithubException
from github.Organization import Organization
from github.Repository import Repository

from codeowners_sync.action import get_boolean_input, get_input, set_failed
from codeowners_sync.common import (
    ConfigurationError,
    RemoteError,
    get_all_repos,
    get_github_client,
    get_org_name,
    get_organization,
    remote_errors,
)

POLICY_PATH = ".github/codeowners_repos_config.json"
CODEOWNERS_PATH = "CODEOWNERS"
BRANCH_PREFIX = "codeowners-feature-"
COMMIT_MESSAGE = "Created CODEOWNERS"


@dataclass(frozen=True)
class PropagationPolicy:
    """전파 대상 리포지토리 이름의 허용/제외 목록 (exclude 가 우선)"""

    include: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()

    def allows(self, repo_name: str) -> bool:
        return repo_name in self.include and repo_name not in self.exclude

    @classmethod
    def from_dict(cls, data: Any) -> "PropagationPolicy":
        """
        codeowners_repos_config.json 의 내용을 정책으로 변환합니다.

        Args:
            data: {"include": [...], "exclude": [...]} 형태의 값 (키가 없으면 빈 목록)

        Raises:
            ConfigurationError: 형식이 잘못된 경우
        """
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{POLICY_PATH} 의 최상위 값은 object 여야 합니다."
            )

        lists = {}
        for key in ("include", "exclude"):
            names = data.get(key, [])
            if not isinstance(names, list) or not all(
                isinstance(name, str) for name in names
            ):
                raise ConfigurationError(
                    f"{POLICY_PATH} 의 '{key}' 는 문자열 배열이어야 합니다."
                )
            lists[key] = frozenset(names)

        return cls(include=lists["include"], exclude=lists["exclude"])


@dataclass(frozen=True)
class RepositoryRef:
    name: str
    repository: Repository = field(compare=False, repr=False)


class PropagationOutcome(Enum):
    CREATED = "created"
    DRY_RUN = "dry_run"
    SKIPPED_FILE_EXISTS = "skipped_file_exists"
    SKIPPED_PR_EXISTS = "skipped_pr_exists"
    FAILED = "failed"


@dataclass
class PropagationResult:
    repo_name: str
    outcome: PropagationOutcome
    message: str = ""


@dataclass
class PropagationReport:
    """한 번의 실행에서 리포지토리별 처리 결과"""

    results: list[PropagationResult] = field(default_factory=list)

    def record(self, result: PropagationResult) -> None:
        self.results.append(result)

    def count(self, *outcomes: PropagationOutcome) -> int:
        return sum(1 for r in self.results if r.outcome in outcomes)

    @property
    def failures(self) -> list[PropagationResult]:
        return [r for r in self.results if r.outcome is PropagationOutcome.FAILED]

    def summary(self) -> str:
        success = self.count(PropagationOutcome.CREATED, PropagationOutcome.DRY_RUN)
        skip = self.count(
            PropagationOutcome.SKIPPED_FILE_EXISTS,
            PropagationOutcome.SKIPPED_PR_EXISTS,
        )
        error = self.count(PropagationOutcome.FAILED)
        return f"완료: 성공 {success}, 스킵 {skip}, 오류 {error}"


def fetch_content(path: str, source_repo: str) -> str | None:
    """
    로컬 파일 내용을 읽는 함수

    Returns:
        str | None: 파일 내용, 파일이 없거나 읽을 수 없으면 None
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        print(f"Cannot find {path} in {source_repo}")
        return None


def load_inputs(
    source_repo: str, seed_path: str = CODEOWNERS_PATH, policy_path: str = POLICY_PATH
) -> tuple[str, PropagationPolicy] | None:
    """
    전파할 CODEOWNERS 내용과 정책 파일을 읽는 함수

    두 파일 중 하나라도 없거나 비어 있으면 None 을 반환합니다 (오류 아님).

    Raises:
        ConfigurationError: 정책 파일이 올바른 JSON 이 아닌 경우
    """
    seed_content = fetch_content(seed_path, source_repo)
    policy_content = fetch_content(policy_path, source_repo)

    if not seed_content or not policy_content:
        return None

    try:
        data = json.loads(policy_content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{policy_path} 파싱 실패: {e}") from e

    return seed_content, PropagationPolicy.from_dict(data)


def list_eligible_targets(
    all_repos: Iterable[Repository], source_repo_name: str, policy: PropagationPolicy
) -> list[RepositoryRef]:
    """
    전파 대상 리포지토리를 고르는 함수

    소스 리포지토리를 제외하고 정책이 허용하는 리포지토리만 남깁니다.
    입력 순서(페이지네이션 순서)를 그대로 유지합니다.
    """
    return [
        RepositoryRef(name=repo.name, repository=repo)
        for repo in all_repos
        if repo.name != source_repo_name and policy.allows(repo.name)
    ]


def get_branch_name(repo_name: str) -> str:
    return f"{BRANCH_PREFIX}{repo_name}"


def has_file(repo: Repository, path: str) -> bool:
    """
    리포지토리 기본 브랜치에 파일이 존재하는지 확인하는 함수

    Raises:
        RemoteError: 404 이외의 API 오류
    """
    try:
        repo.get_contents(path)
        return True
    except GithubException as e:
        error = RemoteError.from_github_exception(e)
        if error.is_not_found:
            return False
        raise error from e


def check_existing_pulls(repo: Repository, org_name: str, branch_name: str) -> bool:
    """head 가 <org>:<branch_name> 인 열린 PR 이 있는지 확인합니다."""
    pulls = repo.get_pulls(state="open", head=f"{org_name}:{branch_name}")
    return any(True for _ in pulls)


def get_default_branch(repo: Repository) -> str:
    return repo.default_branch


def create_new_branch(repo: Repository, default_branch: str, branch_name: str) -> None:
    """
    기본 브랜치의 최신 커밋에서 새 브랜치를 만드는 함수

    이전 실행에서 브랜치만 만들어지고 중단된 경우 이름 충돌로 실패합니다.
    """
    ref = repo.get_git_ref(f"heads/{default_branch}")
    repo.create_git_ref(ref=f"refs/heads/{branch_name}", sha=ref.object.sha)


def create_file_in_branch(repo: Repository, content: str, branch_name: str) -> None:
    # PyGithub 가 content 를 base64 로 인코딩해서 전송
    repo.create_file(
        path=CODEOWNERS_PATH,
        message=COMMIT_MESSAGE,
        content=content,
        branch=branch_name,
    )


def create_pull_request(repo: Repository, branch_name: str, default_branch: str) -> None:
    repo.create_pull(
        base=default_branch,
        head=branch_name,
        title=f"Add CODEOWNERS file to {repo.name}",
    )


def create_branch_and_pr(
    repo: Repository, org_name: str, content: str, dry_run: bool = False
) -> PropagationOutcome:
    """
    브랜치 생성 → CODEOWNERS 커밋 → PR 생성 순서로 실행하는 함수

    같은 브랜치에서 열린 PR 이 있으면 아무것도 만들지 않습니다.

    Args:
        repo: PyGithub Repository 객체
        org_name: Organization 이름 (PR head 조회용)
        content: CODEOWNERS 파일 내용
        dry_run: True 면 변경 API 를 호출하지 않음

    Returns:
        PropagationOutcome: CREATED, DRY_RUN 또는 SKIPPED_PR_EXISTS

    Raises:
        RemoteError: API 오류
    """
    branch_name = get_branch_name(repo.name)

    with remote_errors():
        if check_existing_pulls(repo, org_name, branch_name):
            print(f"[SKIP] {repo.name}: Pull request already exists ({branch_name})")
            return PropagationOutcome.SKIPPED_PR_EXISTS

        default_branch = get_default_branch(repo)

        if dry_run:
            print(
                f"[DRY-RUN] {repo.name}: {branch_name} → {default_branch} PR 생성 예정"
            )
            return PropagationOutcome.DRY_RUN

        create_new_branch(repo, default_branch, branch_name)
        create_file_in_branch(repo, content, branch_name)
        create_pull_request(repo, branch_name, default_branch)

    print(f"[SUCCESS] {repo.name}: {branch_name} → {default_branch} PR 생성 완료")
    return PropagationOutcome.CREATED


def propagate_if_absent(
    target: RepositoryRef, org_name: str, content: str, dry_run: bool = False
) -> PropagationResult:
    """CODEOWNERS 가 없는 리포지토리에만 create_branch_and_pr 를 실행합니다."""
    if has_file(target.repository, CODEOWNERS_PATH):
        print(f"[SKIP] {target.name}: CODEOWNERS 이미 존재")
        return PropagationResult(target.name, PropagationOutcome.SKIPPED_FILE_EXISTS)

    outcome = create_branch_and_pr(target.repository, org_name, content, dry_run)
    return PropagationResult(target.name, outcome)


def propagate(
    org: Organization,
    source_repo: str,
    content: str,
    policy: PropagationPolicy,
    dry_run: bool = False,
    continue_on_error: bool = False,
) -> PropagationReport:
    """
    Organization 의 전파 대상 리포지토리를 순서대로 처리하는 함수

    Args:
        org: PyGithub Organization 객체
        source_repo: 소스 리포지토리 이름 (대상에서 제외)
        content: CODEOWNERS 파일 내용
        policy: include/exclude 정책
        dry_run: True 면 변경 API 를 호출하지 않음
        continue_on_error: True 면 리포지토리별 오류를 기록하고 다음 리포지토리로 진행

    Returns:
        PropagationReport: 리포지토리별 처리 결과

    Raises:
        RemoteError: continue_on_error 가 False 일 때 첫 번째 API 오류
    """
    print(f"Organization: {org.login}")
    print(f"Source repository: {source_repo}")
    print("-" * 50)

    report = PropagationReport()
    all_repos = get_all_repos(org)

    with remote_errors():
        targets = list_eligible_targets(all_repos, source_repo, policy)

    for target in targets:
        try:
            result = propagate_if_absent(target, org.login, content, dry_run)
        except RemoteError as e:
            print(f"[ERROR] {target.name}: {e}")
            report.record(
                PropagationResult(target.name, PropagationOutcome.FAILED, str(e))
            )
            if not continue_on_error:
                print("-" * 50)
                print(report.summary())
                raise
            continue

        report.record(result)

    print("-" * 50)
    print(report.summary())
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Organization의 리포지토리에 CODEOWNERS 파일을 PR로 전파합니다."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="실제 변경 없이 어떤 리포지토리에 PR이 생성될지 확인",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="리포지토리별 오류를 기록하고 나머지 리포지토리를 계속 처리",
    )
    parser.add_argument(
        "--source-repo",
        help="CODEOWNERS 원본 리포지토리 이름 (기본값: source-repo 입력값 또는 SOURCE_REPO)",
    )
    parser.add_argument(
        "--github-token",
        help="GitHub 토큰 (기본값: github-token 입력값 또는 GITHUB_TOKEN)",
    )
    args = parser.parse_args(argv)

    try:
        token = args.github_token or get_input(
            "github-token", required=True, fallback_env="GITHUB_TOKEN"
        )
        source_repo = args.source_repo or get_input(
            "source-repo", required=True, fallback_env="SOURCE_REPO"
        )
        dry_run = args.dry_run or get_boolean_input("dry-run", fallback_env="DRY_RUN")
        continue_on_error = args.continue_on_error or get_boolean_input(
            "continue-on-error", fallback_env="CONTINUE_ON_ERROR"
        )

        inputs = load_inputs(source_repo)
        if inputs is None:
            return 0
        content, policy = inputs

        # GitHub 클라이언트 초기화
        g = get_github_client(token)
        org = get_organization(g, get_org_name())

        report = propagate(
            org,
            source_repo,
            content,
            policy,
            dry_run=dry_run,
            continue_on_error=continue_on_error,
        )
    except Exception as e:
        set_failed(str(e) or e.__class__.__name__)
        return 1

    if report.failures:
        names = ", ".join(r.repo_name for r in report.failures)
        set_failed(f"{len(report.failures)}개 리포지토리에서 오류가 발생했습니다: {names}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
