"""
GitHub Organization의 리포지토리에 CODEOWNERS 파일을 전파하는 GitHub Actions 패키지

소스 리포지토리의 CODEOWNERS 파일을, 설정 파일에 포함된 리포지토리 중
CODEOWNERS가 없는 곳에 Pull Request로 추가합니다.

모듈 목록:
- common.py: PyGithub 클라이언트 생성, Organization/리포지토리 조회, 원격 오류 분류
- action.py: GitHub Actions 입력값 조회 및 실패 보고
- propagate.py: 전파 대상 선정과 브랜치/커밋/PR 생성 (진입점)

사용 전 필수 입력값:
- github-token (또는 GITHUB_TOKEN 환경변수)
- source-repo (또는 SOURCE_REPO 환경변수)

--dry-run 옵션을 지원합니다.
"""
