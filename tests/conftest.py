"""pytest 설정 파일"""

import sys
from pathlib import Path

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# .env 또는 Actions 러너에서 들어온 값이 테스트에 섞이지 않도록 제거할 환경변수
ACTION_ENV_VARS = [
    "INPUT_GITHUB-TOKEN",
    "INPUT_SOURCE-REPO",
    "INPUT_DRY-RUN",
    "INPUT_CONTINUE-ON-ERROR",
    "GITHUB_TOKEN",
    "SOURCE_REPO",
    "DRY_RUN",
    "CONTINUE_ON_ERROR",
    "GITHUB_REPOSITORY_OWNER",
    "GITHUB_REPOSITORY",
    "GITHUB_ORG_NAME",
]


@pytest.fixture(autouse=True)
def clean_action_env(monkeypatch):
    for name in ACTION_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
