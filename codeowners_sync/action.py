"""
GitHub Actions 입력값 조회 및 실패 보고 모듈

Actions 러너는 action 입력값을 INPUT_<NAME> 환경변수로 전달합니다.
로컬 실행 시에는 .env 파일의 일반 환경변수(GITHUB_TOKEN 등)를 대신 사용할 수 있습니다.
"""
import os

from codeowners_sync.common import ConfigurationError

TRUE_VALUES = {"true", "yes", "1", "on"}
FALSE_VALUES = {"false", "no", "0", "off"}


def get_input(
    name: str, required: bool = False, fallback_env: str | None = None
) -> str:
    """
    action 입력값을 가져오는 함수

    Args:
        name: 입력값 이름 (예: "github-token")
        required: 필수 여부
        fallback_env: INPUT_ 환경변수가 없을 때 조회할 환경변수 이름

    Returns:
        str: 앞뒤 공백이 제거된 입력값 (없으면 빈 문자열)

    Raises:
        ConfigurationError: 필수 입력값이 없는 경우
    """
    env_name = "INPUT_" + name.replace(" ", "_").upper()
    value = os.getenv(env_name, "").strip()

    if not value and fallback_env:
        value = os.getenv(fallback_env, "").strip()

    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")

    return value


def get_boolean_input(name: str, fallback_env: str | None = None) -> bool:
    """
    boolean action 입력값을 가져오는 함수 (값이 없으면 False)

    Raises:
        ConfigurationError: true/false 계열로 해석할 수 없는 값인 경우
    """
    value = get_input(name, fallback_env=fallback_env).lower()
    if not value:
        return False
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Input '{name}' must be a boolean (true/false), got: {value}"
    )


def escape_data(message: str) -> str:
    # 워크플로 커맨드 메시지에서 특수 문자 인코딩
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_failed(message: str) -> None:
    """
    실행 실패를 Actions 로그에 에러 어노테이션으로 보고합니다.

    프로세스 종료 코드는 호출하는 쪽(main)에서 1로 반환합니다.
    """
    print(f"::error::{escape_data(message)}")
