"""Claude API client service for document generation.

Anthropic Messages API를 비동기로 호출하는 얇은 래퍼입니다.

주요 기능:
- complete(): 텍스트 응답 요청
- complete_json(): JSON 응답 요청 (자동 파싱)

에러 정책:
- API 키가 없으면 호출 전에 ConfigurationError
- 인증 실패도 ConfigurationError (키가 잘못된 경우)
- 그 밖의 API 실패는 ClaudeClientError
- 빈 응답은 GenerationError
- 재시도하지 않습니다. 실패를 어떻게 처리할지는 호출자(오케스트레이터)가 결정합니다.
"""

import json
import logging
from typing import Optional, Any
from datetime import datetime

import anthropic
from anthropic import AsyncAnthropic

from app.config import get_settings
from app.exceptions import ConfigurationError, ClaudeClientError, GenerationError

logger = logging.getLogger(__name__)


class ClaudeClient:
    """
    Anthropic Messages API 래퍼 클래스.

    Attributes:
        _api_key: API 키 (설정에서 읽음)
        _model: 사용할 Claude 모델
        _client: AsyncAnthropic 인스턴스 (첫 호출 시 생성)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.anthropic_api_key
        self._model = model or settings.claude_model
        self._client = client

        logger.info(f"[Claude] 클라이언트 초기화 (model={self._model})")

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key) or self._client is not None

    def check_configuration(self) -> None:
        """API 키가 없으면 ConfigurationError를 발생시킵니다."""
        if not self.is_configured:
            raise ConfigurationError(
                "Claude API key not found. Please set the ANTHROPIC_API_KEY environment variable."
            )

    def _get_client(self):
        self.check_configuration()
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.3,
    ) -> str:
        """
        Send a completion request to Claude.

        Args:
            system_prompt: System-level instructions
            user_prompt: User message content
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature

        Returns:
            Claude's response text
        """
        client = self._get_client()

        logger.info(f"[Claude] 요청: 프롬프트 {len(user_prompt)} chars, max_tokens={max_tokens}")
        start_time = datetime.now()

        try:
            response = await client.messages.create(
                model=self._model,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except anthropic.AuthenticationError as e:
            logger.error(f"[Claude] 인증 실패: {e}")
            raise ConfigurationError(
                "Claude API key is missing or invalid. Please check your environment variables.",
                details={"status_code": e.status_code},
            ) from e
        except anthropic.APIStatusError as e:
            logger.error(f"[Claude] API 에러 ({e.status_code}): {e}")
            raise ClaudeClientError(
                f"Claude API error: {e.message}",
                details={"status_code": e.status_code},
            ) from e
        except anthropic.APIError as e:
            logger.error(f"[Claude] 통신 에러: {type(e).__name__}: {e}")
            raise ClaudeClientError(f"Claude API request failed: {e}") from e

        elapsed = (datetime.now() - start_time).total_seconds()
        text = self._extract_text(response)
        logger.info(f"[Claude] 완료: {elapsed:.1f}초, 응답 {len(text)} chars")

        if not text:
            raise GenerationError("No content generated by Claude")

        return text

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ) -> Any:
        """
        Send a completion request expecting JSON response.

        Returns:
            Parsed JSON response (dict or list)
        """
        prompt = (
            f"{user_prompt}\n\n"
            "Respond with valid JSON only. No explanations and no markdown code blocks."
        )
        response = await self.complete(system_prompt, prompt, max_tokens, temperature)
        return self._parse_json_response(response)

    @staticmethod
    def _extract_text(response: Any) -> str:
        """응답의 text 블록들을 이어 붙입니다."""
        parts = []
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "text":
                parts.append(block.text)
        return "".join(parts).strip()

    def _parse_json_response(self, response: str) -> Any:
        """
        Claude 응답에서 JSON 파싱 (포맷팅 문제 처리 포함).

        파싱 전략:
        0. 빈 응답은 빈 dict
        1. 마크다운 코드 블록(```json, ```) 제거 후 직접 파싱
        2. 실패하면 응답 안에서 { 또는 [ 로 시작하는 JSON 구조를 찾아 파싱
        3. 그래도 실패하면 ClaudeClientError

        Raises:
            ClaudeClientError: JSON 파싱 실패 시
        """
        cleaned = strip_code_fences(response or "")
        if not cleaned:
            return {}

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(f"[JSON] 직접 파싱 실패: {e}")

        # 응답 내에서 처음 나오는 JSON 객체/배열 시작점 찾기
        starts = [idx for idx in (cleaned.find("{"), cleaned.find("[")) if idx != -1]
        if not starts:
            raise ClaudeClientError(
                "Failed to parse JSON response: no JSON structure found",
                details={"response_preview": cleaned[:200]},
            )

        start_idx = min(starts)
        bracket = cleaned[start_idx]
        closing = "}" if bracket == "{" else "]"

        # 괄호 깊이를 추적해서 완전한 JSON 범위 찾기 (문자열 안의 괄호는 무시)
        depth = 0
        end_idx = -1
        in_string = False
        escaped = False
        for i, char in enumerate(cleaned[start_idx:], start_idx):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == bracket:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    end_idx = i + 1
                    break

        if end_idx == -1:
            raise ClaudeClientError(
                "Failed to parse JSON response: unbalanced brackets",
                details={"response_preview": cleaned[:200]},
            )

        try:
            return json.loads(cleaned[start_idx:end_idx])
        except json.JSONDecodeError as e:
            logger.error(f"[JSON] 추출 파싱 실패: {e}")
            raise ClaudeClientError(f"Failed to parse JSON response: {e}") from e


def strip_code_fences(text: str) -> str:
    """응답 전체를 감싼 ``` 코드 블록을 제거합니다 (```html, ```json 등)."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        first_newline = cleaned.find("\n")
        cleaned = cleaned[first_newline + 1:] if first_newline != -1 else cleaned[3:]
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


# Singleton instance for dependency injection
_claude_client: Optional[ClaudeClient] = None


def get_claude_client() -> ClaudeClient:
    """Get or create Claude client singleton."""
    global _claude_client
    if _claude_client is None:
        _claude_client = ClaudeClient()
    return _claude_client
