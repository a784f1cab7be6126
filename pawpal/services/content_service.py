# pawpal/services/content_service.py
import base64
import logging
from typing import List, Optional

import openai
from flask import Flask
from openai import OpenAI

from pawpal.core.errors import NetworkTimeout, ServiceError
from pawpal.models.chat import AssistantTurn

PAWPAL_SYSTEM_INSTRUCTION = """You are SS Paw Pal, a professional AI assistant dedicated exclusively to pets and companion animals.

STRICT RULES:
1. Answer ONLY pet-related questions.
2. If NOT pet-related, reply exactly: "I am a pet care assistant and can only answer questions related to pets."
3. Keep responses concise, engaging, and professional.

HEALTH:
- Provide general guidance only.
- Always recommend consulting a licensed veterinarian for serious symptoms or medical emergencies."""

# AI 채팅 릴레이 실패 시 사용자에게 그대로 돌려주는 고정 응답
CHAT_FALLBACK_REPLY = "I'm having trouble connecting to the network. Please try again."


class ContentService:
    """
    OpenAI API 연동을 담당하는 콘텐츠 생성 서비스.
    텍스트(인사이트, 마일스톤, 채팅)와 이미지(아바타) 생성을 제공합니다.
    """

    def __init__(self, client: Optional[OpenAI] = None, text_model: str = 'gpt-4o-mini',
                 image_model: str = 'gpt-image-1'):
        self.client = client
        self.text_model = text_model
        self.image_model = image_model

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 OpenAI 클라이언트를 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        self.text_model = app.config.get('OPENAI_TEXT_MODEL', self.text_model)
        self.image_model = app.config.get('OPENAI_IMAGE_MODEL', self.image_model)
        if self.client is not None:
            return
        api_key = app.config.get('OPENAI_API_KEY')
        if not api_key:
            raise ValueError("OPENAI_API_KEY 설정이 .env 파일에 필요합니다.")
        self.client = OpenAI(api_key=api_key, timeout=app.config.get('REQUEST_TIMEOUT_SECONDS', 10.0))
        logging.info("ContentService: OpenAI API 서비스가 성공적으로 초기화되었습니다.")

    def _ensure_client(self):
        if not self.client:
            raise RuntimeError("ContentService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

    def _complete(self, messages: List[dict]) -> str:
        self._ensure_client()
        try:
            response = self.client.chat.completions.create(model=self.text_model, messages=messages)
        except openai.APITimeoutError as e:
            logging.error(f"OpenAI 텍스트 생성 타임아웃: {e}")
            raise NetworkTimeout() from e
        except openai.OpenAIError as e:
            logging.error(f"OpenAI 텍스트 생성 실패: {e}", exc_info=True)
            raise ServiceError("AI 응답을 생성하지 못했습니다.") from e
        return response.choices[0].message.content or ''

    def generate_text(self, prompt: str) -> str:
        """반려동물 도우미 페르소나로 단발성 텍스트를 생성합니다."""
        return self._complete([
            {"role": "system", "content": PAWPAL_SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt}
        ])

    def generate_text_or_fallback(self, prompt: str, fallback: str) -> str:
        """생성 실패(또는 빈 응답) 시 고정 문구를 반환합니다."""
        try:
            text = self.generate_text(prompt)
        except ServiceError as e:
            logging.warning(f"AI 텍스트 생성 실패, 기본 문구로 대체합니다: {e.message}")
            return fallback
        return text or fallback

    def chat(self, message: str, history: Optional[List[AssistantTurn]] = None) -> str:
        """대화 이력을 포함해 다음 응답을 생성합니다."""
        messages = [{"role": "system", "content": PAWPAL_SYSTEM_INSTRUCTION}]
        messages.extend(turn.to_message() for turn in (history or []))
        messages.append({"role": "user", "content": message})
        return self._complete(messages)

    def generate_image(self, prompt: str, reference_image: Optional[bytes] = None) -> bytes:
        """
        프롬프트로 1:1 이미지를 생성해 PNG 바이트로 반환합니다.
        참고 이미지가 주어지면 images.edit 으로 해당 이미지를 기반으로 생성합니다.
        """
        self._ensure_client()
        try:
            if reference_image:
                response = self.client.images.edit(
                    model=self.image_model,
                    image=("reference.png", reference_image, "image/png"),
                    prompt=prompt,
                    size="1024x1024"
                )
            else:
                response = self.client.images.generate(
                    model=self.image_model,
                    prompt=prompt,
                    size="1024x1024",
                    n=1
                )
        except openai.APITimeoutError as e:
            logging.error(f"OpenAI 이미지 생성 타임아웃: {e}")
            raise NetworkTimeout() from e
        except openai.OpenAIError as e:
            logging.error(f"OpenAI 이미지 생성 실패: {e}", exc_info=True)
            raise ServiceError("이미지를 생성하지 못했습니다.") from e

        image_b64 = response.data[0].b64_json if response.data else None
        if not image_b64:
            raise ServiceError("이미지 생성 결과가 비어 있습니다.")
        return base64.b64decode(image_b64)
