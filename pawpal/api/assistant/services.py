# pawpal/api/assistant/services.py
import logging
from typing import List, Optional

from pawpal.core.errors import DomainValidationError, MissingFieldError
from pawpal.models.chat import AIChatMessage, AIChatSession
from pawpal.services.content_service import ContentService
from pawpal.services.document_store import DocumentStore

AI_CHATS = 'ai_chats'
AI_ROLES = ('user', 'model')
DEFAULT_SESSION_TITLE = 'New chat'


def sessions_path(user_id: str) -> str:
    return f"users/{user_id}/{AI_CHATS}"


def ai_messages_path(user_id: str, session_id: str) -> str:
    return f"{sessions_path(user_id)}/{session_id}/messages"


class AssistantChatService:
    """
    사용자별로 저장되는 AI 도우미 대화방.

    대화방은 'users/{uid}/ai_chats' 하위 컬렉션에, 메시지는 그 아래 'messages' 에 쌓입니다.
    메시지를 저장할 때마다 대화방의 lastTimestamp 가 갱신되어 최근 대화 순으로 정렬됩니다.
    """
    def __init__(self, store: DocumentStore, content_service: ContentService):
        self.store = store
        self.content_service = content_service

    def create_session(self, user_id: str, title: Optional[str] = None) -> AIChatSession:
        title = (title or '').strip() or DEFAULT_SESSION_TITLE
        session_id = self.store.add(sessions_path(user_id), {
            'title': title,
            'lastTimestamp': self.store.server_timestamp(),
            'createdAt': self.store.server_timestamp()
        })
        logging.info(f"AI 대화방 생성 완료 (user_id: {user_id}, session_id: {session_id})")
        return self.get_session(user_id, session_id) or AIChatSession(id=session_id, title=title)

    def get_session(self, user_id: str, session_id: str) -> Optional[AIChatSession]:
        doc = self.store.get(sessions_path(user_id), session_id)
        return AIChatSession.from_dict(doc) if doc else None

    def list_sessions(self, user_id: str) -> List[AIChatSession]:
        docs = self.store.query(sessions_path(user_id), order_by='lastTimestamp', descending=True)
        return [AIChatSession.from_dict(doc) for doc in docs]

    def save_message(self, user_id: str, session_id: str, role: str, text: str) -> Optional[AIChatMessage]:
        """메시지를 추가하고 대화방의 lastTimestamp 를 갱신합니다. 대화방이 없으면 None."""
        text = (text or '').strip()
        if not text:
            raise MissingFieldError('text')
        if role not in AI_ROLES:
            raise DomainValidationError(f"알 수 없는 역할입니다: {role}")
        if self.get_session(user_id, session_id) is None:
            return None

        message_id = self.store.add(ai_messages_path(user_id, session_id), {
            'role': role,
            'text': text,
            'timestamp': self.store.server_timestamp()
        })
        self.store.update(sessions_path(user_id), session_id, {'lastTimestamp': self.store.server_timestamp()})

        saved = self.store.get(ai_messages_path(user_id, session_id), message_id)
        return AIChatMessage.from_dict(saved) if saved else AIChatMessage(id=message_id, role=role, text=text)

    def list_messages(self, user_id: str, session_id: str) -> Optional[List[AIChatMessage]]:
        if self.get_session(user_id, session_id) is None:
            return None
        docs = self.store.query(ai_messages_path(user_id, session_id), order_by='timestamp')
        return [AIChatMessage.from_dict(doc) for doc in docs]

    def ask(self, user_id: str, session_id: str, message: str) -> Optional[str]:
        """
        질문을 저장하고 지금까지의 대화를 이력으로 넘겨 응답을 받은 뒤, 응답도 저장합니다.
        AI 호출이 실패하면 ServiceError 가 그대로 전파되며 질문은 저장된 상태로 남습니다.

        :return: 응답 문자열. 대화방이 없으면 None.
        """
        history = self.list_messages(user_id, session_id)
        if history is None:
            return None
        question = self.save_message(user_id, session_id, 'user', message)

        reply = self.content_service.chat(question.text, [m.to_turn() for m in history])
        self.save_message(user_id, session_id, 'model', reply)
        return reply
