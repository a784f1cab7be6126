# pawpal/api/chats/services.py
import logging
from typing import Callable, List, Optional

from pawpal.api.auth.services import AuthService
from pawpal.api.follows.services import FollowService
from pawpal.core.errors import MissingFieldError, PawPalError, SelfActionError
from pawpal.models.chat import ChatMessage, ChatSession, session_key
from pawpal.services.document_store import DocumentStore

CHATS = 'chats'


def messages_path(session_id: str) -> str:
    return f"{CHATS}/{session_id}/messages"


class ChatService:
    """
    1:1 메시지 세션 관리.

    세션은 정렬된 참여자 쌍으로 식별하며 '조회 후 생성' 방식이므로,
    두 사용자가 동시에 처음 대화를 열면 세션이 둘 생길 수 있습니다.
    메시지는 서버 타임스탬프 오름차순으로 정렬됩니다.
    """
    def __init__(self, store: DocumentStore, auth_service: AuthService, follow_service: FollowService):
        self.store = store
        self.auth_service = auth_service
        self.follow_service = follow_service

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        doc = self.store.get(CHATS, session_id)
        return ChatSession.from_dict(doc) if doc else None

    def _get_joined_session(self, session_id: str, user_id: str) -> Optional[ChatSession]:
        session = self.get_session(session_id)
        if session is None:
            return None
        if user_id not in session.participants:
            raise PermissionError("참여 중인 대화방이 아닙니다.")
        return session

    def open_session(self, user_a: str, user_b: str) -> ChatSession:
        """두 사용자의 세션을 찾고, 없으면 새로 만듭니다. 인자 순서와 무관하게 같은 세션을 반환합니다."""
        if user_a == user_b:
            raise SelfActionError("자기 자신과는 대화할 수 없습니다.")
        participants = session_key(user_a, user_b)

        docs = self.store.query(CHATS, filters=[('participants', '==', participants)], limit=1)
        if docs:
            return ChatSession.from_dict(docs[0])

        session_id = self.store.add(CHATS, {
            'participants': participants,
            'lastMessage': '',
            'lastTimestamp': self.store.server_timestamp(),
            'createdAt': self.store.server_timestamp()
        })
        logging.info(f"대화방 생성 완료 (chat_id: {session_id}, participants: {participants})")
        return self.get_session(session_id) or ChatSession(id=session_id, participants=participants)

    def send_message(self, session_id: str, sender_id: str, text: str) -> Optional[ChatMessage]:
        """
        메시지를 저장한 뒤 대화방 미리보기(lastMessage/lastTimestamp)를 갱신합니다.
        미리보기 갱신에 실패해도 메시지는 이미 저장된 상태로 유지됩니다.
        """
        text = (text or '').strip()
        if not text:
            raise MissingFieldError('text')
        if self._get_joined_session(session_id, sender_id) is None:
            return None

        message_id = self.store.add(messages_path(session_id), {
            'senderId': sender_id,
            'text': text,
            'timestamp': self.store.server_timestamp()
        })

        try:
            self.store.update(CHATS, session_id, {
                'lastMessage': text,
                'lastTimestamp': self.store.server_timestamp()
            })
        except PawPalError as e:
            logging.warning(f"대화방 미리보기 갱신 실패 (chat_id: {session_id}): {e.message}")

        saved = self.store.get(messages_path(session_id), message_id)
        return ChatMessage.from_dict(saved) if saved else ChatMessage(id=message_id, sender_id=sender_id, text=text)

    def list_sessions(self, user_id: str) -> List[ChatSession]:
        """최근 대화 순 세션 목록. 상대방 요약 정보(공개 범위에 따른 전화번호 포함)를 붙여 반환합니다."""
        docs = self.store.query(
            CHATS,
            filters=[('participants', 'array_contains', user_id)],
            order_by='lastTimestamp',
            descending=True
        )
        sessions = []
        for doc in docs:
            session = ChatSession.from_dict(doc)
            other_id = session.other_participant(user_id)
            other = self.auth_service.get_user(other_id) if other_id else None
            if other:
                session.other_user = other.public_summary(
                    include_private=self.follow_service.can_see_private(user_id, other.uid)
                )
            sessions.append(session)
        return sessions

    def list_messages(self, session_id: str, user_id: str, limit: Optional[int] = None) -> Optional[List[ChatMessage]]:
        if self._get_joined_session(session_id, user_id) is None:
            return None
        docs = self.store.query(messages_path(session_id), order_by='timestamp', limit=limit)
        return [ChatMessage.from_dict(doc) for doc in docs]

    def watch_messages(self, session_id: str, callback: Callable[[List[ChatMessage]], None]) -> Callable[[], None]:
        return self.store.watch(
            messages_path(session_id),
            lambda docs: callback([ChatMessage.from_dict(doc) for doc in docs]),
            order_by='timestamp'
        )
