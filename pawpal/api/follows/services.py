# pawpal/api/follows/services.py
import logging
from typing import List, Optional

from pawpal.core.errors import DocumentNotFound, SelfActionError
from pawpal.models.follow import EdgeStatus, FollowAction, FollowEdge, FollowStatus
from pawpal.models.notification import NotificationType
from pawpal.services.document_store import BatchWrite, DocumentStore
from pawpal.services.notification_service import NOTIFICATIONS, NotificationService

FOLLOWS = 'follows'


class FollowService:
    """
    팔로우 관계(follower -> following 간선)와 그에 따른 공개 범위 판단을 담당합니다.

    상태 전이: NOT_FOLLOWING -> PENDING -> FOLLOWING. 언팔로우는 없으며,
    거절된 요청은 간선 자체를 삭제해 NOT_FOLLOWING 으로 돌아갑니다.
    요청 시 기존 간선을 확인하지 않으므로 같은 쌍에 중복 간선이 생길 수 있습니다.
    """
    def __init__(self, store: DocumentStore, notification_service: NotificationService):
        self.store = store
        self.notification_service = notification_service

    def _edges_between(self, follower_id: str, following_id: str) -> List[FollowEdge]:
        docs = self.store.query(FOLLOWS, filters=[
            ('followerId', '==', follower_id),
            ('followingId', '==', following_id)
        ])
        return [FollowEdge.from_dict(doc) for doc in docs]

    def get_edge(self, edge_id: str) -> Optional[FollowEdge]:
        doc = self.store.get(FOLLOWS, edge_id)
        return FollowEdge.from_dict(doc) if doc else None

    def get_status(self, viewer_id: str, target_id: str) -> FollowStatus:
        """viewer 가 target 을 팔로우하는 상태. 중복 간선 중 하나라도 수락되었으면 FOLLOWING 입니다."""
        if viewer_id == target_id:
            return FollowStatus.IS_SELF
        edges = self._edges_between(viewer_id, target_id)
        if not edges:
            return FollowStatus.NOT_FOLLOWING
        if any(edge.status is EdgeStatus.ACCEPTED for edge in edges):
            return FollowStatus.FOLLOWING
        return FollowStatus.PENDING

    def can_see_private(self, viewer_id: Optional[str], owner_id: str) -> bool:
        """본인이거나 수락된 팔로워만 반려동물 목록과 전화번호를 볼 수 있습니다."""
        if not viewer_id:
            return False
        return viewer_id == owner_id or self.get_status(viewer_id, owner_id) is FollowStatus.FOLLOWING

    def request_follow(self, follower_id: str, follower_name: str, following_id: str) -> str:
        """
        pending 간선과 대상에게 보낼 follow_request 알림을 하나의 배치로 생성합니다.

        :return: 생성된 follows 문서 ID (알림의 relatedId)
        """
        if follower_id == following_id:
            raise SelfActionError("자기 자신을 팔로우할 수 없습니다.")

        edge_id = self.store.new_id(FOLLOWS)
        notification = self.notification_service.build(
            recipient_id=following_id,
            title="New Follow Request",
            message=f"{follower_name} wants to follow you.",
            n_type=NotificationType.FOLLOW_REQUEST,
            related_id=edge_id,
            from_user_id=follower_id,
            from_user_name=follower_name
        )
        self.store.commit([
            BatchWrite(op='set', path=FOLLOWS, doc_id=edge_id, data={
                'followerId': follower_id,
                'followingId': following_id,
                'status': EdgeStatus.PENDING.value,
                'createdAt': self.store.server_timestamp()
            }),
            self.notification_service.as_batch_write(notification)
        ])
        logging.info(f"팔로우 요청 생성: {follower_id} -> {following_id} (edge: {edge_id})")
        return edge_id

    def resolve_request(self, notification_id: str, edge_id: str, action: FollowAction,
                        actor_id: Optional[str] = None) -> Optional[FollowStatus]:
        """
        팔로우 요청을 수락/거절하고 알림을 읽음 처리합니다. 두 쓰기는 하나의 원자적 배치입니다.

        :param actor_id: 요청을 처리하는 사용자. 주어지면 간선의 대상(followingId)과 일치해야 합니다.
        :param notification_id: 이 간선을 가리키는(relatedId) 대상 사용자의 follow_request 알림
        :return: 처리 후 요청자 기준 상태 (간선이 없으면 None)
        """
        edge = self.get_edge(edge_id)
        if edge is None:
            return None
        if actor_id is not None and edge.following_id != actor_id:
            raise PermissionError("본인에게 온 팔로우 요청만 처리할 수 있습니다.")

        notification = self.notification_service.get(notification_id)
        if notification is None:
            raise DocumentNotFound("팔로우 요청 알림을 찾을 수 없습니다.")
        if notification.related_id != edge_id or notification.user_id != edge.following_id:
            raise PermissionError("해당 팔로우 요청의 알림이 아닙니다.")

        if action is FollowAction.ACCEPT:
            edge_write = BatchWrite(op='update', path=FOLLOWS, doc_id=edge_id,
                                    data={'status': EdgeStatus.ACCEPTED.value})
            result = FollowStatus.FOLLOWING
        else:
            edge_write = BatchWrite(op='delete', path=FOLLOWS, doc_id=edge_id)
            result = FollowStatus.NOT_FOLLOWING

        self.store.commit([
            edge_write,
            BatchWrite(op='update', path=NOTIFICATIONS, doc_id=notification_id, data={'read': True})
        ])
        logging.info(f"팔로우 요청 {action.value} 처리 완료 (edge: {edge_id})")
        return result

    def list_following(self, user_id: str) -> List[str]:
        docs = self.store.query(FOLLOWS, filters=[
            ('followerId', '==', user_id),
            ('status', '==', EdgeStatus.ACCEPTED.value)
        ])
        return list(dict.fromkeys(doc['followingId'] for doc in docs))

    def list_followers(self, user_id: str) -> List[str]:
        docs = self.store.query(FOLLOWS, filters=[
            ('followingId', '==', user_id),
            ('status', '==', EdgeStatus.ACCEPTED.value)
        ])
        return list(dict.fromkeys(doc['followerId'] for doc in docs))
