# pawpal/api/posts/services.py
import logging
from typing import Callable, List, Optional, Tuple

from pawpal.api.auth.services import AuthService
from pawpal.api.pets.services import PetService
from pawpal.core.errors import MissingFieldError
from pawpal.models.notification import NotificationType
from pawpal.models.post import Comment, Post
from pawpal.services.document_store import DocumentStore
from pawpal.services.notification_service import NotificationService

POSTS = 'posts'


def comments_path(post_id: str) -> str:
    return f"{POSTS}/{post_id}/comments"


class PostService:
    """
    커뮤니티 피드 게시글과 댓글을 담당하는 서비스 클래스.
    작성자/반려동물 정보는 작성 시점의 스냅샷으로 저장하며 이후 조인하지 않습니다.
    """
    def __init__(self, store: DocumentStore, auth_service: AuthService, pet_service: PetService,
                 notification_service: NotificationService):
        self.store = store
        self.auth_service = auth_service
        self.pet_service = pet_service
        self.notification_service = notification_service

    def create_post(self, user_id: str, content: str, pet_id: Optional[str] = None,
                    image: Optional[str] = None) -> Optional[Post]:
        """새 게시글을 생성합니다. 작성자가 없으면 None."""
        content = (content or '').strip()
        if not content:
            raise MissingFieldError('content')

        user = self.auth_service.get_user(user_id)
        if not user:
            return None

        pet = None
        if pet_id:
            pet = self.pet_service.get_pet_by_id(pet_id)
            if pet and pet.owner_id != user_id:
                raise PermissionError("본인의 반려동물만 게시글에 연결할 수 있습니다.")
        else:
            owned = self.pet_service.list_pets_by_owner(user_id)
            pet = owned[0] if owned else None

        post = Post(
            id='',
            user_id=user_id,
            user=user.display_name,
            content=content,
            avatar=user.photo_url,
            pet_name=pet.name if pet else '',
            pet_type=pet.breed if pet else '',
            pet_species=pet.species if pet else '',
            image=image,
            created_at=self.store.server_timestamp()
        )
        post.id = self.store.add(POSTS, post.to_dict())
        logging.info(f"게시글 생성 완료 (post_id: {post.id}, user_id: {user_id})")

        self.notification_service.create_notification(
            user_id, "Post Published", "Your post is now live in the community feed.",
            NotificationType.SUCCESS, related_id=post.id
        )
        return self.get_post(post.id) or post

    def get_post(self, post_id: str) -> Optional[Post]:
        doc = self.store.get(POSTS, post_id)
        return Post.from_dict(doc) if doc else None

    def list_feed(self, limit: int = 20, cursor: Optional[str] = None) -> Tuple[List[Post], Optional[str]]:
        docs = self.store.query(POSTS, order_by='createdAt', descending=True, limit=limit, start_after=cursor)
        posts = [Post.from_dict(doc) for doc in docs]
        next_cursor = posts[-1].id if len(posts) == limit else None
        return posts, next_cursor

    def watch_feed(self, callback: Callable[[List[Post]], None], limit: int = 20) -> Callable[[], None]:
        return self.store.watch(
            POSTS,
            lambda docs: callback([Post.from_dict(doc) for doc in docs]),
            order_by='createdAt',
            descending=True,
            limit=limit
        )

    def add_comment(self, post_id: str, user_id: str, text: str) -> Optional[Comment]:
        """댓글을 추가하고 게시글의 댓글 수를 1 증가시킵니다. 게시글이나 작성자가 없으면 None."""
        text = (text or '').strip()
        if not text:
            raise MissingFieldError('text')
        if not self.get_post(post_id):
            return None
        user = self.auth_service.get_user(user_id)
        if not user:
            return None

        comment_id = self.store.add(comments_path(post_id), {
            'userId': user_id,
            'userName': user.display_name,
            'userAvatar': user.photo_url,
            'text': text,
            'createdAt': self.store.server_timestamp()
        })
        self.store.update(POSTS, post_id, {'comments': self.store.increment(1)})
        saved = self.store.get(comments_path(post_id), comment_id)
        return Comment.from_dict(saved)

    def list_comments(self, post_id: str) -> List[Comment]:
        docs = self.store.query(comments_path(post_id), order_by='createdAt')
        return [Comment.from_dict(doc) for doc in docs]
