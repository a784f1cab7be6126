# pawpal/api/pets/services.py
import json
import logging
import math
import uuid
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

from pawpal.api.follows.services import FollowService
from pawpal.core.errors import (
    BiologicalLimitExceeded,
    IndexOutOfRange,
    InvalidBirthday,
    InvalidRecordKind,
    InvalidVaccineName,
    InvalidWeight,
    MissingFieldError,
)
from pawpal.models.notification import NotificationType
from pawpal.models.pet import (
    BIOLOGICAL_AGE_LIMIT_YEARS,
    AgeMilestone,
    HealthRecordKind,
    Pet,
    VaccinationRecord,
    WeightRecord,
    new_pet_id,
)
from pawpal.services.content_service import ContentService
from pawpal.services.document_store import DocumentStore
from pawpal.services.notification_service import NotificationService
from pawpal.services.qr_service import QRService
from pawpal.services.storage_service import StorageService
from pawpal.utils.datetime_utils import DateTimeUtils

PETS = 'pets'

AVATAR_STYLES = [
    {
        'id': 'premium-elite',
        'name': 'Elite Portrait Studio',
        'description': 'Ultra-polished digital kawaii aesthetic',
        'is_premium': True,
        'prompt': (
            "Generate a high-quality digital pet avatar optimized for a mobile application profile picture. "
            "Art Direction: Cute, friendly, and modern cartoon aesthetic; soft pastel color palette with smooth "
            "gradient lighting and subtle glow highlights; big expressive eyes and a rounded, chubby face; clean, "
            "smooth vector-style outlines with a polished digital finish; soft natural shading and gentle shadows "
            "for depth; subtle rim lighting around the edges to make the character pop. Composition: Perfectly "
            "front-facing and symmetrically centered; clearly framed inside a clean circular border suitable for "
            "profile icons; simple light or pastel gradient background with a slight depth blur; minimal background "
            "elements so focus stays on the pet. Mood: Warm, welcoming, and playful but polished; friendly and "
            "approachable expression with a soft gentle smile; clean startup-style digital polish."
        ),
    },
    {
        'id': 'pixel-art',
        'name': 'Retro Pixel Art',
        'description': 'Classic 16-bit video game aesthetic',
        'is_premium': False,
        'prompt': (
            "Generate a vibrant 16-bit pixel art pet avatar. Classic SNES/GameBoy style, clean square-grid pixels, "
            "limited retro color palette, crisp outlines, bold shading, and a simple 2D profile perspective. "
            "Perfect for an RPG character selection screen."
        ),
    },
    {
        'id': 'cyberpunk',
        'name': 'Cyber Neon',
        'description': 'Futuristic glow and hi-tech details',
        'is_premium': False,
        'prompt': (
            "Generate a futuristic cyberpunk pet portrait. Neon-drenched lighting in cyan and pink, subtle robotic "
            "enhancements, high-tech glowing eyes, dramatic high-contrast shadows, rain-slicked futuristic city "
            "backdrop with heavy bokeh."
        ),
    },
    {
        'id': 'realistic-studio',
        'name': 'Studio Realism',
        'description': 'Hyper-detailed cinematic lighting',
        'is_premium': False,
        'prompt': (
            "A cinematic, ultra-high-quality professional studio avatar portrait. Detailed fur, vibrant lighting, "
            "4K resolution, macro photography style."
        ),
    },
    {
        'id': 'pixar-3d',
        'name': '3D Animator',
        'description': 'Pixar-inspired 3D character',
        'is_premium': False,
        'prompt': (
            "A cute, 3D animated style character portrait. Pixar/Disney style, expressive eyes, vibrant colors, "
            "clean lines, high-end CGI."
        ),
    },
    {
        'id': 'watercolor-dream',
        'name': 'Watercolor Dream',
        'description': 'Dreamy & soft brushstrokes',
        'is_premium': False,
        'prompt': (
            "A beautiful, delicate watercolor painting. Soft brushstrokes, artistic splatters, dreamy atmosphere, "
            "elegant paper texture background."
        ),
    },
]

INSIGHTS_FALLBACK = "Analysis busy."
MILESTONES_FALLBACK = "No insights found."

# 부분 수정 허용 필드 (API 필드명 -> Firestore 필드명)
UPDATABLE_FIELDS = {
    'name': 'name',
    'breed': 'breed',
    'bio': 'bio',
    'temperament': 'temperament',
    'is_public': 'isPublic',
}


def find_avatar_style(style_id: Optional[str]) -> Dict[str, Any]:
    """스타일 ID 로 아바타 스타일을 찾습니다. 알 수 없는 ID 는 첫 번째 스타일로 대체합니다."""
    return next((style for style in AVATAR_STYLES if style['id'] == style_id), AVATAR_STYLES[0])


def build_avatar_prompt(style: Dict[str, Any], pet: Pet) -> str:
    return f"{style['prompt']} Subject: a {pet.breed} {pet.species} named {pet.name}. High resolution, 1:1 aspect ratio."


class PetService:
    """
    반려동물 등록부와 건강 기록 원장.

    나이(년/개월)는 등록 시점에 한 번 계산해 저장하며, 체중/접종 기록은
    입력 순서를 유지하는 추가 전용 배열입니다 (인덱스 기반 삭제만 허용).
    """
    def __init__(self, store: DocumentStore, notification_service: NotificationService,
                 follow_service: FollowService, content_service: ContentService,
                 storage_service: StorageService, qr_service: QRService):
        self.store = store
        self.notification_service = notification_service
        self.follow_service = follow_service
        self.content_service = content_service
        self.storage_service = storage_service
        self.qr_service = qr_service

    # --- 조회 ---
    def get_pet_by_id(self, pet_id: str) -> Optional[Pet]:
        """ID 로 반려동물을 조회합니다. QR 코드 검증의 기준이 됩니다."""
        doc = self.store.get(PETS, pet_id)
        return Pet.from_dict(doc) if doc else None

    def _get_owned_pet(self, pet_id: str, user_id: str) -> Optional[Pet]:
        pet = self.get_pet_by_id(pet_id)
        if pet is None:
            return None
        if pet.owner_id != user_id:
            raise PermissionError("해당 반려동물에 대한 권한이 없습니다.")
        return pet

    def list_pets_by_owner(self, owner_id: str) -> List[Pet]:
        docs = self.store.query(PETS, filters=[('ownerId', '==', owner_id)])
        return [Pet.from_dict(doc) for doc in docs]

    def list_visible_pets(self, owner_id: str, viewer_id: str) -> Tuple[List[Pet], bool]:
        """
        viewer 가 볼 수 있는 owner 의 반려동물 목록.
        본인 또는 수락된 팔로워가 아니면 빈 목록과 False 를 반환합니다.
        """
        if not self.follow_service.can_see_private(viewer_id, owner_id):
            return [], False
        return self.list_pets_by_owner(owner_id), True

    def get_visible_pet(self, pet_id: str, viewer_id: Optional[str]) -> Optional[Pet]:
        """비공개 프로필은 본인 또는 수락된 팔로워만 조회할 수 있습니다. 없으면 None."""
        pet = self.get_pet_by_id(pet_id)
        if pet is None:
            return None
        if not pet.is_public and not self.follow_service.can_see_private(viewer_id, pet.owner_id):
            raise PermissionError("비공개 프로필입니다.")
        return pet

    # --- 등록/수정/삭제 ---
    def register_pet(self, owner_id: str, owner_name: str, data: Dict[str, Any]) -> Pet:
        """
        반려동물을 등록합니다. 모든 검증은 쓰기 전에 수행되며, 실패 시 아무것도 저장하지 않습니다.

        :param data: name, species, breed, birthday, bio 를 담은 딕셔너리
        """
        name = (data.get('name') or '').strip()
        if not name:
            raise MissingFieldError('name')

        raw_birthday = data.get('birthday')
        if raw_birthday is None or raw_birthday == '':
            raise MissingFieldError('birthday')
        try:
            birthday = DateTimeUtils.validate_date_field(raw_birthday, 'birthday')
        except ValueError as e:
            raise InvalidBirthday("생일 형식이 올바르지 않습니다.") from e

        today = DateTimeUtils.today()
        if birthday > today:
            raise InvalidBirthday()

        years, months = DateTimeUtils.calendar_age(birthday, today)
        if years * 12 + months > BIOLOGICAL_AGE_LIMIT_YEARS * 12:
            raise BiologicalLimitExceeded(
                f"{BIOLOGICAL_AGE_LIMIT_YEARS}년을 초과하는 나이는 등록할 수 없습니다."
            )

        pet = Pet(
            id=new_pet_id(),
            owner_id=owner_id,
            name=name,
            species=(data.get('species') or '').strip(),
            breed=(data.get('breed') or '').strip(),
            birthday=birthday,
            bio=data.get('bio') or '',
            owner_name=owner_name or '',
            age_years=years,
            age_months=months
        )
        self.store.set(PETS, pet.id, pet.to_dict())
        logging.info(f"반려동물 등록 완료 (pet_id: {pet.id}, owner: {owner_id})")

        self.notification_service.create_notification(
            owner_id, "Pet Registered", f"{pet.name} has been added to your registry.",
            NotificationType.SUCCESS, related_id=pet.id
        )
        return pet

    def update_pet(self, pet_id: str, user_id: str, updates: Dict[str, Any]) -> Optional[Pet]:
        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None

        payload = {}
        for key, firestore_key in UPDATABLE_FIELDS.items():
            if key in updates:
                payload[firestore_key] = updates[key]
        if 'name' in payload:
            payload['name'] = (payload['name'] or '').strip()
            if not payload['name']:
                raise MissingFieldError('name')
            payload['lowercaseName'] = payload['name'].lower()

        if payload:
            self.store.update(PETS, pet_id, payload)
        return self.get_pet_by_id(pet_id)

    def purge_pet(self, pet_id: str, user_id: str) -> bool:
        """반려동물 문서만 삭제합니다. 게시글 등 이 ID 를 참조하는 다른 문서는 그대로 남습니다."""
        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return False
        self.store.delete(PETS, pet_id)
        logging.info(f"반려동물 삭제 완료 (pet_id: {pet_id})")
        return True

    # --- 건강 기록 ---
    def add_weight(self, pet_id: str, user_id: str, weight: Any, record_date: Optional[str] = None) -> Optional[Pet]:
        try:
            weight_value = float(weight)
        except (TypeError, ValueError) as e:
            raise InvalidWeight() from e
        if isinstance(weight, bool) or not math.isfinite(weight_value):
            raise InvalidWeight()

        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None
        pet.weight_history.append(WeightRecord(date=self._record_date(record_date), weight=weight_value))
        return self._save_records(pet, HealthRecordKind.WEIGHT)

    def add_vaccination(self, pet_id: str, user_id: str, name: Optional[str], record_date: Optional[str] = None,
                        next_due_date: Optional[str] = None) -> Optional[Pet]:
        if not name or not name.strip():
            raise InvalidVaccineName()

        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None
        pet.vaccinations.append(VaccinationRecord(
            name=name.strip(),
            date=self._record_date(record_date),
            next_due_date=next_due_date or ''
        ))
        return self._save_records(pet, HealthRecordKind.VACCINATION)

    def delete_record(self, pet_id: str, user_id: str, kind: str, index: int) -> Optional[Pet]:
        """종류별 기록 배열에서 index 위치의 기록을 제거합니다. 나머지 기록의 순서는 유지됩니다."""
        try:
            record_kind = HealthRecordKind(kind)
        except ValueError as e:
            raise InvalidRecordKind() from e

        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None
        records = pet.weight_history if record_kind is HealthRecordKind.WEIGHT else pet.vaccinations
        if not 0 <= index < len(records):
            raise IndexOutOfRange()
        del records[index]
        self.store.update(PETS, pet.id, {record_kind.field_name: pet.records_of(record_kind)})
        return pet

    @staticmethod
    def _record_date(record_date: Optional[str]) -> str:
        if not record_date:
            return DateTimeUtils.to_date_string(DateTimeUtils.today())
        try:
            return DateTimeUtils.to_date_string(DateTimeUtils.validate_date_field(record_date, 'date'))
        except ValueError as e:
            raise MissingFieldError('date', "기록 날짜 형식이 올바르지 않습니다.") from e

    def _save_records(self, pet: Pet, kind: HealthRecordKind) -> Pet:
        # 배열 전체를 다시 쓰므로 동시 수정 시 마지막 쓰기가 남습니다.
        self.store.update(PETS, pet.id, {kind.field_name: pet.records_of(kind)})
        self.notification_service.create_notification(
            pet.owner_id, "Success", "Record logged.", NotificationType.SUCCESS, related_id=pet.id
        )
        return pet

    # --- 아바타 ---
    def generate_avatar(self, pet_id: str, user_id: str, style_id: Optional[str] = None,
                        reference_path: Optional[str] = None) -> Optional[Pet]:
        """
        스타일 프롬프트와 반려동물 정보로 아바타를 생성해 avatarUrl 을 교체합니다.
        reference_path 가 주어지면 업로드된 사진을 참고 이미지로 사용합니다.
        """
        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None

        style = find_avatar_style(style_id)
        reference_image = self.storage_service.download_bytes(reference_path) if reference_path else None
        image_bytes = self.content_service.generate_image(build_avatar_prompt(style, pet), reference_image)
        avatar_url = self.storage_service.upload_bytes(f"pet_avatars/{pet.id}/{uuid.uuid4()}.png", image_bytes)

        self.store.update(PETS, pet.id, {'avatarUrl': avatar_url, 'avatarStylePreference': style['id']})
        pet.avatar_url = avatar_url
        pet.avatar_style_preference = style['id']
        self.notification_service.create_notification(
            pet.owner_id, "Portrait Studio", f"{pet.name}'s new avatar is ready!",
            NotificationType.SUCCESS, related_id=pet.id
        )
        return pet

    # --- QR ---
    def qr_code(self, pet_id: str, user_id: str) -> Optional[bytes]:
        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None
        return self.qr_service.encode(pet.id)

    def verify_qr(self, image_bytes: bytes) -> Optional[Pet]:
        """QR 이미지를 판독해 등록된 반려동물을 찾습니다. URL 형태의 페이로드는 마지막 경로 조각을 ID 로 사용합니다."""
        payload = self.qr_service.decode(image_bytes)
        if not payload:
            return None
        pet_id = payload.strip().rstrip('/').split('/')[-1]
        return self.get_pet_by_id(pet_id)

    # --- 성장 단계 / AI ---
    @staticmethod
    def milestone(pet: Pet) -> AgeMilestone:
        return pet.milestone()

    def health_insights(self, pet_id: str, user_id: str) -> Optional[str]:
        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None
        prompt = (
            f"Analyze this pet: {pet.name} ({pet.species}, {pet.breed}). "
            f"Age: {pet.age_years}y {pet.age_months}m. "
            f"Weight Logs: {json.dumps([asdict(r) for r in pet.weight_history])}. "
            f"Vaccination Logs: {json.dumps([r.to_dict() for r in pet.vaccinations])}. "
            f"Provide 3 smart health points, under 80 words."
        )
        return self.content_service.generate_text_or_fallback(prompt, INSIGHTS_FALLBACK)

    def age_milestones(self, pet_id: str, user_id: str) -> Optional[str]:
        pet = self._get_owned_pet(pet_id, user_id)
        if pet is None:
            return None
        prompt = (
            f"Based on biological data, provide concise expert developmental milestones and behavioral care advice "
            f"for a {pet.species} ({pet.breed}) that is exactly {pet.age_years} years and {pet.age_months} months old. "
            f"Focus on physical health indicators and training goals for this life phase. "
            f"Limit to 4 bullet points, under 100 words."
        )
        return self.content_service.generate_text_or_fallback(prompt, MILESTONES_FALLBACK)
