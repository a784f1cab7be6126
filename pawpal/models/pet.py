# pawpal/models/pet.py
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict, Any
import logging
import uuid

from pawpal.utils.datetime_utils import DateTimeUtils

# 생성 시점에 허용하는 최대 나이(년). 초과 시 등록을 거부합니다.
BIOLOGICAL_AGE_LIMIT_YEARS = 50
PET_ID_PREFIX = "SSP"


class HealthRecordKind(Enum):
    WEIGHT = "weight"
    VACCINATION = "vaccination"

    @property
    def field_name(self) -> str:
        return 'weightHistory' if self is HealthRecordKind.WEIGHT else 'vaccinations'


class AgeMilestone(Enum):
    """총 개월 수 기준의 성장 단계 구간."""
    EARLY_DEVELOPMENT = "early_development"
    CRITICAL_WINDOW = "critical_4_5_months"
    ADULT_MAINTENANCE = "adult_maintenance"

    @classmethod
    def classify(cls, total_months: int) -> "AgeMilestone":
        if total_months in (4, 5):
            return cls.CRITICAL_WINDOW
        if total_months < 4:
            return cls.EARLY_DEVELOPMENT
        return cls.ADULT_MAINTENANCE


@dataclass
class WeightRecord:
    date: str
    weight: float


@dataclass
class VaccinationRecord:
    name: str
    date: str
    next_due_date: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'date': self.date, 'nextDueDate': self.next_due_date}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VaccinationRecord":
        return cls(name=data.get('name', ''), date=data.get('date', ''), next_due_date=data.get('nextDueDate', ''))


@dataclass
class Pet:
    """
    Firestore 'pets' 컬렉션 문서 구조.

    age_years / age_months 는 등록 시점에 한 번 계산해 저장한 스냅샷이며
    조회 시 다시 계산하지 않습니다. 건강 기록 배열은 입력 순서를 유지합니다.
    """
    id: str
    owner_id: str
    name: str
    species: str
    breed: str
    birthday: date
    bio: str = ''
    owner_name: str = ''
    age_years: int = 0
    age_months: int = 0
    avatar_url: Optional[str] = None
    avatar_style_preference: Optional[str] = None
    temperament: Optional[str] = None
    weight_history: List[WeightRecord] = field(default_factory=list)
    vaccinations: List[VaccinationRecord] = field(default_factory=list)
    is_public: bool = True

    @property
    def lowercase_name(self) -> str:
        return self.name.lower()

    @property
    def total_months(self) -> int:
        return self.age_years * 12 + self.age_months

    def milestone(self) -> AgeMilestone:
        return AgeMilestone.classify(self.total_months)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pet":
        """Firestore 문서(dict)로부터 Pet 인스턴스를 생성합니다."""
        birthday = data.get('birthday')
        try:
            birthday = DateTimeUtils.validate_date_field(birthday, 'birthday')
        except ValueError:
            logging.warning(f"Invalid birthday '{birthday}' for pet {data.get('id')}. Defaulting to today.")
            birthday = DateTimeUtils.today()

        return cls(
            id=data.get('id'),
            owner_id=data.get('ownerId'),
            name=data.get('name', ''),
            species=data.get('species', ''),
            breed=data.get('breed', ''),
            birthday=birthday,
            bio=data.get('bio') or '',
            owner_name=data.get('ownerName') or '',
            # 웹 클라이언트는 나이를 문자열로 저장하기도 하므로 int 로 정규화합니다.
            age_years=int(data.get('ageYears') or 0),
            age_months=int(data.get('ageMonths') or 0),
            avatar_url=data.get('avatarUrl'),
            avatar_style_preference=data.get('avatarStylePreference'),
            temperament=data.get('temperament'),
            weight_history=[
                WeightRecord(date=r.get('date', ''), weight=float(r.get('weight', 0)))
                for r in (data.get('weightHistory') or [])
            ],
            vaccinations=[VaccinationRecord.from_dict(r) for r in (data.get('vaccinations') or [])],
            is_public=bool(data.get('isPublic', True))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 저장용 dict. birthday 는 YYYY-MM-DD 문자열로 저장합니다."""
        return {
            'id': self.id,
            'ownerId': self.owner_id,
            'name': self.name,
            'species': self.species,
            'breed': self.breed,
            'birthday': DateTimeUtils.to_date_string(self.birthday),
            'bio': self.bio,
            'ownerName': self.owner_name,
            'ageYears': self.age_years,
            'ageMonths': self.age_months,
            'avatarUrl': self.avatar_url,
            'avatarStylePreference': self.avatar_style_preference,
            'temperament': self.temperament,
            'weightHistory': [asdict(r) for r in self.weight_history],
            'vaccinations': [r.to_dict() for r in self.vaccinations],
            'isPublic': self.is_public,
            'lowercaseName': self.lowercase_name,
        }

    def records_of(self, kind: HealthRecordKind) -> List[Dict[str, Any]]:
        """종류별 건강 기록을 저장 형식(dict list)으로 반환합니다."""
        return self.to_dict()[kind.field_name]


def new_pet_id(now: Optional[datetime] = None) -> str:
    """'SSP-<epoch ms>-<suffix>' 형식의 시간 기반 식별자. QR 페이로드로도 사용됩니다."""
    now = now or DateTimeUtils.now()
    return f"{PET_ID_PREFIX}-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:6]}"
