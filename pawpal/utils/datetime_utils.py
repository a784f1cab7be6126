# pawpal/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간/날짜 처리를 위한 유틸리티 모듈

- 모든 시간은 UTC timezone-aware datetime 으로 통일
- Firestore 저장/읽기 변환
- 반려동물 나이(달력 월 기준) 계산
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Union, Optional, Any, Tuple
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def today() -> date:
        """오늘 날짜(UTC)를 반환"""
        return datetime.now(timezone.utc).date()

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """
        날짜 문자열을 date 객체로 파싱

        지원 포맷:
        - 2024-01-15
        - 2024/01/15
        - 2024-01-15T10:30:00Z (날짜 부분만 사용)
        """
        try:
            if not date_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")
            return dateutil_parser.parse(date_string).date()
        except Exception as e:
            logger.error(f"날짜 문자열 파싱 실패: {date_string} - {e}")
            raise ValueError(f"잘못된 날짜 형식입니다: {date_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 'Z' 접미사의 ISO 포맷 문자열로 변환"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def to_date_string(d: date) -> str:
        """date 객체를 YYYY-MM-DD 형식 문자열로 변환"""
        return d.strftime('%Y-%m-%d')

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, date) and not isinstance(obj, datetime):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 UTC datetime 으로 변환
        (DatetimeWithNanoseconds 포함, dict/list 재귀)
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return obj.astimezone(timezone.utc)
            elif isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]
            return obj
        except Exception as e:
            logger.error(f"Firestore 읽기 변환 실패: {obj} ({type(obj)}) - {e}")
            # 변환 실패 시 원본 객체 반환 (로그만 남김)
            return obj

    @staticmethod
    def calendar_age(birthdate: Union[date, datetime, str], today: Optional[date] = None) -> Tuple[int, int]:
        """
        생년월일로부터 (년, 개월) 나이를 달력 월 차이로 계산합니다.

        일(day) 단위는 고려하지 않으며, 오늘의 월이 생일의 월보다 작으면
        1년을 빌려 12개월을 더합니다. 미래 생일은 음수 값을 그대로 반환하므로
        호출 측에서 먼저 검증해야 합니다.
        """
        birthdate = DateTimeUtils.validate_date_field(birthdate, "birthdate")
        today = today or DateTimeUtils.today()

        years = today.year - birthdate.year
        months = today.month - birthdate.month
        if months < 0:
            years -= 1
            months += 12
        return years, months

    @staticmethod
    def calculate_age_months(birthdate: Union[date, datetime, str], today: Optional[date] = None) -> int:
        """생년월일로부터 나이를 월 단위로 계산 (음수는 0)"""
        years, months = DateTimeUtils.calendar_age(birthdate, today)
        return max(0, years * 12 + months)

    @staticmethod
    def validate_date_field(value: Any, field_name: str = "date") -> date:
        """
        API 요청에서 받은 date 값을 검증하고 변환

        Raises:
            ValueError: 잘못된 형식이거나 파싱할 수 없는 경우
        """
        if value is None:
            raise ValueError(f"{field_name}은 필수 필드입니다")
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            return DateTimeUtils.parse_date_string(value)
        raise ValueError(f"{field_name}은 문자열 또는 date/datetime 객체여야 합니다")
