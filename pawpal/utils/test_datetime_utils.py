# pawpal/utils/test_datetime_utils.py
"""
시간/날짜 유틸리티 기능 테스트

사용법: python -m pytest pawpal/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone
from dateutil.relativedelta import relativedelta

from pawpal.utils.datetime_utils import DateTimeUtils


def test_parse_date_string():
    """날짜 문자열 파싱 테스트"""
    test_cases = [
        "2024-01-15",
        "2024/01/15",
        "01-15-2024",
        "2024-01-15T10:30:00Z",
    ]

    for date_string in test_cases:
        d = DateTimeUtils.parse_date_string(date_string)
        assert d == date(2024, 1, 15)


def test_for_firestore():
    """Firestore 변환 테스트"""
    test_data = {
        'birthdate': date(2020, 1, 15),
        'timestamp': datetime(2024, 1, 15, 10, 30),
        'nested': {
            'event_date': date(2023, 12, 25)
        },
        'list_data': [
            {'created_at': datetime(2024, 1, 1)}
        ]
    }

    converted = DateTimeUtils.for_firestore(test_data)

    # date는 datetime으로 변환되어야 함
    assert isinstance(converted['birthdate'], datetime)
    assert isinstance(converted['nested']['event_date'], datetime)
    assert isinstance(converted['list_data'][0]['created_at'], datetime)

    # 모든 datetime은 timezone-aware여야 함
    assert converted['birthdate'].tzinfo == timezone.utc
    assert converted['timestamp'].tzinfo == timezone.utc


def test_to_iso_string_uses_z_suffix():
    dt = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert DateTimeUtils.to_iso_string(dt) == "2024-01-15T10:30:00Z"


def test_validate_date_field():
    """date 필드 검증 테스트"""
    valid_cases = [
        "2024-01-15",
        date(2024, 1, 15),
        datetime(2024, 1, 15, 10, 30)
    ]

    for case in valid_cases:
        result = DateTimeUtils.validate_date_field(case)
        assert result == date(2024, 1, 15)


def test_calendar_age_borrows_a_year():
    """오늘의 월이 생일의 월보다 작으면 1년을 빌려 12개월을 더합니다."""
    assert DateTimeUtils.calendar_age(date(2020, 11, 3), today=date(2024, 2, 20)) == (3, 3)
    assert DateTimeUtils.calendar_age(date(2020, 2, 28), today=date(2024, 2, 1)) == (4, 0)


def test_calendar_age_eighteen_months():
    """18개월 전에 태어난 반려동물은 1년 6개월입니다."""
    today = DateTimeUtils.today()
    birthday = today - relativedelta(months=18)
    assert DateTimeUtils.calendar_age(birthday, today=today) == (1, 6)
    assert DateTimeUtils.calculate_age_months(birthday, today=today) == 18


def test_calculate_age_months_never_negative():
    """미래 생일은 0개월로 계산됩니다."""
    assert DateTimeUtils.calculate_age_months(date(2030, 1, 1), today=date(2024, 1, 1)) == 0


def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_date_string("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_date_string("")

    with pytest.raises(ValueError):
        DateTimeUtils.validate_date_field(None)
