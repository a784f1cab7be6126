# pawpal/api/pets/schemas.py
from marshmallow import Schema, fields, validate


class PetRegistrationSchema(Schema):
    """POST /api/pets/ 반려동물 등록 요청 스키마. 생일/나이 검증은 서비스에서 수행합니다."""
    name = fields.Str(required=True, validate=validate.Length(max=40))
    species = fields.Str(required=True, validate=validate.Length(min=1, max=40))
    breed = fields.Str(load_default='', validate=validate.Length(max=60))
    birthday = fields.Str(required=True)
    bio = fields.Str(load_default='', validate=validate.Length(max=500))


class PetUpdateSchema(Schema):
    """PATCH /api/pets/<pet_id> 정보 수정을 위한 스키마 (부분 업데이트용)."""
    name = fields.Str(validate=validate.Length(min=1, max=40))
    breed = fields.Str(validate=validate.Length(max=60))
    bio = fields.Str(validate=validate.Length(max=500))
    temperament = fields.Str(allow_none=True)
    is_public = fields.Bool()


class WeightRecordRequestSchema(Schema):
    # 숫자 여부는 InvalidWeight 로 응답하도록 서비스에서 검증합니다.
    weight = fields.Raw(required=True)
    date = fields.Str(load_default=None)


class VaccinationRecordRequestSchema(Schema):
    name = fields.Str(required=True)
    date = fields.Str(load_default=None)
    next_due_date = fields.Str(load_default=None)


class AvatarRequestSchema(Schema):
    style_id = fields.Str(load_default=None)
    reference_file_path = fields.Str(load_default=None)


class QRVerifyRequestSchema(Schema):
    file_path = fields.Str(required=True, error_messages={"required": "업로드된 QR 이미지 경로(file_path)는 필수입니다."})


class WeightRecordSchema(Schema):
    date = fields.Str()
    weight = fields.Float()


class VaccinationRecordSchema(Schema):
    name = fields.Str()
    date = fields.Str()
    next_due_date = fields.Str()


class PetProfileResponseSchema(Schema):
    """반려동물 프로필 응답 스키마."""
    id = fields.Str(dump_only=True)
    owner_id = fields.Str(dump_only=True)
    owner_name = fields.Str()
    name = fields.Str()
    species = fields.Str()
    breed = fields.Str()
    birthday = fields.Date()
    bio = fields.Str()
    age_years = fields.Int()
    age_months = fields.Int()
    avatar_url = fields.Str(allow_none=True)
    avatar_style_preference = fields.Str(allow_none=True)
    temperament = fields.Str(allow_none=True)
    is_public = fields.Bool()
    weight_history = fields.List(fields.Nested(WeightRecordSchema))
    vaccinations = fields.List(fields.Nested(VaccinationRecordSchema))
    milestone = fields.Method('get_milestone')

    def get_milestone(self, pet):
        return pet.milestone().value


class AvatarStyleSchema(Schema):
    id = fields.Str()
    name = fields.Str()
    description = fields.Str()
    is_premium = fields.Bool()
