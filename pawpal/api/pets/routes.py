# pawpal/api/pets/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app, Response
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import verified_user_required
from .schemas import (
    PetRegistrationSchema,
    PetUpdateSchema,
    PetProfileResponseSchema,
    WeightRecordRequestSchema,
    VaccinationRecordRequestSchema,
    AvatarRequestSchema,
    QRVerifyRequestSchema,
    AvatarStyleSchema
)
from .services import AVATAR_STYLES

pets_bp = Blueprint('pets_bp', __name__)

PET_NOT_FOUND = {"error_code": "PET_NOT_FOUND", "message": "반려동물을 찾을 수 없습니다."}


@pets_bp.route('/', methods=['POST'])
@verified_user_required
def register_pet():
    """반려동물 등록 API."""
    user_id = get_jwt_identity()
    pet_service = current_app.services['pets']
    auth_service = current_app.services['auth']
    try:
        validated_data = PetRegistrationSchema().load(request.get_json() or {})
        owner = auth_service.get_user(user_id)
        new_pet = pet_service.register_pet(user_id, owner.display_name if owner else '', validated_data)
        return jsonify(PetProfileResponseSchema().dump(new_pet)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Pet registration API error: {e}", exc_info=True)
        return jsonify({"error_code": "PET_REGISTRATION_FAILED", "message": "반려동물 등록 중 오류가 발생했습니다."}), 500


@pets_bp.route('/avatar-styles', methods=['GET'])
def list_avatar_styles():
    """아바타 스타일 목록."""
    return jsonify(AvatarStyleSchema(many=True).dump(AVATAR_STYLES)), 200


@pets_bp.route('/owner/<string:owner_id>', methods=['GET'])
@verified_user_required
def list_owner_pets(owner_id: str):
    """소유자의 반려동물 목록. 본인 또는 수락된 팔로워에게만 공개됩니다."""
    pet_service = current_app.services['pets']
    try:
        pets, visible = pet_service.list_visible_pets(owner_id, get_jwt_identity())
        return jsonify({
            "pets": PetProfileResponseSchema(many=True).dump(pets),
            "can_see_private": visible
        }), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"List pets API error (owner_id: {owner_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "반려동물 목록 조회 중 오류가 발생했습니다."}), 500


@pets_bp.route('/verify-qr', methods=['POST'])
@verified_user_required
def verify_qr():
    """업로드된 QR 이미지를 판독해 등록된 반려동물인지 확인합니다."""
    pet_service = current_app.services['pets']
    storage_service = current_app.services['storage']
    try:
        data = QRVerifyRequestSchema().load(request.get_json() or {})
        pet = pet_service.verify_qr(storage_service.download_bytes(data['file_path']))
        if not pet:
            return jsonify({"verified": False, "error_code": "QR_NOT_RECOGNIZED",
                            "message": "등록된 반려동물의 QR 코드가 아닙니다."}), 404
        return jsonify({"verified": True, "pet": PetProfileResponseSchema().dump(pet)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "FILE_NOT_FOUND", "message": str(e)}), 404
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"QR verification API error: {e}", exc_info=True)
        return jsonify({"error_code": "QR_VERIFY_FAILED", "message": "QR 검증 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>', methods=['GET'])
@verified_user_required
def get_pet_profile(pet_id: str):
    """반려동물 프로필 조회. 비공개 프로필은 본인 또는 수락된 팔로워만 볼 수 있습니다."""
    pet_service = current_app.services['pets']
    try:
        pet = pet_service.get_visible_pet(pet_id, get_jwt_identity())
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify(PetProfileResponseSchema().dump(pet)), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Get pet profile API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>', methods=['PATCH'])
@verified_user_required
def update_pet_profile(pet_id: str):
    """[소유자 전용] 반려동물 프로필 부분 수정."""
    pet_service = current_app.services['pets']
    try:
        update_data = PetUpdateSchema().load(request.get_json() or {})
        pet = pet_service.update_pet(pet_id, get_jwt_identity(), update_data)
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify(PetProfileResponseSchema().dump(pet)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Update pet profile API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "프로필 수정 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>', methods=['DELETE'])
@verified_user_required
def purge_pet(pet_id: str):
    """[소유자 전용] 반려동물 삭제. 연관 문서는 함께 삭제되지 않습니다."""
    pet_service = current_app.services['pets']
    try:
        if not pet_service.purge_pet(pet_id, get_jwt_identity()):
            return jsonify(PET_NOT_FOUND), 404
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Purge pet API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "반려동물 삭제 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/weights', methods=['POST'])
@verified_user_required
def add_weight(pet_id: str):
    """[소유자 전용] 체중 기록 추가."""
    pet_service = current_app.services['pets']
    try:
        data = WeightRecordRequestSchema().load(request.get_json() or {})
        pet = pet_service.add_weight(pet_id, get_jwt_identity(), data['weight'], data['date'])
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify(PetProfileResponseSchema().dump(pet)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Add weight API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "RECORD_FAILED", "message": "기록 저장 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/vaccinations', methods=['POST'])
@verified_user_required
def add_vaccination(pet_id: str):
    """[소유자 전용] 예방접종 기록 추가."""
    pet_service = current_app.services['pets']
    try:
        data = VaccinationRecordRequestSchema().load(request.get_json() or {})
        pet = pet_service.add_vaccination(pet_id, get_jwt_identity(), data['name'], data['date'], data['next_due_date'])
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify(PetProfileResponseSchema().dump(pet)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Add vaccination API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "RECORD_FAILED", "message": "기록 저장 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/records/<string:kind>/<int(signed=True):index>', methods=['DELETE'])
@verified_user_required
def delete_record(pet_id: str, kind: str, index: int):
    """[소유자 전용] 종류(weight/vaccination)별 index 위치의 기록 삭제."""
    pet_service = current_app.services['pets']
    try:
        pet = pet_service.delete_record(pet_id, get_jwt_identity(), kind, index)
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify(PetProfileResponseSchema().dump(pet)), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Delete record API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DELETE_FAILED", "message": "기록 삭제 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/avatar', methods=['POST'])
@verified_user_required
def generate_avatar(pet_id: str):
    """[소유자 전용] AI 아바타 생성. 알 수 없는 스타일은 기본 스타일로 생성합니다."""
    pet_service = current_app.services['pets']
    try:
        data = AvatarRequestSchema().load(request.get_json(silent=True) or {})
        pet = pet_service.generate_avatar(pet_id, get_jwt_identity(), data['style_id'], data['reference_file_path'])
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify(PetProfileResponseSchema().dump(pet)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except FileNotFoundError as e:
        return jsonify({"error_code": "FILE_NOT_FOUND", "message": str(e)}), 404
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Avatar generation API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "AVATAR_GENERATION_FAILED", "message": "Generation failed."}), 500


@pets_bp.route('/<string:pet_id>/qr', methods=['GET'])
@verified_user_required
def get_pet_qr(pet_id: str):
    """[소유자 전용] 반려동물 ID 를 담은 QR 코드 PNG."""
    pet_service = current_app.services['pets']
    try:
        image = pet_service.qr_code(pet_id, get_jwt_identity())
        if image is None:
            return jsonify(PET_NOT_FOUND), 404
        return Response(image, mimetype='image/png')
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"QR generation API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "QR_GENERATION_FAILED", "message": "QR 코드 생성 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/milestone', methods=['GET'])
@verified_user_required
def get_milestone(pet_id: str):
    """등록 시점 나이 기준 성장 단계. 비공개 프로필과 같은 공개 범위를 따릅니다."""
    pet_service = current_app.services['pets']
    try:
        pet = pet_service.get_visible_pet(pet_id, get_jwt_identity())
        if not pet:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify({
            "pet_id": pet.id,
            "total_months": pet.total_months,
            "milestone": pet_service.milestone(pet).value
        }), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Milestone API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "성장 단계 조회 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/insights', methods=['GET'])
@verified_user_required
def get_health_insights(pet_id: str):
    """[소유자 전용] AI 건강 인사이트. AI 실패 시 기본 문구를 반환합니다."""
    pet_service = current_app.services['pets']
    try:
        text = pet_service.health_insights(pet_id, get_jwt_identity())
        if text is None:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify({"pet_id": pet_id, "insights": text}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Insights API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "인사이트 생성 중 오류가 발생했습니다."}), 500


@pets_bp.route('/<string:pet_id>/age-milestones', methods=['GET'])
@verified_user_required
def get_age_milestones(pet_id: str):
    """[소유자 전용] AI 성장 단계 조언. AI 실패 시 기본 문구를 반환합니다."""
    pet_service = current_app.services['pets']
    try:
        text = pet_service.age_milestones(pet_id, get_jwt_identity())
        if text is None:
            return jsonify(PET_NOT_FOUND), 404
        return jsonify({"pet_id": pet_id, "milestones": text}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"Age milestones API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "성장 단계 조언 생성 중 오류가 발생했습니다."}), 500
