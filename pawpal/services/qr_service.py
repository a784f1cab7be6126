# pawpal/services/qr_service.py
import logging
from typing import Optional

import cv2
import numpy as np

# 모듈(셀) 하나를 몇 픽셀로 키울지, 그리고 흰 여백(quiet zone) 두께
QR_SCALE = 10
QR_BORDER = 40


class QRService:
    """
    반려동물 ID 를 담은 QR 코드 이미지의 생성과 판독.
    페이로드는 pet id 문자열이며, 판독 결과는 registry 조회로 검증합니다.
    """

    def encode(self, payload: str) -> bytes:
        """payload 를 담은 PNG 이미지 바이트를 반환합니다."""
        if not payload:
            raise ValueError("QR 페이로드가 비어 있습니다.")
        encoder = cv2.QRCodeEncoder.create()
        matrix = encoder.encode(payload)
        image = cv2.resize(matrix, None, fx=QR_SCALE, fy=QR_SCALE, interpolation=cv2.INTER_NEAREST)
        image = cv2.copyMakeBorder(image, QR_BORDER, QR_BORDER, QR_BORDER, QR_BORDER,
                                   cv2.BORDER_CONSTANT, value=255)
        success, buffer = cv2.imencode('.png', image)
        if not success:
            raise RuntimeError("QR 이미지 인코딩에 실패했습니다.")
        return buffer.tobytes()

    def decode(self, image_bytes: bytes) -> Optional[str]:
        """이미지에서 QR 페이로드를 읽습니다. 판독할 수 없으면 None."""
        if not image_bytes:
            return None
        image = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_GRAYSCALE)
        if image is None:
            logging.warning("QR 판독 실패: 이미지 디코딩 불가")
            return None
        payload, points, _ = cv2.QRCodeDetector().detectAndDecode(image)
        if points is None or not payload:
            return None
        return payload
