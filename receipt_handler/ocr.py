import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .errors import OcrServiceError

# Let the service detect the language and the text orientation.
OCR_PARAMS = {"language": "unk", "detectOrientation": "true"}


@dataclass
class OcrResult:
    raw: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def orientation(self) -> Optional[str]:
        return self.payload.get("orientation")

    @property
    def language(self) -> Optional[str]:
        return self.payload.get("language")

    @property
    def text_angle(self) -> Optional[float]:
        return self.payload.get("textAngle")

    def lines(self) -> List[str]:
        """Flattens regions/lines/words into one string per recognized line."""
        flattened = []
        for region in self.payload.get("regions") or []:
            for line in region.get("lines") or []:
                words = [word.get("text", "") for word in line.get("words") or []]
                flattened.append(" ".join(words))
        return flattened


def parse_ocr_response(body: str) -> OcrResult:
    if not body or not body.strip():
        raise OcrServiceError("OCR service returned an empty response.")
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise OcrServiceError(f"OCR service returned invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise OcrServiceError("OCR service returned JSON that is not an object.")
    return OcrResult(raw=body, payload=payload)


class OcrClient:
    """Posts receipt images to the Computer Vision OCR endpoint."""

    def __init__(self, settings):
        self.endpoint = settings.ocr_endpoint
        self.subscription_key = settings.ocr_subscription_key
        self.timeout = settings.ocr_timeout

    def analyze(self, image_bytes: bytes) -> OcrResult:
        if not self.subscription_key:
            logging.error("Missing OCR subscription key (OCR_SUBSCRIPTION_KEY).")

        headers = {
            "Ocp-Apim-Subscription-Key": self.subscription_key,
            "Content-Type": "application/octet-stream",
        }
        try:
            response = requests.post(
                self.endpoint,
                params=OCR_PARAMS,
                headers=headers,
                data=image_bytes,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise OcrServiceError(f"OCR request failed: {e}") from e

        if not response.ok:
            raise OcrServiceError(f"OCR service responded with HTTP {response.status_code}: {response.text[:200]}")

        result = parse_ocr_response(response.text)
        logging.info(
            f"OCR finished. Orientation: {result.orientation}. Language: {result.language}. "
            f"Text angle: {result.text_angle}. "
            f"Lines recognized: {len(result.lines())}"
        )
        return result
