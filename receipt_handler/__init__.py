import azure.functions as func
import json
import logging

from werkzeug.http import parse_options_header
from werkzeug.sansio.multipart import Data, Epilogue, Field, File, MultipartDecoder, NeedData

from .config import get_settings
from .errors import OcrServiceError, StorageError
from .extraction import classify_expense, extract_costs
from .imaging import correct_orientation, encode_jpeg, normalize_image
from .ocr import OcrClient
from .storage import ReceiptBlobStore

blueprint = func.Blueprint()

PROCESS_FAILED_MESSAGE = "Could not process receipt."
SAVE_FAILED_MESSAGE = "Could not save receipt."
NO_UPLOAD_MESSAGE = "No receipt image uploaded."


def error_response(message, status_code=500):
    return func.HttpResponse(
        json.dumps({"Message": message}),
        status_code=status_code,
        mimetype="application/json",
    )


def read_first_part(req: func.HttpRequest):
    """
    Returns the bytes of the first part of a multipart body, whether it is a
    file or a plain form field. None when the body is not multipart, has no
    parts or cannot be parsed.
    """
    mimetype, options = parse_options_header(req.headers.get("Content-Type", ""))
    boundary = options.get("boundary")
    if not mimetype.startswith("multipart/") or not boundary:
        return None

    decoder = MultipartDecoder(boundary.encode("latin-1"))
    decoder.receive_data(req.get_body())
    decoder.receive_data(None)

    chunks = []
    in_first_part = False
    try:
        while True:
            event = decoder.next_event()
            if isinstance(event, (Field, File)):
                if in_first_part:
                    break
                in_first_part = True
            elif isinstance(event, Data):
                chunks.append(event.data)
                if not event.more_data:
                    break
            elif isinstance(event, (Epilogue, NeedData)):
                break
    except ValueError as e:
        logging.warning(f"Could not parse multipart body: {e}")
        return None

    if not in_first_part:
        return None
    return b"".join(chunks)


def process_receipt(contents, ocr_client, store) -> func.HttpResponse:
    """
    Runs one receipt through resize, OCR, orientation fix, upload and
    extraction. DecodeError from a malformed image is not caught here.
    """
    contents, image = normalize_image(contents)
    try:
        # --- 1. OCR ---
        try:
            ocr_result = ocr_client.analyze(contents)
        except OcrServiceError as e:
            logging.error(f"OCR failed: {e}")
            return error_response(PROCESS_FAILED_MESSAGE)

        # --- 2. Orientation ---
        orientation = ocr_result.orientation
        if orientation is not None and orientation != "Up":
            logging.info(f"Receipt reported as '{orientation}', correcting orientation.")
            rotated = correct_orientation(image, orientation)
            try:
                # The stored image keeps the uploaded orientation.
                oriented_bytes = encode_jpeg(rotated)
                logging.info(f"Re-encoded corrected image ({len(oriented_bytes)} bytes).")
            finally:
                if rotated is not image:
                    rotated.close()
    finally:
        image.close()

    # --- 3. Store image ---
    try:
        url = store.upload(contents)
    except StorageError as e:
        logging.error(f"Saving receipt image failed: {e}")
        return error_response(SAVE_FAILED_MESSAGE)

    # --- 4. Costs and expense type ---
    costs = extract_costs(ocr_result.raw)
    expense_type = classify_expense(ocr_result.raw)
    logging.info(f"Extracted {len(costs)} cost(s). Expense type: '{expense_type}'.")

    return func.HttpResponse(
        json.dumps({"costs": costs, "url": url, "expenseType": expense_type}),
        status_code=200,
        mimetype="application/json",
    )


def handle_receipt_request(req: func.HttpRequest, ocr_client=None, store=None) -> func.HttpResponse:
    contents = read_first_part(req)
    if not contents:
        logging.warning("Request did not contain an uploaded file.")
        return error_response(NO_UPLOAD_MESSAGE, status_code=400)

    settings = get_settings()
    if ocr_client is None:
        ocr_client = OcrClient(settings)
    if store is None:
        store = ReceiptBlobStore(settings)

    logging.info(f"Received receipt upload of {len(contents)} bytes.")
    return process_receipt(contents, ocr_client, store)


@blueprint.function_name(name="ProcessReceipt")
@blueprint.route(route="ProcessReceipt", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def process_receipt_trigger(req: func.HttpRequest) -> func.HttpResponse:
    logging.info("--- ProcessReceipt STARTED ---")
    try:
        return handle_receipt_request(req)
    finally:
        logging.info("--- ProcessReceipt FINISHED ---")
