"""
Error codes and user-facing error payloads.
"""
from typing import Dict, Optional


class ErrorCodes:
    FILE_MISSING = "FILE_MISSING"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    FILE_EMPTY = "FILE_EMPTY"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    PARSE_ERROR = "PARSE_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.FILE_MISSING: {
        "message": "Please upload a file",
        "detail": "The request did not contain a file to analyze.",
        "suggestion": "Attach a CSV or Excel file in the 'file' form field."
    },
    ErrorCodes.FILE_TOO_LARGE: {
        "message": "The file is too large",
        "detail": "The uploaded file exceeds the configured size limit.",
        "suggestion": "Split the file into smaller parts or export only the columns you need."
    },
    ErrorCodes.FILE_EMPTY: {
        "message": "The file is empty",
        "detail": "No data was found in the uploaded file.",
        "suggestion": "Check that the file was saved with its rows and try again."
    },
    ErrorCodes.FILE_NOT_FOUND: {
        "message": "File not found",
        "detail": "No uploaded file exists with that name.",
        "suggestion": "Refresh the upload history to see the files that are available."
    },
    ErrorCodes.INVALID_FILE_TYPE: {
        "message": "Unsupported file format",
        "detail": "Only CSV and Excel files (.csv, .xlsx, .xls) can be analyzed.",
        "suggestion": "Export the data as CSV or Excel and upload it again."
    },
    ErrorCodes.INVALID_PAYLOAD: {
        "message": "Invalid analysis payload",
        "detail": "The request body must contain a 'data' array of row objects.",
        "suggestion": "Send JSON like {\"data\": [{\"column\": \"value\"}], \"options\": {}}."
    },
    ErrorCodes.PARSE_ERROR: {
        "message": "The file could not be read",
        "detail": "The file content does not match its format.",
        "suggestion": "Re-save the file as CSV (UTF-8) or XLSX with a header row and try again."
    },
    ErrorCodes.PROCESSING_ERROR: {
        "message": "Something went wrong while analyzing the data",
        "detail": "The data could not be analyzed.",
        "suggestion": "Check that the first row holds column headers and the data is organized in columns."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Too many requests",
        "detail": "Uploads are rate limited to keep the service responsive.",
        "suggestion": "Wait a minute and try again."
    },
    ErrorCodes.TIMEOUT: {
        "message": "The request took too long",
        "detail": "Processing did not finish within the configured timeout.",
        "suggestion": "Try a smaller sample of the data."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "An unexpected error occurred",
        "detail": "The server hit an error it did not expect.",
        "suggestion": "Try again in a moment. If it keeps happening, try a different file."
    }
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Build the error payload for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional text appended to the detail

    Returns:
        Dictionary with code, message, detail and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "status": "error",
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response


class AppError(Exception):
    """
    Error with a user-facing code, rendered by the app's exception handler.

    Args:
        error_code: One of the ErrorCodes constants
        status_code: HTTP status to respond with
        additional_detail: Optional text appended to the detail
    """

    def __init__(self, error_code: str, status_code: int = 400, additional_detail: Optional[str] = None):
        super().__init__(additional_detail or error_code)
        self.error_code = error_code
        self.status_code = status_code
        self.additional_detail = additional_detail

    def to_response(self, correlation_id: str = "unknown") -> Dict[str, str]:
        error_info = get_error_response(self.error_code, self.additional_detail)
        error_info["correlation_id"] = correlation_id
        return error_info
