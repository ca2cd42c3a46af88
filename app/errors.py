"""API error kinds. Raised from services and routers; FastAPI renders them as {"detail": ...}."""
from fastapi import HTTPException


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Validation failed"):
        super().__init__(status_code=400, detail=detail)


class AuthError(HTTPException):
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    def __init__(self, entity: str = "Resource"):
        super().__init__(status_code=404, detail=f"{entity} not found")


class InvalidOrExpiredCode(HTTPException):
    # Never says whether the code was absent, expired or wrong
    def __init__(self):
        super().__init__(status_code=400, detail="Invalid or expired OTP")


class DuplicateUser(HTTPException):
    def __init__(self):
        super().__init__(status_code=400, detail="User with this email already exists.")


class NoSignupDataFound(HTTPException):
    def __init__(self):
        super().__init__(status_code=400, detail="No signup data found for this OTP/email.")


class InternalError(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=500, detail=detail)
