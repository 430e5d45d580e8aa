from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found")


class BookingNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Booking")


class DriverNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Driver")


class RewardNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Reward")


class VehicleNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Vehicle")


class ServerError(HTTPException):
    def __init__(self, error_detail_message: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error_detail_message)


class ValidationError(HTTPException):
    def __init__(self, error_detail_message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail_message)
