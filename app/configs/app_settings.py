from pydantic_settings import BaseSettings
from typing import Optional

# pydantic_settings is its own package since Pydantic v2.
# BaseSettings pulls values from the system environment first, then the .env file, then the defaults below.


class Settings(BaseSettings):
    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # Clerk JWT settings (admin identity)
    CLERK_JWKS_URL: str

    # API Settings
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # dashboard frontend origin
    CLIENT_DOMAIN: str = "http://localhost:5173"

    # tables
    BOOKINGS_TABLE: str = "BOOKINGS"
    BOOKINGS_ORDER_FIELD: str = "bookingDateTime"
    BOOKING_CHATS_TABLE: str = "booking_chats"
    DRIVERS_TABLE: str = "drivers"
    DRIVER_REQUESTS_TABLE: str = "driverRequest"
    VEHICLES_TABLE: str = "customer_cars"
    CUSTOMERS_TABLE: str = "customer"
    REWARDS_TABLE: str = "rewards"

    # IANA zone name used for "today" and the 7 day revenue window.
    # None means the server's local zone.
    DASHBOARD_TIMEZONE: Optional[str] = None

    class Config:
        # resolved relative to the working directory of the python process.
        # in production there is no .env file and only the environment is read.
        env_file = ".env"
        case_sensitive = True


# module level instance, built once per process and shared through the import cache
settings = Settings()
