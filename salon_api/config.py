
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///local.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    CHECKIN_BASE_URL = os.getenv("CHECKIN_BASE_URL", "http://localhost:3000")
    VISIT_TOKEN_TTL_SECONDS = int(os.getenv("VISIT_TOKEN_TTL_SECONDS", "60"))
    QR_IMAGE_ENDPOINT = os.getenv("QR_IMAGE_ENDPOINT", "https://api.qrserver.com/v1/create-qr-code/")
    QR_IMAGE_SIZE = os.getenv("QR_IMAGE_SIZE", "400x400")

    STAFF_API_TOKEN = os.getenv("STAFF_API_TOKEN")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    STAFF_API_TOKEN = "test-staff-token"
    CHECKIN_BASE_URL = "https://salon.example.com"
    VISIT_TOKEN_TTL_SECONDS = 60
