import os
from dotenv import load_dotenv

load_dotenv()


def _principal_list(raw):
    return [p.strip() for p in (raw or '').split(',') if p.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or (
        'dev-secret-key-change-in-production'
    )
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or (
        'sqlite:///bargen.db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_FILE = os.environ.get('LOG_FILE', 'bargen.log')

    # Content-addressed photo storage.
    BLOB_FOLDER = os.environ.get('BLOB_FOLDER') or os.path.abspath(
        os.path.join(os.path.dirname(__file__), '..', 'blobs'))
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024

    # Principals promoted to admin the first time they are seen.
    ADMIN_PRINCIPALS = _principal_list(os.environ.get('ADMIN_PRINCIPALS'))

    # Polling reads refresh last_seen_at at most this often.
    LAST_SEEN_INTERVAL_SECONDS = int(
        os.environ.get('LAST_SEEN_INTERVAL_SECONDS', '300'))

    # Minor currency units (USD cents) per kilometre.
    DELIVERY_RATE_PER_KM = int(
        os.environ.get('DELIVERY_RATE_PER_KM', '100000'))

    # Display only; never applied to stored amounts.
    USD_TO_INR_RATE = float(os.environ.get('USD_TO_INR_RATE', '91.8'))

    # Deal protection plans offered at checkout.
    INSURANCE_OPTIONS = [
        {
            'name': 'Basic Protection',
            'details': 'Covers damage on arrival and wrong item delivered',
            'premium': 4900,
            'coverage_amount': 50000,
        },
        {
            'name': 'Standard Protection',
            'details': 'Basic cover plus seller no-show and misdescription',
            'premium': 9900,
            'coverage_amount': 200000,
        },
        {
            'name': 'Premium Protection',
            'details': 'Full purchase cover including transit loss',
            'premium': 19900,
            'coverage_amount': 1000000,
        },
    ]

    # Client-side settings
    RPC_TIMEOUT_SECONDS = float(os.environ.get('RPC_TIMEOUT_SECONDS', '10'))
    CHAT_POLL_SECONDS = 5.0
    NOTIFICATION_POLL_SECONDS = 10.0
    BARGAIN_POLL_SECONDS = 10.0


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_FILE = os.environ.get('TEST_LOG_FILE', 'bargen-test.log')
    ADMIN_PRINCIPALS = ['admin-principal']
