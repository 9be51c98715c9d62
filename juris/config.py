import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./juris.db")

# Supabase Auth Configuration
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")

# Frontend base URL for payment redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
# Public URL of this API, used to build provider callback URLs
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "JURIS <noreply@juris.app>")
EMAIL_ENABLED = os.getenv("EMAIL_ENABLED", "true").lower() == "true"

# Twilio SMS Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")

# WhatsApp Business API Configuration
WHATSAPP_API_URL = os.getenv("WHATSAPP_API_URL", "https://graph.facebook.com/v18.0/messages")
WHATSAPP_API_KEY = os.getenv("WHATSAPP_API_KEY")
WHATSAPP_INSTANCE_ID = os.getenv("WHATSAPP_INSTANCE_ID")
WHATSAPP_ENABLED = os.getenv("WHATSAPP_ENABLED", "false").lower() == "true"

# Mobile money gateways - demo mode unless explicitly enabled
ENABLE_REAL_PAYMENTS = os.getenv("ENABLE_REAL_PAYMENTS", "false").lower() == "true"
PAYMENT_CALLBACK_SECRET = os.getenv("PAYMENT_CALLBACK_SECRET")

ORANGE_MONEY_API_KEY = os.getenv("ORANGE_MONEY_API_KEY")
ORANGE_MONEY_API_SECRET = os.getenv("ORANGE_MONEY_API_SECRET")
ORANGE_MONEY_MERCHANT_ID = os.getenv("ORANGE_MONEY_MERCHANT_ID")

MOOV_PUBLIC_KEY = os.getenv("MOOV_PUBLIC_KEY")
MOOV_SECRET_KEY = os.getenv("MOOV_SECRET_KEY")
MOOV_ACCOUNT_ID = os.getenv("MOOV_ACCOUNT_ID")

MTN_MONEY_PRIMARY_KEY = os.getenv("MTN_MONEY_PRIMARY_KEY")
MTN_MONEY_SECONDARY_KEY = os.getenv("MTN_MONEY_SECONDARY_KEY")
MTN_TARGET_ENVIRONMENT = os.getenv("MTN_TARGET_ENVIRONMENT", "sandbox")

WAVE_API_KEY = os.getenv("WAVE_API_KEY")
WAVE_API_SECRET = os.getenv("WAVE_API_SECRET")
WAVE_MERCHANT_ID = os.getenv("WAVE_MERCHANT_ID")

# Subscription pricing (FCFA per month)
BASIC_PLAN_PRICE = int(os.getenv("BASIC_PLAN_PRICE", "15000"))
PREMIUM_PLAN_PRICE = int(os.getenv("PREMIUM_PLAN_PRICE", "35000"))
ENTERPRISE_PLAN_PRICE = int(os.getenv("ENTERPRISE_PLAN_PRICE", "75000"))
SUBSCRIPTION_GRACE_PERIOD_DAYS = int(os.getenv("SUBSCRIPTION_GRACE_PERIOD_DAYS", "3"))

# Cloudflare R2 Configuration (document storage)
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "juris-documents")
