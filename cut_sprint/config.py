import os
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return float(raw)


def _env_int(name: str, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return int(raw)


DB_USER = os.getenv("DB_USER", "app")
DB_PASS = os.getenv("DB_PASS", "apppw")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_NAME = os.getenv("DB_NAME", "cutsprint")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4",
)

FRONT_ORIGINS = os.getenv("FRONT_ORIGINS", "*")

# LLM endpoint (OpenAI-compatible chat completions)
LLM_API_URL = os.getenv("LLM_API_URL", "https://openrouter.ai/api/v1/chat/completions")
LLM_API_KEY = os.getenv("LLM_API_KEY") or os.getenv("OPENROUTER_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "openai/gpt-4o-mini")
LLM_TIMEOUT_SECONDS = _env_float("LLM_TIMEOUT_SECONDS", 20.0)
LLM_TEMPERATURE = 0.1
LLM_MAX_TOKENS = 500

# Nutrition constants. The source used 2.2 g/kg in the calculator and 2.0 g/kg
# during onboarding; "other" gender shares the female BMR offset.
PROTEIN_G_PER_KG = _env_float("PROTEIN_G_PER_KG", 2.2)
MALE_BMR_OFFSET = 5
NON_MALE_BMR_OFFSET = _env_float("NON_MALE_BMR_OFFSET", -161)
KCAL_PER_KG_FAT = 7700
FAT_CALORIE_SHARE = 0.25
MIN_SAFE_CALORIES = _env_float("MIN_SAFE_CALORIES", None)  # None = no floor

ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

DEFAULT_ACTIVITY_LEVEL = "moderate"
DEFAULT_WEEKLY_LOSS_KG = 0.5

WEEKEND_BONUS_CALORIES = _env_int("WEEKEND_BONUS_CALORIES", 800)
WEEKEND_BONUS_DAYS = 2
COMPENSATION_DAYS = 3
MIN_DAILY_CALORIES = 1200

AI_DAILY_LIMIT = _env_int("AI_DAILY_LIMIT", 10)
DEFAULT_REGION = os.getenv("DEFAULT_REGION", "PL")
