import os
from dotenv import load_dotenv

load_dotenv()

# Remote directory service (profiles, catalogs, term records)
DIRECTORY_BASE_URL = os.getenv("DIRECTORY_BASE_URL", "https://a1ce.cmkl.ac.th/api")
DIRECTORY_TIMEOUT = float(os.getenv("DIRECTORY_TIMEOUT", "10"))

# Policy tables
CURRICULUM_RULES_PATH = os.getenv("CURRICULUM_RULES_PATH", "curriculum_rules.json")
COURSE_IDENTITIES_PATH = os.getenv("COURSE_IDENTITIES_PATH", "course_identities.json")

# Offline evaluation dataset
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///a1ce_recommendation.db")

HISTORY_MAX_WORKERS = int(os.getenv("HISTORY_MAX_WORKERS", "4"))
DEFAULT_MAX_CREDIT_LOAD = float(os.getenv("DEFAULT_MAX_CREDIT_LOAD", "60"))

# Comma separated, e.g. "SOF-,LAB-"
EXCLUDED_CODE_PREFIXES = tuple(
    p.strip() for p in os.getenv("EXCLUDED_CODE_PREFIXES", "").split(",") if p.strip()
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
