import os

# Storage
DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("MONGODB_URI")
DATABASE_NAME = os.getenv("DATABASE_NAME", "devlinker")

# Security / Auth constants
SECRET_KEY = os.getenv("JWT_SECRET", "supersecretkey")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

# Runtime
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))
SEED_FILE = os.getenv(
    "SEED_FILE", os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "communities.json")
)

# CORS
DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:3000",
    "https://getdevcomm.vercel.app",
    "https://www.getdevcomm.vercel.app",
]
# Preview deployments
ORIGIN_REGEX = r"https://.*\.(vercel|netlify)\.app"


def is_production() -> bool:
    return ENVIRONMENT == "production"


def allowed_origins() -> list:
    extra = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
    frontend = os.getenv("FRONTEND_URL")
    if frontend:
        extra.append(frontend)
    return DEFAULT_ORIGINS + [o for o in extra if o not in DEFAULT_ORIGINS]
