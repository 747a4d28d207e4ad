import os
from dotenv import load_dotenv
load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///speakbetter.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    ANALYSIS_JOB_TIMEOUT = int(os.getenv("ANALYSIS_JOB_TIMEOUT", "300"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CREATE_ALL = os.getenv("CREATE_ALL", "false").lower() in ("1", "true", "yes")

    # analysis tuning, see speakbetter.services.analysis_config
    FILLER_TERMS = os.getenv("FILLER_TERMS", "um,uh,uhm,er,ah,hmm,like,you know,i mean,kind of,sort of,actually,basically,literally")
    DETECT_REPETITIONS = os.getenv("DETECT_REPETITIONS", "false").lower() in ("1", "true", "yes")
    ALIGNMENT_TOLERANCE = int(os.getenv("ALIGNMENT_TOLERANCE", "2"))
    LONG_PAUSE_SECONDS = float(os.getenv("LONG_PAUSE_SECONDS", "2.0"))
    TARGET_WPM_MIN = float(os.getenv("TARGET_WPM_MIN", "120"))
    TARGET_WPM_MAX = float(os.getenv("TARGET_WPM_MAX", "160"))
    CLARITY_FILLER_WEIGHT = float(os.getenv("CLARITY_FILLER_WEIGHT", "3.0"))
    CLARITY_FILLER_CAP = float(os.getenv("CLARITY_FILLER_CAP", "60"))
    CLARITY_PACE_WEIGHT = float(os.getenv("CLARITY_PACE_WEIGHT", "0.5"))
    CLARITY_PACE_CAP = float(os.getenv("CLARITY_PACE_CAP", "40"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    # no redis in tests: the RQ wrapper runs jobs synchronously
    REDIS_URL = None
    CREATE_ALL = True
    LOG_LEVEL = "DEBUG"
