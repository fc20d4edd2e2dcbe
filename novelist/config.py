"""Configuration management for the Novelist editor and completion relay."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Secrets
NOVELIST_ACCESS_CODE = os.getenv("NOVELIST_ACCESS_CODE")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
RELAY_URL = os.getenv("NOVELIST_RELAY_URL", f"http://localhost:{PORT}")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:4200,http://localhost:3000"
).split(",")

# Model Configuration
COMPLETION_MODEL = os.getenv("COMPLETION_MODEL", "llama-3.3-70b-versatile")
TEMPERATURE = 0.7
TOKENS_PER_WORD = 2  # Generate more than needed, trim to words afterwards
TOKEN_ENCODING = "o200k_base"

# Completion Configuration
DEFAULT_WORD_COUNT = 15
CONTEXT_WINDOW_WORDS = 200
PLACEHOLDER_TEXT = "[Musing ...]"
ERROR_MARKER_TEXT = "[Error generating completion]"
DEFAULT_AUTHOR = "Herman Hesse"

# Page Layout Configuration
MAX_LINES_PER_PAGE = 30  # overflow threshold
PAGE_BOX_LINES = 34  # rendered height of a page box
FONT_SIZE_PX = 16
LINE_HEIGHT_RATIO = 1.6
CHARS_PER_LINE = 80

# Client-side persistence
FLAG_EXPIRY_DAYS = 30
STORE_PATH = os.getenv("NOVELIST_STORE_PATH", "novelist_store.json")

# Story defaults
DEFAULT_TITLE = "The Grail Knight's Tale"
DEFAULT_PROTAGONIST = (
    "Sir Cedric is a valiant knight, distinguished by his unwavering honor and "
    "deep faith. Draped in worn armor, he is a beacon of resilience, navigating "
    "through treacherous medieval landscapes with a steadfast heart"
)
DEFAULT_OUTLINE = (
    "In the heart of the Dark Ages, a lone knight named Sir Cedric embarks on a "
    "perilous quest to find the fabled Holy Grail. Guided by whispers of prophecy "
    "and faith, he ventures through plague-ridden villages, cursed forests, and "
    "desolate castles. Along the way, he faces vengeful spirits, treacherous "
    "lords, and ancient riddles that test his courage and virtue. Haunted by "
    "visions of the Grail's power, Sir Cedric must navigate a world where loyalty "
    "is scarce, and hope is fragile. His journey promises redemption for a "
    "kingdom on the brink of ruin, or his own downfall."
)

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
